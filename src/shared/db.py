"""Schema management for RDBMS-backed providers.

The memory provider needs no schema. For sqlite/postgresql providers the
Protean models are registered by touching each repository's DAO, then the
provider's SQLAlchemy metadata creates or drops the tables.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

logger = structlog.get_logger(__name__)

RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _rdbms_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in RDBMS_PROVIDERS:
            yield name, provider


def _register_models(domain: Domain, provider_name: str) -> None:
    registry = domain.registry
    for records in (registry.aggregates, registry.entities, registry.projections):
        for _, record in records.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the tables of every RDBMS provider of ``domain``."""
    with domain.domain_context():
        for name, provider in _rdbms_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, name)
            provider._metadata.create_all(engine)
            logger.info("Schema created", domain=domain.name, provider=name)


def drop_db(domain: Domain) -> None:
    """Drop the tables of every RDBMS provider of ``domain``."""
    with domain.domain_context():
        for name, provider in _rdbms_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("Schema dropped", domain=domain.name, provider=name)
