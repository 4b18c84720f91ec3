import pytest
from ordering.catalogue import reset_catalogue, set_catalogue
from ordering.catalogue.fake_adapter import InMemoryCatalogue
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield
        for _, provider in current_domain.providers.items():
            provider._data_reset()
    reset_catalogue()


@pytest.fixture()
def catalogue():
    """A fresh in-memory catalogue installed as the active one."""
    fake = InMemoryCatalogue()
    set_catalogue(fake)
    return fake
