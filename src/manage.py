"""Cart engine database management CLI.

Creates and drops the tables of the bounded contexts against the database
configured for the active environment (``PROTEAN_ENV``).

Usage:
    python src/manage.py setup-db                    # Create all tables
    python src/manage.py drop-db --domain identity   # Drop one context's tables
"""

import argparse
import sys

import structlog

CONTEXTS = ("ordering", "identity")

logger = structlog.get_logger(__name__)


def _selected(names=None) -> dict:
    from identity.domain import identity
    from ordering.domain import ordering

    registry = {"ordering": ordering, "identity": identity}
    return {name: registry[name] for name in (names or CONTEXTS)}


def _run(action, names=None) -> None:
    """Initialize each selected context and hand it to ``action``."""
    for name, domain in _selected(names).items():
        domain.init()
        logger.info("Context initialized", context=name, action=action.__name__)
        action(domain)
        print(f"{name}: {action.__name__} complete")


def main(argv=None) -> int:
    from shared.db import drop_db, setup_db
    from shared.logging import configure_logging

    configure_logging()

    parser = argparse.ArgumentParser(description="Cart engine database management")
    commands = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("setup-db", "Create the tables of the selected contexts"),
        ("drop-db", "Drop the tables of the selected contexts"),
    ):
        sub = commands.add_parser(command, help=help_text)
        sub.add_argument(
            "--domain",
            choices=CONTEXTS,
            nargs="*",
            help="Context(s) to target (default: all)",
        )

    args = parser.parse_args(argv)
    actions = {"setup-db": setup_db, "drop-db": drop_db}
    _run(actions[args.command], args.domain)
    return 0


if __name__ == "__main__":
    sys.exit(main())
