"""
Seed Environments Script
Populates an empty environments table with the demo records from the config.
Runs on startup when SEED_DEMO_DATA is enabled, or manually:

    python -m envmonitor.scripts.seed_environments [--force]
"""

import logging

import typer

from envmonitor.config.seed_data import DEMO_ENVIRONMENTS
from envmonitor.database.engine import get_engine
from envmonitor.modules.environments.store import EnvironmentStore

logger = logging.getLogger(__name__)


def seed_environments(store: EnvironmentStore, force: bool = False) -> int:
    """Insert the demo environments. Skipped when the table already has rows unless force is set."""
    existing = store.count()
    if existing and not force:
        logger.info(f"Environments table already has {existing} rows, skipping seed")
        return 0

    created_count = 0
    for env in DEMO_ENVIRONMENTS:
        record = store.create(env)
        created_count += 1
        logger.debug(f"Seeded environment: {record.id} ({record.url})")

    logger.info(f"Environments seeded: {created_count} created")
    return created_count


app = typer.Typer(help="Seed demo environments.")


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", help="Insert even if the table is not empty."),
) -> None:
    """
    Create the environments table if needed and insert the demo records.
    """
    logging.basicConfig(level=logging.INFO)
    try:
        store = EnvironmentStore(get_engine())
        store.create_schema()
        logger.info("Starting environments seeding...")
        seed_environments(store, force=force)
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
