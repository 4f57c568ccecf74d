"""Create the school database and its tables.

Run once against a fresh server::

    python -m school_service.setup_db
"""

from __future__ import annotations

import asyncio
import logging

from devkit.config import ServiceSettings, load_settings
from devkit.db import create_database_if_not_exists
from devkit.observability import configure_logging

from school_service.store import SchoolStore

logger = logging.getLogger(__name__)


async def setup_database(settings: ServiceSettings) -> None:
    database_url = settings.database_url()
    if database_url is None:
        raise RuntimeError("STORE_BACKEND=memory has no database to set up")

    server_url = settings.server_url()
    # SQLite creates its file on connect; Postgres has no IF NOT EXISTS for databases.
    if server_url.get_backend_name() == "mysql" and settings.database_name:
        await create_database_if_not_exists(server_url, settings.database_name)

    store = SchoolStore(database_url=database_url)
    try:
        await store.ensure_ready()
    finally:
        await store.close()
    logger.info("database_setup_completed", extra={"database": settings.database_name})


def main() -> None:
    settings = load_settings("school-service")
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(setup_database(settings))


if __name__ == "__main__":
    main()
