"""Common runtime devkit for service infrastructure concerns."""

from devkit.config import ServiceSettings, load_settings
from devkit.db import (
    AsyncDatabaseManager,
    Base,
    create_all_tables,
    create_async_engine,
    create_database_if_not_exists,
    create_session_factory,
    is_connection_error,
    normalize_postgres_dsn,
)
from devkit.observability import configure_access_log_filter, configure_logging, configure_otel
from devkit.timezone import now_utc

__all__ = [
    "AsyncDatabaseManager",
    "Base",
    "ServiceSettings",
    "configure_access_log_filter",
    "configure_logging",
    "configure_otel",
    "create_all_tables",
    "create_async_engine",
    "create_database_if_not_exists",
    "create_session_factory",
    "is_connection_error",
    "load_settings",
    "normalize_postgres_dsn",
    "now_utc",
]
