from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from devkit.db import normalize_postgres_dsn


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SERVICE_NAME: str = "service"
    APP_ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    STORE_BACKEND: Literal["sql", "memory"] = "sql"
    DATABASE_URL: str | None = None
    DB_DRIVER: str = "mysql+aiomysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASS: str = ""
    DB_NAME: str = "school_management"

    REDIS_URL: str | None = None
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"

    @property
    def database_name(self) -> str | None:
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL).database
        return self.DB_NAME

    def database_url(self) -> str | None:
        """Async SQLAlchemy URL of the school database, or None for the in-memory backend."""
        if self.STORE_BACKEND == "memory":
            return None
        if self.DATABASE_URL:
            return normalize_postgres_dsn(self.DATABASE_URL)
        return self.server_url().set(database=self.DB_NAME).render_as_string(hide_password=False)

    def server_url(self) -> URL:
        """URL of the database server with no database selected."""
        if self.DATABASE_URL:
            # URL.set() treats database=None as "unchanged", so rebuild from parts.
            url = make_url(normalize_postgres_dsn(self.DATABASE_URL))
            return URL.create(
                drivername=url.drivername,
                username=url.username,
                password=url.password,
                host=url.host,
                port=url.port,
                query=url.query,
            )
        return URL.create(
            drivername=self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASS or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
        )


def load_settings(service_name: str, **overrides: object) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name, **overrides)
