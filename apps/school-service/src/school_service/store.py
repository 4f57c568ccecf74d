from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TypeVar

from devkit.db import AsyncDatabaseManager, Base, create_all_tables, is_connection_error
from devkit.timezone import now_utc
from sqlalchemy import DateTime, Double, Integer, String, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

T = TypeVar("T")
logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised for any connectivity or constraint failure in the record store."""


@dataclass
class School:
    id: int
    name: str
    address: str
    latitude: float
    longitude: float
    created_at: datetime = field(default_factory=now_utc)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class SchoolORM(Base):
    __tablename__ = "schools"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Double, nullable=False)
    longitude: Mapped[float] = mapped_column(Double, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, server_default=func.now()
    )


class SchoolStore:
    """Append-only school records, in a SQL database or in process memory.

    Records come back from ``list_all`` in ascending id order, which is the
    order the proximity ranking falls back to for equal distances.
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._items: list[School] = []
        self._next_id = 1
        self._db = AsyncDatabaseManager(database_url) if database_url else None
        self._orm_ready = False
        self._init_lock = asyncio.Lock()

    @property
    def backend(self) -> str:
        return "memory" if self._db is None else "sql"

    async def ensure_ready(self) -> None:
        await self._guard(self._ensure_orm_ready)

    async def close(self) -> None:
        if self._db is not None:
            await self._db.disconnect()
            self._orm_ready = False

    async def insert(self, name: str, address: str, latitude: float, longitude: float) -> int:
        if self._db is None:
            school = School(id=self._next_id, name=name, address=address, latitude=latitude, longitude=longitude)
            self._items.append(school)
            self._next_id += 1
            return school.id

        async def _run(session: AsyncSession) -> int:
            row = SchoolORM(name=name, address=address, latitude=latitude, longitude=longitude)
            session.add(row)
            await session.flush()
            return row.id

        return await self._guard(lambda: self._run_in_session(_run))

    async def list_all(self) -> list[School]:
        if self._db is None:
            return list(self._items)

        async def _run(session: AsyncSession) -> list[School]:
            rows = (await session.scalars(select(SchoolORM).order_by(SchoolORM.id))).all()
            return [self._to_entity(row) for row in rows]

        return await self._guard(lambda: self._run_in_session(_run))

    async def _run_in_session(self, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        await self._ensure_orm_ready()
        assert self._db is not None
        return await self._db.run_with_session(fn)

    async def _ensure_orm_ready(self) -> None:
        if self._db is None or self._orm_ready:
            return
        async with self._init_lock:
            if self._orm_ready:
                return
            await self._db.connect()
            await create_all_tables(self._db.engine, Base.metadata)
            self._orm_ready = True

    async def _guard(self, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await operation()
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "storage_failed",
                extra={
                    "component": "school_store",
                    "connection_error": isinstance(exc, OSError) or is_connection_error(exc),
                    "error": str(exc),
                },
            )
            raise StorageError(str(exc)) from exc

    def _to_entity(self, row: SchoolORM) -> School:
        created_at = row.created_at
        # MySQL DATETIME and SQLite drop the offset; stored values are UTC.
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return School(
            id=row.id,
            name=row.name,
            address=row.address,
            latitude=row.latitude,
            longitude=row.longitude,
            created_at=created_at,
        )
