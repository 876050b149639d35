"""Database connection and storage utilities."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from datetime import UTC, datetime

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return current UTC time as timezone-naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Database:
    """An explicitly constructed relational store.

    File-backed SQLite (or any async SQLAlchemy URL) is durable. An in-memory
    SQLite URL keeps everything in a single shared connection and is lost when
    the process exits.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        engine_kwargs: dict = {"echo": echo}
        if self.is_in_memory:
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @property
    def is_in_memory(self) -> bool:
        return ":memory:" in self.url

    async def init_models(self) -> None:
        """Create all tables that do not exist yet."""
        import placement_portal.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        if self.is_in_memory:
            logger.warning("Using in-memory database; data will not survive a restart")

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Dependency to get the store attached to the running application."""
    return request.app.state.database


async def get_session(
    database: Database = Depends(get_database),
) -> AsyncIterator[AsyncSession]:
    """Dependency yielding one session per request.

    Services commit explicitly; anything left uncommitted is rolled back here.
    """
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
