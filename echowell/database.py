"""Async engine and session management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from echowell.config.settings import settings

# Importing the models registers every table on Base.metadata.
from echowell.models import Base

logger = logging.getLogger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _create_engine() -> AsyncEngine:
    url = settings.database.url
    options: dict[str, Any] = {"echo": settings.debug}

    if url.startswith("postgresql"):
        options["pool_pre_ping"] = True

    if settings.database.serverless or settings.debug:
        # Serverless Postgres pauses between requests; never hold idle connections.
        options["poolclass"] = NullPool

    created = create_async_engine(url, **options)

    if _is_sqlite(url):
        # SQLite leaves ON DELETE clauses inert unless asked per connection.
        @event.listens_for(created.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return created


engine: AsyncEngine = _create_engine()

SessionFactory = async_sessionmaker(
    engine,
    expire_on_commit=False,
    class_=AsyncSession,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with SessionFactory() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with session_scope() as session:
        yield session


async def init_models() -> None:
    """Create any missing tables from the ORM metadata."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Ensured %s database tables.", len(Base.metadata.tables))


async def ping_database() -> bool:
    """True when a trivial query succeeds against the configured database."""

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.warning("Database ping failed", exc_info=True)
        return False
    return True


async def dispose_engine() -> None:
    await engine.dispose()
