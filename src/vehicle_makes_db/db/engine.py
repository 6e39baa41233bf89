"""Async SQLAlchemy engine and session management.

The store is a single SQLite file shared by the scheduled sync (writer) and
the read API. File databases are opened in WAL mode with a busy timeout so
API reads never block on a sync commit.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event, make_url, pool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from vehicle_makes_db.config import get_settings
from vehicle_makes_db.db.models import Base
from vehicle_makes_db.logging import get_logger

logger = get_logger(__name__)

SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA busy_timeout=5000",
)

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _sqlite_file(database_url: str) -> Path | None:
    """Return the database file of a SQLite URL, None for other backends."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


def _apply_sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    for pragma in SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine."""
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        _engine = create_async_engine(
            database_url,
            echo=False,
            future=True,
            poolclass=pool.NullPool,  # Required for SQLite to prevent "database is locked"
        )

        database_file = _sqlite_file(database_url)
        if database_file is not None:
            database_file.parent.mkdir(parents=True, exist_ok=True)
            event.listen(_engine.sync_engine, "connect", _apply_sqlite_pragmas)
        logger.debug("Database engine created for {}", _engine.url.render_as_string())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _async_session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on clean exit and rolls back on error.

    Usage:
        async with get_session() as session:
            makes = await MakeRepository(session).find_all()
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create the vehicle_makes table if missing.

    Called before every sync run and at API startup so a fresh database
    file works without running migrations first. Schema changes go through
    Alembic.
    """
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close all connections and forget the engine.

    The next get_engine() call builds a new one from the current settings.
    """
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
