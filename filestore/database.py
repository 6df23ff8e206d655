"""Catalog database engine and sessions.

The catalog lives in one SQL database reached through SQLAlchemy's async
engine: SQLite through aiosqlite by default, PostgreSQL through asyncpg
when DATABASE_URL points there.

A session is the transaction scope of one request. All catalog statements
issued while handling that request commit together when the handler
returns, and roll back together when it raises.

Examples:
    >>> from filestore.database import get_session, init_db
    >>> await init_db()
    >>> async with get_session() as session:
    ...     entry = await Catalog(session).lookup_by_id(1)

Tests:
    - tests/unit/test_database.py
    - tests/unit/test_migrations.py
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event, inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from filestore.config import Settings, get_settings
from filestore.models import FILES_TABLE

logger = logging.getLogger(__name__)

# Milliseconds a SQLite writer waits on a locked database before failing
SQLITE_BUSY_TIMEOUT_MS = 5000

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(settings: Settings) -> dict[str, Any]:
    """Keyword arguments for create_async_engine for the configured backend."""
    if settings.is_sqlite:
        return {
            "echo": settings.DEBUG,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "echo": settings.DEBUG,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
    }


def _tune_sqlite(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
        cursor.close()


def get_engine() -> AsyncEngine:
    """Get the catalog engine, creating it on first use."""
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings))
        if settings.is_sqlite:
            _tune_sqlite(_engine)
        # Never log credentials
        logger.info(f"Catalog engine created: {settings.DATABASE_URL.split('@')[-1]}")

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on success and rolls back on error.

    A StoreFile whose file write fails therefore leaves no catalog row
    behind.
    """
    session = get_session_factory()()

    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> bool:
    """Create, verify or rebuild the catalog table.

    Returns:
        True if the table was (re)created.
    """
    from filestore.migrations import upgrade_catalog

    async with get_engine().begin() as conn:
        created = await conn.run_sync(upgrade_catalog)

    logger.info("Catalog table created" if created else "Catalog table verified")
    return created


async def check_db_connection() -> bool:
    """Check that the database answers and holds the catalog table."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
            has_table = await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_table(FILES_TABLE))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False

    if not has_table:
        logger.warning(f"Database reachable but table '{FILES_TABLE}' is missing")
    return has_table


async def close_db() -> None:
    """Dispose of the engine; the next get_engine() call starts fresh."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Catalog connections closed")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding the request's session."""
    async with get_session() as session:
        yield session
