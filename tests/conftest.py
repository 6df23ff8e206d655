"""
Pytest configuration and fixtures for filestore tests.

Tests run against an in-memory SQLite catalog (aiosqlite) and a blob
store rooted in pytest's tmp_path, so no external services are needed.
"""
import logging
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from filestore.database import get_db_session
from filestore.handlers import FileService, get_file_service
from filestore.main import app
from filestore.migrations import upgrade_catalog
from filestore.storage import BlobStore, StorageConfig

logger = logging.getLogger(__name__)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================
# Database Fixtures
# ============================================

@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create an in-memory catalog database.
    StaticPool keeps one shared connection so every session sees the same tables.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(upgrade_catalog)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


# ============================================
# Storage Fixtures
# ============================================

@pytest.fixture
def files_root(tmp_path):
    """Base directory for stored files."""
    return tmp_path / "files"


@pytest.fixture
async def blob_store(files_root) -> BlobStore:
    store = BlobStore.from_config(StorageConfig(root=str(files_root)))
    await store.ensure_root()
    return store


@pytest.fixture
def file_service(blob_store: BlobStore) -> FileService:
    return FileService(blob_store=blob_store)


# ============================================
# API Fixtures
# ============================================

@pytest.fixture
async def test_client(session_factory, file_service) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async test client with database session and file service overrides.
    Sessions commit on success and roll back on error, like the production dependency.
    """
    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_file_service] = lambda: file_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================
# Pytest Configuration
# ============================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "fast: Fast unit tests (no filesystem or database)"
    )
    config.addinivalue_line(
        "markers", "integration: Tests exercising the API with a real catalog and blob store"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests (large payloads)"
    )
