"""Unit tests for catalog database management.

Tests for filestore/database.py - engine options, session scope, init and
health checks against a throwaway SQLite file.

Run with:
    pytest tests/unit/test_database.py -v
"""

import pytest

from filestore import database
from filestore.catalog import Catalog
from filestore.config import Settings


@pytest.fixture
async def sqlite_settings(tmp_path, monkeypatch):
    """Point the module at a fresh SQLite catalog and reset it afterwards."""
    settings = Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    monkeypatch.setattr(database, "get_settings", lambda: settings)
    await database.close_db()
    yield settings
    await database.close_db()


@pytest.mark.fast
class TestEngineOptions:
    """Tests for engine_options()."""

    def test_sqlite_options(self):
        options = database.engine_options(Settings(DATABASE_URL="sqlite+aiosqlite:///./x.db"))
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_size" not in options

    def test_postgres_options(self):
        options = database.engine_options(
            Settings(DATABASE_URL="postgresql+asyncpg://user:secret@db/files")
        )
        assert options["pool_pre_ping"] is True
        assert options["pool_size"] == 5
        assert "connect_args" not in options


class TestInitDb:
    """Tests for init_db() and check_db_connection()."""

    async def test_creates_then_verifies(self, sqlite_settings):
        assert await database.init_db() is True
        assert await database.init_db() is False

    async def test_health_requires_catalog_table(self, sqlite_settings):
        assert await database.check_db_connection() is False
        await database.init_db()
        assert await database.check_db_connection() is True

    async def test_close_resets_engine(self, sqlite_settings):
        engine = database.get_engine()
        await database.close_db()
        assert database.get_engine() is not engine


class TestGetSession:
    """Tests for the get_session() transaction scope."""

    async def test_commits_on_success(self, sqlite_settings):
        await database.init_db()

        async with database.get_session() as session:
            file_id = await Catalog(session).insert("docs", "a.txt", "text/plain", 1)

        async with database.get_session() as session:
            assert await Catalog(session).lookup_by_id(file_id) is not None

    async def test_rolls_back_on_error(self, sqlite_settings):
        await database.init_db()

        with pytest.raises(RuntimeError):
            async with database.get_session() as session:
                await Catalog(session).insert("docs", "a.txt", "text/plain", 1)
                raise RuntimeError("file write failed")

        async with database.get_session() as session:
            assert await Catalog(session).lookup_by_path_name("docs", "a.txt") is None
