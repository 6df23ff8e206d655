"""Tests for filestore.migrations.

Covers:
    - creating the files table and index on an empty database
    - leaving a current table alone
    - restoring a missing index
    - rebuilding a table whose columns drifted
"""

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from filestore.migrations import expected_columns, upgrade_catalog
from filestore.models import FILES_TABLE, NAME_PATH_INDEX


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


def _describe(connection):
    inspector = inspect(connection)
    return {
        "columns": sorted(col["name"] for col in inspector.get_columns(FILES_TABLE)),
        "indexes": {ix["name"] for ix in inspector.get_indexes(FILES_TABLE)},
    }


class TestUpgradeCatalog:
    """Tests for upgrade_catalog()."""

    async def test_creates_table_and_index(self, engine):
        async with engine.begin() as conn:
            created = await conn.run_sync(upgrade_catalog)
            described = await conn.run_sync(_describe)

        assert created is True
        assert described["columns"] == ["id", "name", "path", "size", "type"]
        assert NAME_PATH_INDEX in described["indexes"]

    async def test_current_table_is_kept(self, engine):
        async with engine.begin() as conn:
            await conn.run_sync(upgrade_catalog)
            await conn.execute(text(
                "INSERT INTO files (name, path, type, size) VALUES ('a.txt', 'docs', 'text/plain', 1)"
            ))

        async with engine.begin() as conn:
            created = await conn.run_sync(upgrade_catalog)
            count = (await conn.execute(text("SELECT COUNT(*) FROM files"))).scalar_one()

        assert created is False
        assert count == 1

    async def test_restores_missing_index(self, engine):
        async with engine.begin() as conn:
            await conn.run_sync(upgrade_catalog)
            await conn.execute(text(f"DROP INDEX {NAME_PATH_INDEX}"))

        async with engine.begin() as conn:
            created = await conn.run_sync(upgrade_catalog)
            described = await conn.run_sync(_describe)

        assert created is False
        assert NAME_PATH_INDEX in described["indexes"]

    async def test_rebuilds_drifted_table(self, engine):
        async with engine.begin() as conn:
            await conn.execute(text(
                "CREATE TABLE files (id INTEGER PRIMARY KEY, name TEXT, location TEXT)"
            ))
            await conn.execute(text(f"CREATE INDEX {NAME_PATH_INDEX} ON files (name, location)"))
            await conn.execute(text("INSERT INTO files (name, location) VALUES ('old', 'x')"))

        async with engine.begin() as conn:
            created = await conn.run_sync(upgrade_catalog)
            described = await conn.run_sync(_describe)
            count = (await conn.execute(text("SELECT COUNT(*) FROM files"))).scalar_one()

        assert created is True
        assert described["columns"] == ["id", "name", "path", "size", "type"]
        assert NAME_PATH_INDEX in described["indexes"]
        assert count == 0

    async def test_rebuilds_when_column_type_changes(self, engine):
        async with engine.begin() as conn:
            await conn.execute(text(
                "CREATE TABLE files (id INTEGER PRIMARY KEY, name TEXT, path TEXT, "
                "type TEXT, size TEXT)"
            ))

        async with engine.begin() as conn:
            created = await conn.run_sync(upgrade_catalog)

        assert created is True


@pytest.mark.fast
def test_expected_columns_types():
    assert expected_columns() == {
        "id": int,
        "name": str,
        "path": str,
        "type": str,
        "size": int,
    }
