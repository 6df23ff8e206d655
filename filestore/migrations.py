"""Startup schema migration for the file catalog.

`upgrade_catalog` runs once inside `init_db()`. It makes sure the `files`
table and its (name, path) lookup index exist, and rebuilds both when the
table found in the database no longer matches `FileRecord`.

Rebuilding drops every catalog row. Files already on disk are left alone.

Examples:
    >>> async with engine.begin() as conn:
    ...     created = await conn.run_sync(upgrade_catalog)
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Index, inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.reflection import Inspector

from filestore.models import FILES_TABLE, NAME_PATH_INDEX, FileRecord

logger = logging.getLogger(__name__)


def _python_type(sql_type: Any) -> type | None:
    try:
        return sql_type.python_type
    except NotImplementedError:
        return None


def expected_columns() -> dict[str, type | None]:
    """Column name -> Python type for the current `FileRecord` definition."""
    return {col.name: _python_type(col.type) for col in FileRecord.__table__.columns}


def schema_matches(inspector: Inspector) -> bool:
    """Check the reflected `files` table against `FileRecord`.

    Columns are compared by name and Python type so that dialect spellings
    (TEXT vs VARCHAR, INTEGER vs BIGINT) of the same shape still match.
    """
    reflected = {
        col["name"]: _python_type(col["type"])
        for col in inspector.get_columns(FILES_TABLE)
    }
    if reflected != expected_columns():
        return False

    pk = inspector.get_pk_constraint(FILES_TABLE).get("constrained_columns") or []
    return list(pk) == ["id"]


def _name_path_index() -> Index:
    return next(ix for ix in FileRecord.__table__.indexes if ix.name == NAME_PATH_INDEX)


def upgrade_catalog(connection: Connection) -> bool:
    """Create, verify or rebuild the catalog table.

    Args:
        connection: Synchronous connection (use with ``run_sync``).

    Returns:
        True if the table was (re)created, False if it was already current.
    """
    inspector = inspect(connection)

    if inspector.has_table(FILES_TABLE):
        if schema_matches(inspector):
            index_names = {ix["name"] for ix in inspector.get_indexes(FILES_TABLE)}
            if NAME_PATH_INDEX not in index_names:
                _name_path_index().create(connection)
                logger.info(f"Created missing index {NAME_PATH_INDEX}")
            return False

        logger.warning(f"Table '{FILES_TABLE}' does not match the expected schema, rebuilding")
        connection.execute(text(f"DROP INDEX IF EXISTS {NAME_PATH_INDEX}"))
        connection.execute(text(f"DROP TABLE {FILES_TABLE}"))

    FileRecord.__table__.create(connection)
    logger.info(f"Created table '{FILES_TABLE}' with index {NAME_PATH_INDEX}")
    return True
