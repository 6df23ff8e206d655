"""Catalog - relational index over stored files.

Wraps the `files` table behind a small set of statements bound to one
session (one transaction). Paths are normalized on the way in, so
"/a/b/", "a/b" and "a/b/" always address the same row.

There is no unique constraint on (name, path). Writers keep the pair
unique by calling `lookup_by_path_name` first and choosing `update` or
`insert` from the result.

Examples:
    >>> catalog = Catalog(session)
    >>> entry = await catalog.lookup_by_path_name("/docs/2024/", "report.pdf")
    >>> if entry is None:
    ...     file_id = await catalog.insert("docs/2024", "report.pdf", "application/pdf", 37)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from filestore.errors import QueryError
from filestore.models import FileRecord
from filestore.storage.paths import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Metadata for one stored file."""

    id: int
    path: str
    name: str
    type: str
    size: int


_ENTRY_COLUMNS = (
    FileRecord.id,
    FileRecord.path,
    FileRecord.name,
    FileRecord.type,
    FileRecord.size,
)


class Catalog:
    """Catalog statements scoped to one database session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _first(self, stmt: Select, failure: str) -> CatalogEntry | None:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise QueryError(f"{failure}: {e}") from e
        row = result.first()
        return CatalogEntry(*row) if row is not None else None

    async def _write(self, stmt: Any, failure: str) -> int:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise QueryError(f"{failure}: {e}") from e
        return result.rowcount

    async def lookup_by_id(self, file_id: int) -> CatalogEntry | None:
        """Find the entry with the given id."""
        stmt = select(*_ENTRY_COLUMNS).where(FileRecord.id == file_id).limit(1)
        return await self._first(stmt, "Query by id failed")

    async def lookup_by_path_name(self, path: str, name: str) -> CatalogEntry | None:
        """Find the entry stored at (path, name)."""
        stmt = (
            select(*_ENTRY_COLUMNS)
            .where(FileRecord.name == name, FileRecord.path == normalize_path(path))
            .order_by(FileRecord.id)
            .limit(1)
        )
        return await self._first(stmt, "Query by name and path failed")

    async def insert(self, path: str, name: str, type: str, size: int) -> int:
        """Add a new entry.

        Returns:
            The newly assigned id.

        Raises:
            QueryError: If the insert fails.
        """
        record = FileRecord(path=normalize_path(path), name=name, type=type, size=size)
        self.session.add(record)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise QueryError(f"Query failed (inserting): {e}") from e
        logger.debug(f"Catalog insert: {record!r}")
        return record.id

    async def update(self, file_id: int, path: str, name: str, type: str, size: int) -> None:
        """Overwrite every field of an existing entry."""
        stmt = (
            update(FileRecord)
            .where(FileRecord.id == file_id)
            .values(path=normalize_path(path), name=name, type=type, size=size)
        )
        await self._write(stmt, "Query failed (updating)")

    async def delete_by_id(self, file_id: int) -> int:
        """Delete the entry with the given id.

        Returns:
            Number of rows removed.
        """
        stmt = delete(FileRecord).where(FileRecord.id == file_id)
        return await self._write(stmt, "Query failed (by id)")

    async def delete_by_path_name(self, path: str, name: str) -> int:
        """Delete every entry stored at (path, name).

        Returns:
            Number of rows removed.
        """
        stmt = delete(FileRecord).where(
            FileRecord.path == normalize_path(path),
            FileRecord.name == name,
        )
        return await self._write(stmt, "Query failed (delete)")
