"""SQLAlchemy models for the file catalog.

This module defines the `files` table: one row per stored file, keyed by a
synthetic integer id and looked up by its (name, path) pair.

Examples:
    >>> from filestore.models import FileRecord
    >>> record = FileRecord(
    ...     path="docs/2024",
    ...     name="report.pdf",
    ...     type="application/pdf",
    ...     size=37,
    ... )

Tests:
    - tests/unit/test_models.py::TestFileRecord
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Index, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

FILES_TABLE = "files"
NAME_PATH_INDEX = "ix_files_name_path"


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


class FileRecord(Base):
    """Catalog row describing one stored file.

    The bytes live on disk at ``<files root>/<path>/<name>``; the row is
    the authority on whether the file exists.

    Attributes:
        id: Monotonic identifier, never reused (SQLite AUTOINCREMENT)
        name: Logical file name, unique together with path by convention
        path: Logical directory path, stored without surrounding "/"
        type: Caller-supplied content type
        size: Byte length of the last successful write
    """

    __tablename__ = FILES_TABLE
    __table_args__ = (
        Index(NAME_PATH_INDEX, "name", "path"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<FileRecord(id={self.id}, path={self.path!r}, name={self.name!r})>"
