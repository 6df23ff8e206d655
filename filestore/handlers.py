"""Request handlers for FetchFile, StoreFile and DeleteFile.

Each handler receives the request's named string parameters, the optional
payload and the session that scopes the current transaction. Catalog
statements always run before filesystem work:

- a failing catalog statement aborts before anything on disk changes;
- a failing file write during StoreFile fails the request;
- a failing file delete during DeleteFile is reported as a warning, since
  the catalog row is already gone and the catalog decides existence.

Examples:
    >>> service = FileService(blob_store)
    >>> stored = await service.store_file(
    ...     session,
    ...     {"path": "/docs/2024", "name": "report.pdf", "type": "application/pdf"},
    ...     payload,
    ... )
    >>> fetched = await service.fetch_file(session, {"id": str(stored.id)})

Tests:
    - tests/unit/test_handlers.py
    - tests/integration/test_api_files.py
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from filestore.catalog import Catalog, CatalogEntry
from filestore.config import DEFAULT_MAX_CONTENT_BYTES, DEFAULT_MAX_PARAM_LENGTH, get_settings
from filestore.errors import InvalidRequestError, NotFoundError
from filestore.storage import BlobStore, StorageConfig, normalize_path, validate_location

logger = logging.getLogger(__name__)


@dataclass
class FetchedFile:
    """Catalog metadata together with the stored bytes."""

    entry: CatalogEntry
    content: bytes


@dataclass
class StoredFile:
    """Outcome of StoreFile."""

    id: int
    created: bool


@dataclass
class DeletedFile:
    """Outcome of DeleteFile.

    Attributes:
        id: Id addressed by the request, if any.
        path: Normalized logical path of the removed file.
        name: Name of the removed file.
        rows: Catalog rows removed.
        warnings: Filesystem problems that did not fail the request.
    """

    id: int | None
    path: str
    name: str
    rows: int
    warnings: list[str] = field(default_factory=list)


class FileService:
    """Composes the catalog and the blob store into request handlers."""

    def __init__(
        self,
        blob_store: BlobStore,
        max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES,
        max_param_length: int = DEFAULT_MAX_PARAM_LENGTH,
    ) -> None:
        self.blob_store = blob_store
        self.max_content_bytes = max_content_bytes
        self.max_param_length = max_param_length

    # Parameter helpers

    def _require(self, params: Mapping[str, str], key: str) -> str:
        value = params.get(key) or ""
        if not value:
            raise InvalidRequestError(f"Missing {key}")
        if len(value) > self.max_param_length:
            raise InvalidRequestError(
                f"Parameter {key} too long, {self.max_param_length} characters max"
            )
        return value

    @staticmethod
    def _content_type(value: str) -> str:
        # Sent back verbatim as the Content-Type header on fetch
        if not (value.isascii() and value.isprintable()):
            raise InvalidRequestError(f"Invalid type {value!r}: printable ASCII only")
        return value

    def check_content_size(self, size: int) -> None:
        """Reject payloads larger than the configured ceiling.

        Raises:
            InvalidRequestError: With status 413 when size is over the limit.
        """
        if size > self.max_content_bytes:
            raise InvalidRequestError(
                f"Content too large, {self.max_content_bytes} bytes max",
                status_code=413,
            )

    @staticmethod
    def _file_id(params: Mapping[str, str]) -> int | None:
        raw = params.get("id") or ""
        if not raw:
            return None
        try:
            file_id = int(raw)
        except ValueError:
            raise InvalidRequestError(f"Invalid file id '{raw}'") from None
        if file_id < 0:
            raise InvalidRequestError(f"Invalid file id '{raw}'")
        return file_id

    @staticmethod
    def _location(params: Mapping[str, str]) -> tuple[str, str] | None:
        path = params.get("path") or ""
        name = params.get("name") or ""
        if not path or not name:
            return None
        validate_location(path, name)
        return normalize_path(path), name

    # Handlers

    async def fetch_file(self, session: AsyncSession, params: Mapping[str, str]) -> FetchedFile:
        """FetchFile(id) or FetchFile(path, name).

        The id is tried first; when it does not resolve and a path and name
        are also given, the pair is looked up instead.

        Raises:
            NotFoundError: If nothing matches.
            QueryError: If a lookup statement fails.
            BlobIOError: If the stored bytes cannot be read.
        """
        catalog = Catalog(session)
        file_id = self._file_id(params)

        entry = None
        if file_id is not None:
            entry = await catalog.lookup_by_id(file_id)
        if entry is None:
            location = self._location(params)
            if location is not None:
                entry = await catalog.lookup_by_path_name(*location)
        if entry is None:
            raise NotFoundError("No match found")

        content = await self.blob_store.read(entry.path, entry.name)
        return FetchedFile(entry=entry, content=content)

    async def store_file(
        self,
        session: AsyncSession,
        params: Mapping[str, str],
        payload: bytes | None,
    ) -> StoredFile:
        """StoreFile(path, name, type) with the payload as content.

        Creates the file, or replaces the content and metadata of the file
        already stored at (path, name) while keeping its id.

        Raises:
            InvalidRequestError: If a parameter or the payload is rejected.
            QueryError: If a catalog statement fails (nothing is written).
            BlobIOError: If the file cannot be written.
        """
        path = self._require(params, "path")
        name = self._require(params, "name")
        content_type = self._content_type(self._require(params, "type"))
        validate_location(path, name)

        if not payload:
            raise InvalidRequestError("Missing content body")
        self.check_content_size(len(payload))

        path = normalize_path(path)
        size = len(payload)
        catalog = Catalog(session)

        existing = await catalog.lookup_by_path_name(path, name)
        if existing is None:
            file_id = await catalog.insert(path, name, content_type, size)
        else:
            file_id = existing.id
            await catalog.update(file_id, path, name, content_type, size)

        await self.blob_store.write(path, name, payload)

        logger.info(
            f"{'Stored' if existing is None else 'Replaced'} file {file_id}: "
            f"{path}/{name} ({size} bytes)"
        )
        return StoredFile(id=file_id, created=existing is None)

    async def delete_file(self, session: AsyncSession, params: Mapping[str, str]) -> DeletedFile:
        """DeleteFile(id) or DeleteFile(path, name).

        Raises:
            NotFoundError: If the id does not match any file.
            InvalidRequestError: If neither an id nor a path and name are given.
            QueryError: If a catalog statement fails.
        """
        catalog = Catalog(session)
        file_id = self._file_id(params)

        if file_id is not None:
            entry = await catalog.lookup_by_id(file_id)
            if entry is None:
                raise NotFoundError("No match found")
            rows = await catalog.delete_by_id(file_id)
            path, name = entry.path, entry.name
        else:
            location = self._location(params)
            if location is None:
                raise InvalidRequestError("Missing file id or name and path")
            path, name = location
            rows = await catalog.delete_by_path_name(path, name)

        warnings = await self.blob_store.remove(path, name)

        logger.info(f"Deleted file {path}/{name} ({rows} catalog rows)")
        return DeletedFile(id=file_id, path=path, name=name, rows=rows, warnings=warnings)


@lru_cache
def get_file_service() -> FileService:
    """Get the process-wide file service (FastAPI dependency)."""
    settings = get_settings()
    return FileService(
        blob_store=BlobStore.from_config(StorageConfig.from_settings(settings)),
        max_content_bytes=settings.MAX_CONTENT_BYTES,
        max_param_length=settings.MAX_PARAM_LENGTH,
    )
