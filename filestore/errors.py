"""Domain errors raised by the catalog, the blob store and request handlers.

Each error carries the HTTP status code the API layer renders it with.
"""

from __future__ import annotations


class FileStoreError(Exception):
    """Base class for all filestore errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(FileStoreError):
    """No catalog row matches the given id or (path, name)."""

    status_code = 404


class InvalidRequestError(FileStoreError):
    """A required parameter or the payload is missing, malformed or too large."""

    status_code = 400


class QueryError(FileStoreError):
    """A catalog read or write statement failed."""

    status_code = 502


class BlobIOError(FileStoreError):
    """A filesystem operation on the blob store failed."""

    status_code = 502


class StorageConfigurationError(FileStoreError):
    """The blob store base directory is unusable."""
