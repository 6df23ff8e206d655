"""Storage backends for blob I/O."""

from filestore.storage.backends.base import StorageBackend
from filestore.storage.backends.local import LocalStorageBackend

__all__ = ["StorageBackend", "LocalStorageBackend"]
