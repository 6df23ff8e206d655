"""Blob storage package for the file store.

Provides the on-disk half of every stored file: directory creation,
file I/O and pruning of emptied directories.

Examples:
    >>> from filestore.storage import BlobStore, StorageConfig
    >>> store = BlobStore(config=StorageConfig(root="./data/files"))
    >>> await store.write("docs", "readme.txt", b"hello")
"""

from filestore.storage.config import StorageConfig
from filestore.storage.paths import file_location, normalize_path, validate_location
from filestore.storage.service import BlobStore

__all__ = [
    "BlobStore",
    "StorageConfig",
    "file_location",
    "normalize_path",
    "validate_location",
]
