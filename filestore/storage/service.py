"""Blob store - filesystem side of the file store.

Materializes, reads and removes file bytes under the configured root, and
creates/prunes the directory tree mirroring each logical path. Directories
have no catalog representation: they are created on write and pruned on
delete, so every step here is safe to repeat.

Examples:
    >>> from filestore.storage.service import BlobStore
    >>> store = BlobStore.from_config(StorageConfig(root="/var/cache/filestore"))
    >>> await store.ensure_root()
    >>> await store.write("docs/2024", "report.pdf", b"%PDF-1.7 ...")
"""

from __future__ import annotations

import logging
from pathlib import Path

from filestore.errors import BlobIOError, StorageConfigurationError
from filestore.storage.backends.base import StorageBackend
from filestore.storage.backends.local import LocalStorageBackend
from filestore.storage.config import StorageConfig
from filestore.storage.paths import SEPARATOR, directory_for, file_location, path_segments

logger = logging.getLogger(__name__)


class BlobStore:
    """Filesystem tree holding stored file bytes.

    Backend failures arrive as OSError, or as ValueError for locations the
    OS cannot represent (an embedded NUL).

    Attributes:
        config: Storage configuration.
        backend: Storage backend for I/O.
    """

    def __init__(self, config: StorageConfig, backend: StorageBackend | None = None) -> None:
        self.config = config
        self.backend = backend or LocalStorageBackend()

    @classmethod
    def from_config(cls, config: StorageConfig) -> "BlobStore":
        """Create a BlobStore from config."""
        return cls(config=config, backend=LocalStorageBackend())

    @property
    def root(self) -> Path:
        return Path(self.config.root)

    def locate(self, path: str, name: str) -> str:
        """On-disk location of the file stored at (path, name)."""
        return str(file_location(self.root, path, name))

    async def ensure_root(self) -> None:
        """Create the root directory if it is missing.

        Raises:
            StorageConfigurationError: If the root cannot be created.
        """
        try:
            await self.backend.ensure_directory_exists(str(self.root))
        except (OSError, ValueError) as e:
            raise StorageConfigurationError(
                f"Could not create files directory: {self.root} ({e})"
            ) from e
        logger.info(f"Files directory ready: {self.root}")

    async def write(self, path: str, name: str, content: bytes) -> str:
        """Write content at (path, name), creating directories as needed.

        Args:
            path: Logical path.
            name: File name.
            content: Bytes to store; any previous content is replaced.

        Returns:
            The on-disk location written.

        Raises:
            BlobIOError: If a directory or the file cannot be written.
        """
        directory = str(directory_for(self.root, path))
        location = self.locate(path, name)

        try:
            await self.backend.ensure_directory_exists(directory)
            await self.backend.write_file(location, content)
        except (OSError, ValueError) as e:
            raise BlobIOError(f"Failed to write file '{location}': {e}") from e

        logger.info(f"File written: {location} ({len(content)} bytes)")
        return location

    async def read(self, path: str, name: str) -> bytes:
        """Load the full content stored at (path, name).

        Raises:
            BlobIOError: If the file cannot be read.
        """
        location = self.locate(path, name)
        try:
            return await self.backend.read_file(location)
        except (OSError, ValueError) as e:
            raise BlobIOError(f"Failed to read file '{location}': {e}") from e

    async def delete(self, path: str, name: str) -> str | None:
        """Remove the file stored at (path, name).

        Returns:
            None on success, otherwise a warning describing the failure.
        """
        location = self.locate(path, name)
        try:
            await self.backend.delete_file(location)
        except (OSError, ValueError) as e:
            warning = f"Failed deleting file '{location}': {e}"
            logger.warning(warning)
            return warning

        logger.info(f"File deleted: {location}")
        return None

    async def prune_empty_ancestors(self, path: str) -> list[str]:
        """Remove empty directories from ``root/path`` up to, not including, root.

        Stops at the first directory that still has entries. Directories that
        are already gone are skipped. Failures are logged, never raised.

        Args:
            path: Logical path whose directories should be pruned.

        Returns:
            The directories removed, deepest first.
        """
        removed: list[str] = []
        segments = path_segments(path)

        while segments:
            directory = str(directory_for(self.root, SEPARATOR.join(segments)))
            try:
                if await self.backend.exists(directory):
                    if not await self.backend.remove_if_empty(directory):
                        break
                    removed.append(directory)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed deleting path '{directory}': {e}")
                break
            segments.pop()

        if removed:
            logger.info(f"Pruned {len(removed)} empty directories under {self.root}")
        return removed

    async def remove(self, path: str, name: str) -> list[str]:
        """Delete a file, then prune its empty ancestor directories.

        Returns:
            Warnings raised along the way (empty on full success).
        """
        warnings: list[str] = []
        warning = await self.delete(path, name)
        if warning:
            warnings.append(warning)
        await self.prune_empty_ancestors(path)
        return warnings
