"""Local filesystem storage backend using pathlib."""

from __future__ import annotations

import asyncio
import errno
from pathlib import Path

from filestore.storage.backends.base import StorageBackend

# Permissions for lazily created path components (rwxrwxr-x, before umask)
DIRECTORY_MODE = 0o775


class LocalStorageBackend(StorageBackend):
    """Pathlib-based local filesystem storage backend."""

    async def write_file(self, path: str, data: bytes) -> None:
        """Write binary data to a local file off the event loop."""
        await asyncio.to_thread(Path(path).write_bytes, data)

    async def read_file(self, path: str) -> bytes:
        """Read binary data from a local file off the event loop."""
        return await asyncio.to_thread(Path(path).read_bytes)

    async def delete_file(self, path: str) -> None:
        """Unlink a local file."""
        await asyncio.to_thread(Path(path).unlink)

    async def exists(self, path: str) -> bool:
        """Check if a local path exists."""
        return Path(path).exists()

    async def ensure_directory_exists(self, path: str) -> None:
        """Create a local directory tree, tolerating existing components."""
        Path(path).mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)

    async def is_empty_directory(self, path: str) -> bool:
        """Check for a local directory with zero entries."""
        p = Path(path)
        if not p.is_dir():
            return False
        return next(p.iterdir(), None) is None

    async def remove_if_empty(self, path: str) -> bool:
        """Remove a local directory if it is empty.

        A directory that gains an entry between the check and the removal
        is left in place.
        """
        if not await self.is_empty_directory(path):
            return False
        try:
            Path(path).rmdir()
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                return False
            raise
        return True
