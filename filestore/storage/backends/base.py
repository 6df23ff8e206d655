"""Abstract base class for storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract storage backend for blob I/O.

    Implementations handle file reads and writes plus the directory
    primitives the blob store builds on. Failures surface as ``OSError``;
    the blob store decides whether they are fatal.
    """

    @abstractmethod
    async def write_file(self, path: str, data: bytes) -> None:
        """Write binary data to a file, replacing any previous content.

        The parent directory must already exist.

        Args:
            path: Full file path.
            data: Binary data to write.
        """

    @abstractmethod
    async def read_file(self, path: str) -> bytes:
        """Read the full content of a file.

        Args:
            path: Full file path.

        Returns:
            The file's bytes.
        """

    @abstractmethod
    async def delete_file(self, path: str) -> None:
        """Delete a single file.

        Args:
            path: Full file path.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a path exists.

        Args:
            path: Path to check.

        Returns:
            True if the path exists.
        """

    @abstractmethod
    async def ensure_directory_exists(self, path: str) -> None:
        """Create a directory and any missing parents.

        An existing directory is not an error.

        Args:
            path: Directory path.
        """

    @abstractmethod
    async def is_empty_directory(self, path: str) -> bool:
        """Check whether a path is a directory with no entries.

        Args:
            path: Directory path.

        Returns:
            False for missing paths, files and non-empty directories.
        """

    @abstractmethod
    async def remove_if_empty(self, path: str) -> bool:
        """Remove a directory only if it has no entries.

        Args:
            path: Directory path.

        Returns:
            True if the directory was removed, False if it was not empty.
        """
