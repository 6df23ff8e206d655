"""Logical path helpers for the blob store.

A stored file is addressed by a logical ``path`` (directory-like, "/"
separated) and an opaque ``name``. On disk it lives at
``<root>/<path>/<name>``.

Examples:
    >>> normalize_path("/docs/2024/")
    'docs/2024'
    >>> path_segments("docs/2024")
    ['docs', '2024']
"""

from __future__ import annotations

from pathlib import Path

from filestore.errors import InvalidRequestError

SEPARATOR = "/"
CURRENT_DIR = "."
PARENT_DIR = ".."


def normalize_path(path: str) -> str:
    """Canonical form of a logical path.

    Empty and "." components are dropped, so every spelling that maps to
    the same directory on disk maps to the same catalog path.

    Args:
        path: Caller-supplied logical path.

    Returns:
        The non-empty components joined by "/", without leading or
        trailing separators.

    Examples:
        >>> normalize_path("a/b/")
        'a/b'
        >>> normalize_path("/a//./b")
        'a/b'
        >>> normalize_path("///")
        ''
    """
    return SEPARATOR.join(path_segments(path))


def path_segments(path: str) -> list[str]:
    """Split a logical path into its directory components, skipping "" and "."."""
    return [segment for segment in path.split(SEPARATOR) if segment not in ("", CURRENT_DIR)]


def validate_location(path: str, name: str) -> None:
    """Reject locations that could resolve outside the blob root.

    Args:
        path: Logical path (normalized or not).
        name: File name.

    Raises:
        InvalidRequestError: If the path has a ".." segment or a NUL, or the
            name is not a single path component.
    """
    if "\x00" in path:
        raise InvalidRequestError("Invalid path: NUL characters are not allowed")
    if PARENT_DIR in path_segments(path):
        raise InvalidRequestError(f"Invalid path '{path}': '..' segments are not allowed")
    if SEPARATOR in name or "\x00" in name or name in (CURRENT_DIR, PARENT_DIR):
        raise InvalidRequestError(f"Invalid name '{name}'")


def directory_for(root: str | Path, path: str) -> Path:
    """Directory that holds files stored under a logical path."""
    return Path(root).joinpath(*path_segments(path))


def file_location(root: str | Path, path: str, name: str) -> Path:
    """Full on-disk location of a stored file."""
    return directory_for(root, path) / name
