"""Filestore - metadata-indexed blob store.

Keeps a relational catalog of stored files (path, name, type, size) and
persists their bytes on a filesystem tree mirroring the logical path.
"""

__version__ = "1.0.0"
