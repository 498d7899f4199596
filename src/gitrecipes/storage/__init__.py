"""Storage layer for gitrecipes.

This module wraps the git object database used to materialize commit trees.
"""

from gitrecipes.storage.content_store import ContentStore, StorageError

__all__ = [
    "ContentStore",
    "StorageError",
]
