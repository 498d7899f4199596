"""Content-addressed tree writer for gitrecipes.

This module turns a single (entry name, payload) pair into a git tree object
stored in a repository's object database. Blobs and trees are content
addressed, so writing the same content twice yields the same identifier
without duplicating storage.
"""

import pygit2

from gitrecipes.constants import DEFAULT_DATA, DEFAULT_ENTRY, FILE_MODE_BLOB


class StorageError(Exception):
    """Raised when the workspace or its object database cannot be used."""


class ContentStore:
    """Writes single-entry trees into a git object database.

    Attributes:
        repo: Repository whose object database receives the objects

    Example:
        >>> store = ContentStore(pygit2.Repository("repos/long-diamond"))
        >>> tree_id = store.write_tree("data.txt", b"text")
        >>> assert tree_id == store.simple_tree()
    """

    def __init__(self, repo: pygit2.Repository) -> None:
        """Initialize the content store.

        Args:
            repo: Open pygit2 repository
        """
        self.repo = repo

    def write_tree(self, entry: str, data: bytes) -> pygit2.Oid:
        """Write a tree holding one regular file.

        Stores ``data`` as a blob, then writes a tree that maps ``entry`` to
        that blob with regular-file mode.

        Args:
            entry: File name inside the tree (no path separators)
            data: File content

        Returns:
            Object id of the written tree

        Raises:
            ValueError: If entry is empty or contains a path separator
            StorageError: If the object database cannot be written
        """
        if not entry or "/" in entry:
            raise ValueError(f"Invalid tree entry name: {entry!r}")

        try:
            blob_id = self.repo.create_blob(data)
            builder = self.repo.TreeBuilder()
            builder.insert(entry, blob_id, FILE_MODE_BLOB)
            return builder.write()
        except (pygit2.GitError, OSError) as e:
            raise StorageError(f"Failed to write tree for {entry!r}: {e}") from e

    def simple_tree(self) -> pygit2.Oid:
        """Write the fixed tree shared by every generated commit."""
        return self.write_tree(DEFAULT_ENTRY, DEFAULT_DATA)
