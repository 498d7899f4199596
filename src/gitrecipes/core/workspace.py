"""Workspace lifecycle.

A workspace is the directory ``<root>/<name>`` holding one generated git
repository. Building always starts from scratch: any previous content at the
same path is removed first, so rebuilding a recipe yields the same topology.
The workspace is left in place after the build for downstream tests to use.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pygit2

from gitrecipes.constants import (
    DEFAULT_AUTHOR_EMAIL,
    DEFAULT_AUTHOR_NAME,
    DEFAULT_REPOS_ROOT,
)
from gitrecipes.core.graph_builder import CommitGraphBuilder
from gitrecipes.core.recipe import CommitOp, Recipe, check_plain_name
from gitrecipes.storage.content_store import StorageError

logger = logging.getLogger(__name__)


class Workspace:
    """Isolated on-disk root for one generated repository.

    Attributes:
        name: Workspace name, used as the directory name under ``root``
        root: Parent directory shared by all workspaces
        author_name: Author/committer name of every commit
        author_email: Author/committer email of every commit
        timestamp: Fixed commit time (seconds since epoch, UTC), or None to
            use the current time

    Example:
        >>> workspace = Workspace("long-diamond")
        >>> tips = workspace.create(get_recipe("long-diamond"))
        >>> repo = workspace.repo()
    """

    def __init__(
        self,
        name: str,
        root: Union[str, Path] = DEFAULT_REPOS_ROOT,
        author_name: str = DEFAULT_AUTHOR_NAME,
        author_email: str = DEFAULT_AUTHOR_EMAIL,
        timestamp: Optional[int] = None,
    ) -> None:
        """Initialize the workspace.

        Raises:
            ValueError: If name is not a single directory name
        """
        check_plain_name(name)
        self.name = name
        self.root = Path(root)
        self.author_name = author_name
        self.author_email = author_email
        self.timestamp = timestamp

    @property
    def path(self) -> Path:
        return self.root / self.name

    def destroy(self) -> None:
        """Remove the workspace directory if present.

        A missing directory, or one that cannot be removed, is ignored here;
        ``create`` reports any resulting problem when it recreates the path.
        """
        shutil.rmtree(self.path, ignore_errors=True)

    def create(
        self, script: Union[Recipe, Iterable[CommitOp]]
    ) -> Dict[str, pygit2.Oid]:
        """Recreate the workspace and run a build script in it.

        Args:
            script: Recipe or ordered commit operations

        Returns:
            Final tip of every branch the script committed to

        Raises:
            StorageError: If the directory or repository cannot be created
            GraphError: If the script references a missing merge parent
        """
        ops = script.commits if isinstance(script, Recipe) else script

        self.destroy()
        try:
            self.path.mkdir(parents=True)
            repo = pygit2.init_repository(str(self.path))
        except (OSError, pygit2.GitError) as e:
            raise StorageError(
                f"Failed to initialize workspace {self.path}: {e}"
            ) from e

        logger.info("Building %s", self.path)
        builder = CommitGraphBuilder(repo, self.signature())
        tips = builder.run(ops)
        logger.info("Built %s: %d branch(es)", self.path, len(tips))
        return tips

    def exists(self) -> bool:
        """Check if the workspace holds a git repository."""
        return (self.path / ".git").is_dir()

    def repo(self) -> pygit2.Repository:
        """Open the workspace repository.

        Raises:
            StorageError: If the workspace has not been built
        """
        if not self.exists():
            raise StorageError(f"Workspace not found: {self.path}")
        try:
            return pygit2.Repository(str(self.path))
        except pygit2.GitError as e:
            raise StorageError(f"Failed to open workspace {self.path}: {e}") from e

    def signature(self) -> pygit2.Signature:
        """Return the fixed author/committer identity."""
        if self.timestamp is None:
            return pygit2.Signature(self.author_name, self.author_email)
        return pygit2.Signature(self.author_name, self.author_email, self.timestamp, 0)
