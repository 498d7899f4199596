"""Commit graph builder.

Executes commit operations against one repository. Each operation resolves
its parents from the current branch tips, writes a commit with the fixed tree
and identity, and force-moves the target branch to the new commit.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import pygit2

from gitrecipes.constants import BRANCH_REF_PREFIX
from gitrecipes.core.recipe import CommitOp
from gitrecipes.storage.content_store import ContentStore, StorageError

logger = logging.getLogger(__name__)


class GraphError(Exception):
    """Raised when an operation names a merge parent branch that does not exist."""


class MissingBranch(Enum):
    """What a branch lookup does when the branch does not exist."""

    # The committed-to branch: absence means "no implicit parent"
    OPTIONAL = "optional"
    # A merge parent: absence means the script is malformed
    FATAL = "fatal"


class CommitGraphBuilder:
    """Builds a commit DAG from an ordered sequence of commit operations.

    There is no checked-out branch: every operation names its target branch,
    so operations may interleave across branches freely.

    Attributes:
        repo: Repository receiving the commits
        signature: Author and committer identity used for every commit
        store: ContentStore materializing the commit tree

    Example:
        >>> builder = CommitGraphBuilder(repo, signature)
        >>> builder.commit("x", "root")
        >>> builder.commit("y", "root2")
        >>> merge_id = builder.commit("z", "merge", ["x", "y"])
    """

    def __init__(
        self,
        repo: pygit2.Repository,
        signature: pygit2.Signature,
        store: Optional[ContentStore] = None,
    ) -> None:
        self.repo = repo
        self.signature = signature
        self.store = store or ContentStore(repo)

    def tip(self, branch: str) -> Optional[pygit2.Oid]:
        """Return the commit a local branch points to, or None if absent."""
        return self._lookup(branch, MissingBranch.OPTIONAL)

    def commit(
        self,
        branch: str,
        message: str,
        merges: Sequence[str] = (),
    ) -> pygit2.Oid:
        """Create a commit on ``branch`` and move the branch to it.

        The parents are the branch's own tip (when the branch exists) followed
        by the tip of each branch in ``merges``, in order. Duplicates are kept.

        Args:
            branch: Target branch, created if it does not exist yet
            message: Commit message
            merges: Branches contributing additional parents

        Returns:
            Id of the new commit

        Raises:
            GraphError: If a branch named in ``merges`` does not exist
            StorageError: If the object database or refs cannot be written
        """
        parents = self._resolve_parents(branch, merges)
        tree_id = self.store.simple_tree()

        try:
            commit_id = self.repo.create_commit(
                None,
                self.signature,
                self.signature,
                message,
                tree_id,
                parents,
            )
            self.repo.references.create(
                BRANCH_REF_PREFIX + branch, commit_id, force=True
            )
        except (pygit2.GitError, OSError, ValueError) as e:
            raise StorageError(
                f"Failed to commit {message!r} on branch {branch!r}: {e}"
            ) from e

        logger.debug(
            "Committed %s on %s (%d parent(s)): %s",
            str(commit_id)[:7],
            branch,
            len(parents),
            message,
        )
        return commit_id

    def run(self, ops: Iterable[CommitOp]) -> Dict[str, pygit2.Oid]:
        """Execute operations strictly in order.

        Args:
            ops: Commit operations

        Returns:
            Final tip of every branch the operations committed to

        Raises:
            GraphError: On the first operation with a missing merge parent
            StorageError: On the first storage failure
        """
        tips: Dict[str, pygit2.Oid] = {}
        for op in ops:
            tips[op.branch] = self.commit(op.branch, op.message, op.merges)
        return tips

    def _resolve_parents(
        self, branch: str, merges: Sequence[str]
    ) -> List[pygit2.Oid]:
        parents = []
        own_tip = self._lookup(branch, MissingBranch.OPTIONAL)
        if own_tip is not None:
            parents.append(own_tip)
        for name in merges:
            try:
                parents.append(self._lookup(name, MissingBranch.FATAL))
            except GraphError as e:
                raise GraphError(
                    f"{e} (while committing to {branch!r})"
                ) from None
        return parents

    def _lookup(self, name: str, missing: MissingBranch) -> Optional[pygit2.Oid]:
        """Resolve a local branch to its target commit id.

        Raises:
            GraphError: If the branch is absent and ``missing`` is FATAL
        """
        try:
            branch = self.repo.branches.local.get(name)
        except (pygit2.GitError, ValueError) as e:
            raise StorageError(f"Failed to look up branch {name!r}: {e}") from e

        if branch is not None:
            return branch.target
        if missing is MissingBranch.FATAL:
            raise GraphError(f"Merge parent branch does not exist: {name!r}")
        return None
