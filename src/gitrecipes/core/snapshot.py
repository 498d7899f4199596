"""Read back the topology of a generated repository.

A snapshot labels every commit reachable from a local branch by its position
in a post-order walk driven only by branch names and parent order. Two
repositories built from the same recipe therefore produce equal snapshots
even when their commit ids differ (e.g. different commit timestamps).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pygit2


@dataclass(frozen=True)
class SnapshotCommit:
    """A commit in a snapshot. Parents refer to labels in the same snapshot."""

    label: int
    message: str
    parents: Tuple[int, ...]
    oid: str = field(compare=False, default="")


@dataclass(frozen=True)
class GraphSnapshot:
    """Commit graph of a repository, independent of commit ids.

    Attributes:
        branches: Branch name -> label of its tip commit
        commits: Commits indexed by label, parents before children
    """

    branches: Dict[str, int]
    commits: Tuple[SnapshotCommit, ...]

    @property
    def commit_count(self) -> int:
        return len(self.commits)

    def tip(self, branch: str) -> SnapshotCommit:
        """Return the tip commit of a branch.

        Raises:
            KeyError: If the branch does not exist
        """
        return self.commits[self.branches[branch]]

    def find(self, message: str) -> SnapshotCommit:
        """Return the single commit carrying ``message``.

        Raises:
            KeyError: If no commit has this message
            ValueError: If several commits have this message
        """
        matches = [c for c in self.commits if c.message == message]
        if not matches:
            raise KeyError(message)
        if len(matches) > 1:
            raise ValueError(f"{len(matches)} commits have message {message!r}")
        return matches[0]

    def parent_messages(self, message: str) -> List[str]:
        """Messages of the parents of the commit carrying ``message``, in order."""
        return [self.commits[p].message for p in self.find(message).parents]


def take_snapshot(repo: pygit2.Repository) -> GraphSnapshot:
    """Walk every commit reachable from a local branch."""
    tips = {}
    for name in sorted(repo.branches.local):
        tips[name] = repo.branches.local[name].target

    labels: Dict[pygit2.Oid, int] = {}
    commits: List[SnapshotCommit] = []

    for name, tip in tips.items():
        # Iterative post-order so deep histories do not hit the recursion limit
        stack = [(tip, False)]
        while stack:
            oid, expanded = stack.pop()
            if oid in labels:
                continue
            commit = repo[oid]
            if not expanded:
                stack.append((oid, True))
                for parent_id in reversed(commit.parent_ids):
                    if parent_id not in labels:
                        stack.append((parent_id, False))
                continue
            label = len(commits)
            labels[oid] = label
            commits.append(
                SnapshotCommit(
                    label=label,
                    message=commit.message.rstrip("\n"),
                    parents=tuple(labels[p] for p in commit.parent_ids),
                    oid=str(oid),
                )
            )

    return GraphSnapshot(
        branches={name: labels[tip] for name, tip in tips.items()},
        commits=tuple(commits),
    )
