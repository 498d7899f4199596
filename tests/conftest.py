"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pygit2
import pytest

from gitrecipes.core.graph_builder import CommitGraphBuilder

FIXED_TIME = 1700000000


@pytest.fixture
def repo(tmp_path: Path) -> pygit2.Repository:
    """Create an empty git repository."""
    path = tmp_path / "repo"
    path.mkdir()
    return pygit2.init_repository(str(path))


@pytest.fixture
def signature() -> pygit2.Signature:
    """Fixed identity with a fixed commit time."""
    return pygit2.Signature("Test User", "test@example.com", FIXED_TIME, 0)


@pytest.fixture
def builder(repo: pygit2.Repository, signature: pygit2.Signature) -> CommitGraphBuilder:
    """Create CommitGraphBuilder instance on an empty repository."""
    return CommitGraphBuilder(repo, signature)


@pytest.fixture
def repos_root(tmp_path: Path) -> Path:
    """Directory holding workspaces."""
    return tmp_path / "repos"
