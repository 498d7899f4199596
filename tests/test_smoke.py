"""Basic smoke tests to verify project setup."""

from gitrecipes import __version__


def test_version() -> None:
    """Test that version is correctly defined."""
    assert __version__ == "0.1.0"


def test_import_storage() -> None:
    """Test that storage module can be imported."""
    from gitrecipes import storage  # noqa: F401


def test_import_core() -> None:
    """Test that core module can be imported."""
    from gitrecipes import core  # noqa: F401


def test_import_cli() -> None:
    """Test that cli module can be imported."""
    from gitrecipes.cli import main  # noqa: F401


def test_repo_fixture(repo) -> None:
    """Test that repo fixture creates an empty repository."""
    assert repo.is_empty
    assert list(repo.branches.local) == []
