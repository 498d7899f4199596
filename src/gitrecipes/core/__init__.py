"""Core engine layer for gitrecipes.

This module provides the recipe data model, the commit graph builder, the
workspace lifecycle and topology read-back.
"""

from gitrecipes.core.graph_builder import CommitGraphBuilder, GraphError, MissingBranch
from gitrecipes.core.recipe import CommitOp, Recipe, RecipeError, load_recipes
from gitrecipes.core.snapshot import GraphSnapshot, SnapshotCommit, take_snapshot
from gitrecipes.core.workspace import Workspace

__all__ = [
    "CommitGraphBuilder",
    "GraphError",
    "MissingBranch",
    "CommitOp",
    "Recipe",
    "RecipeError",
    "load_recipes",
    "GraphSnapshot",
    "SnapshotCommit",
    "take_snapshot",
    "Workspace",
]
