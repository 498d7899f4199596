"""Recipe data model and JSON serialization.

A recipe is an ordered list of commit operations that defines the full
topology of one fixture repository. Recipes are plain values: the builder
consumes them, they never reference builder state.

JSON format accepted by :func:`load_recipes`::

    {
      "recipes": [
        {
          "name": "merge",
          "description": "two roots merged",
          "commits": [
            {"branch": "x", "message": "root"},
            {"branch": "y", "message": "root2"},
            ["z", "merge", ["x", "y"]]
          ]
        }
      ]
    }

A single recipe object or a bare list of recipe objects is accepted too.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from gitrecipes.constants import RECIPES_KEY


class RecipeError(Exception):
    """Raised when recipe data is malformed."""


def check_plain_name(name: str) -> None:
    """Check that a recipe/workspace name is a single directory name.

    Raises:
        ValueError: If name is empty, contains a path separator, or is
            ``.`` or ``..``
    """
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"name must be a plain directory name: {name!r}")


@dataclass(frozen=True)
class CommitOp:
    """One commit operation.

    Attributes:
        branch: Branch the new commit is created on (and moved to)
        message: Commit message
        merges: Branches whose tips become additional parents, in order
    """

    branch: str
    message: str
    merges: Tuple[str, ...] = ()

    @classmethod
    def from_data(cls, data: Any) -> "CommitOp":
        """Build an operation from a JSON object or a 2/3-element array."""
        if isinstance(data, (list, tuple)):
            if len(data) not in (2, 3):
                raise RecipeError(
                    f"Commit array must be [branch, message, merges], got {data!r}"
                )
            data = {
                "branch": data[0],
                "message": data[1],
                "merges": data[2] if len(data) == 3 else [],
            }

        if not isinstance(data, dict):
            raise RecipeError(f"Commit must be an object or array, got {data!r}")

        unknown = set(data) - {"branch", "message", "merges"}
        if unknown:
            raise RecipeError(f"Unknown commit keys: {', '.join(sorted(unknown))}")

        branch = data.get("branch")
        message = data.get("message")
        merges = data.get("merges", [])

        if not isinstance(branch, str) or not branch:
            raise RecipeError(f"Commit branch must be a non-empty string, got {branch!r}")
        if not isinstance(message, str):
            raise RecipeError(f"Commit message must be a string, got {message!r}")
        if not isinstance(merges, list) or not all(
            isinstance(m, str) and m for m in merges
        ):
            raise RecipeError(
                f"Commit merges must be a list of branch names, got {merges!r}"
            )

        return cls(branch=branch, message=message, merges=tuple(merges))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"branch": self.branch, "message": self.message}
        if self.merges:
            result["merges"] = list(self.merges)
        return result


@dataclass(frozen=True)
class Recipe:
    """A named, ordered commit script.

    Attributes:
        name: Recipe name, also the workspace directory name
        commits: Operations, executed strictly in order
        description: Free-form description shown by ``gitrecipes list``
    """

    name: str
    commits: Tuple[CommitOp, ...] = field(default_factory=tuple)
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Recipe":
        """Build a recipe from its JSON object form.

        Raises:
            RecipeError: If required keys are missing or mistyped
        """
        if not isinstance(data, dict):
            raise RecipeError(f"Recipe must be an object, got {type(data).__name__}")

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise RecipeError(f"Recipe name must be a non-empty string, got {name!r}")
        try:
            check_plain_name(name)
        except ValueError as e:
            raise RecipeError(f"Recipe {e}") from e

        commits = data.get("commits")
        if not isinstance(commits, list):
            raise RecipeError(f"Recipe {name!r}: 'commits' must be a list")

        description = data.get("description", "")
        if not isinstance(description, str):
            raise RecipeError(f"Recipe {name!r}: 'description' must be a string")

        ops = []
        for index, entry in enumerate(commits):
            try:
                ops.append(CommitOp.from_data(entry))
            except RecipeError as e:
                raise RecipeError(f"Recipe {name!r}, commit #{index}: {e}") from e

        return cls(name=name, commits=tuple(ops), description=description)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name}
        if self.description:
            result["description"] = self.description
        result["commits"] = [op.to_dict() for op in self.commits]
        return result

    @property
    def branches(self) -> List[str]:
        """Branch names in order of first appearance as commit targets."""
        seen: Dict[str, None] = {}
        for op in self.commits:
            seen.setdefault(op.branch, None)
        return list(seen)


def parse_recipes(data: Any) -> List[Recipe]:
    """Parse decoded JSON into recipes.

    Raises:
        RecipeError: If the data is malformed or names a recipe twice
    """
    if isinstance(data, dict) and RECIPES_KEY in data:
        data = data[RECIPES_KEY]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise RecipeError("Recipe data must be an object or a list of objects")

    recipes = [Recipe.from_dict(item) for item in data]

    names = set()
    for recipe in recipes:
        if recipe.name in names:
            raise RecipeError(f"Duplicate recipe name: {recipe.name!r}")
        names.add(recipe.name)

    return recipes


def load_recipes(path: Path) -> List[Recipe]:
    """Read recipes from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Recipes in file order

    Raises:
        RecipeError: If the file is not valid JSON or is malformed
        OSError: If the file cannot be read
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise RecipeError(f"Invalid JSON in {path}: {e}") from e

    try:
        return parse_recipes(data)
    except RecipeError as e:
        raise RecipeError(f"{path}: {e}") from e


def dumps_recipes(recipes: Iterable[Recipe]) -> str:
    """Serialize recipes to the JSON form :func:`load_recipes` accepts."""
    payload = {RECIPES_KEY: [recipe.to_dict() for recipe in recipes]}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def dump_recipes(recipes: Iterable[Recipe], path: Path) -> None:
    """Write recipes to a JSON file."""
    Path(path).write_text(dumps_recipes(recipes) + "\n", encoding="utf-8")
