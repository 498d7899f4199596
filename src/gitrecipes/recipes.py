"""Bundled topology recipes."""

from typing import Dict

from gitrecipes.core.recipe import CommitOp, Recipe

LONG_DIAMOND = Recipe(
    name="long-diamond",
    description="Two three-commit lines forked from one root and merged at the top",
    commits=(
        CommitOp("bottom", "bottom"),
        CommitOp("a", "a1", ("bottom",)),
        CommitOp("a", "a2"),
        CommitOp("a", "a3"),
        CommitOp("b", "b1", ("bottom",)),
        CommitOp("b", "b2"),
        CommitOp("b", "b3"),
        CommitOp("top", "top", ("a", "b")),
    ),
)

# Identity documents signed by delegated keys on separate developer branches;
# each attestation merges in the branches carrying the signatures it refers to.
ID_DEFINITION = Recipe(
    name="id-definition",
    description="Three identity documents signed and attested across three developers",
    commits=(
        # Id document 1 (origin: dev1, delegations: [k1, k2])
        CommitOp("dev1", "doc1"),
        CommitOp("dev2", "doc1-k2", ("dev1",)),
        CommitOp("dev1", "doc1-k1"),
        CommitOp("dev1", "id1", ("dev2",)),
        # Id document 2 (origin: dev1, delegations: [k1, k2, k3])
        CommitOp("dev1", "doc2"),
        CommitOp("dev3", "doc2-k3", ("dev1",)),
        CommitOp("dev2", "doc2-k2", ("dev1",)),
        CommitOp("dev1", "doc2-k1"),
        CommitOp("dev1", "id2", ("dev2", "dev3")),
        # Id document 3 (origin: dev3, delegations: [k2, k3])
        CommitOp("dev3", "doc3"),
        CommitOp("dev2", "doc3-k2", ("dev3",)),
        CommitOp("dev3", "doc3-k3"),
        CommitOp("dev1", "id3", ("dev2",)),
        CommitOp("top", "top", ("dev1", "dev2", "dev3")),
    ),
)

BUILTIN_RECIPES: Dict[str, Recipe] = {
    recipe.name: recipe for recipe in (LONG_DIAMOND, ID_DEFINITION)
}


def get_recipe(name: str) -> Recipe:
    """Look up a bundled recipe by name.

    Raises:
        KeyError: If no bundled recipe has this name
    """
    try:
        return BUILTIN_RECIPES[name]
    except KeyError:
        known = ", ".join(BUILTIN_RECIPES)
        raise KeyError(f"Unknown recipe {name!r} (known: {known})") from None
