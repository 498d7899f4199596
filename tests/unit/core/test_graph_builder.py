"""Unit tests for CommitGraphBuilder."""

import pygit2
import pytest

from gitrecipes.core.graph_builder import CommitGraphBuilder, GraphError, MissingBranch
from gitrecipes.core.recipe import CommitOp
from gitrecipes.storage.content_store import ContentStore


def parents_of(repo: pygit2.Repository, commit_id: pygit2.Oid) -> list:
    return list(repo[commit_id].parent_ids)


class TestCommit:
    """Test single commit operations."""

    def test_root_commit(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that a new branch without merges gets a parentless commit."""
        commit_id = builder.commit("a", "m1")

        assert parents_of(repo, commit_id) == []
        assert repo.branches.local["a"].target == commit_id

    def test_linear_history(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that committing twice to a branch chains the commits."""
        m1 = builder.commit("a", "m1", [])
        m2 = builder.commit("a", "m2", [])

        assert parents_of(repo, m2) == [m1]
        assert parents_of(repo, m1) == []
        assert repo.branches.local["a"].target == m2
        assert repo[m2].message == "m2"
        assert repo[m1].message == "m1"

    def test_merge_of_two_roots(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that merge parents are appended in listed order."""
        x = builder.commit("x", "root", [])
        y = builder.commit("y", "root2", [])
        z = builder.commit("z", "merge", ["x", "y"])

        assert parents_of(repo, z) == [x, y]
        assert repo.branches.local["z"].target == z

    def test_merge_order_follows_listing(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that reversing the merge list reverses the parents."""
        x = builder.commit("x", "root")
        y = builder.commit("y", "root2")
        z = builder.commit("z", "merge", ["y", "x"])

        assert parents_of(repo, z) == [y, x]

    def test_merge_arity(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that k merge parents on an existing branch yield k+1 parents."""
        base = builder.commit("main", "base")
        tips = [builder.commit(f"topic{i}", f"t{i}") for i in range(4)]

        merge = builder.commit("main", "octopus", [f"topic{i}" for i in range(4)])

        assert parents_of(repo, merge) == [base] + tips

    def test_implicit_parent_is_own_previous_tip(
        self, builder: CommitGraphBuilder, repo
    ) -> None:
        """Test that interleaved branches each chain onto their own tip."""
        a1 = builder.commit("a", "a1")
        b1 = builder.commit("b", "b1")
        a2 = builder.commit("a", "a2")
        b2 = builder.commit("b", "b2")

        assert parents_of(repo, a2) == [a1]
        assert parents_of(repo, b2) == [b1]

    def test_merge_into_new_branch_has_no_implicit_parent(
        self, builder: CommitGraphBuilder, repo
    ) -> None:
        """Test that a new branch only gets the merge parents."""
        bottom = builder.commit("bottom", "bottom")
        a1 = builder.commit("a", "a1", ["bottom"])

        assert parents_of(repo, a1) == [bottom]

    def test_duplicate_merge_parents_kept(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that duplicate names are not deduplicated."""
        x = builder.commit("x", "x")
        builder.commit("y", "y")
        z = builder.commit("z", "merge", ["x", "x"])

        assert parents_of(repo, z) == [x, x]

    def test_existing_branch_as_own_merge_parent(
        self, builder: CommitGraphBuilder, repo
    ) -> None:
        """Test that a branch naming itself is not filtered."""
        a1 = builder.commit("a", "a1")
        a2 = builder.commit("a", "a2", ["a"])

        assert parents_of(repo, a2) == [a1, a1]

    def test_commit_uses_fixed_tree_and_signature(
        self, builder: CommitGraphBuilder, repo, signature
    ) -> None:
        """Test tree content and identity of generated commits."""
        first = repo[builder.commit("a", "m1")]
        second = repo[builder.commit("b", "m2")]

        assert first.tree_id == second.tree_id
        assert first.tree_id == ContentStore(repo).simple_tree()
        assert first.author.name == signature.name
        assert first.author.email == signature.email
        assert first.committer.name == signature.name
        assert first.commit_time == signature.time

    def test_branch_is_force_moved(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that the branch ref is overwritten unconditionally."""
        builder.commit("a", "m1")
        other = builder.commit("b", "other")
        repo.references.create("refs/heads/a", other, force=True)

        new = builder.commit("a", "m2")

        assert parents_of(repo, new) == [other]
        assert repo.branches.local["a"].target == new

    def test_head_is_not_touched(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that commits are created without updating HEAD."""
        builder.commit("feature", "m1")

        assert repo.head_is_unborn


class TestGraphErrors:
    """Test missing merge parent handling."""

    def test_missing_merge_parent(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that an unknown merge parent fails without creating the branch."""
        with pytest.raises(GraphError, match="ghost"):
            builder.commit("a", "m", ["ghost"])

        assert repo.branches.local.get("a") is None
        assert repo.is_empty

    def test_missing_merge_parent_keeps_existing_branch(
        self, builder: CommitGraphBuilder, repo
    ) -> None:
        """Test that a failed operation leaves the target branch unchanged."""
        a1 = builder.commit("a", "a1")

        with pytest.raises(GraphError):
            builder.commit("a", "a2", ["b", "ghost"])

        assert repo.branches.local["a"].target == a1

    def test_missing_second_merge_parent(self, builder: CommitGraphBuilder) -> None:
        """Test that every merge parent is checked."""
        builder.commit("x", "x")

        with pytest.raises(GraphError, match="'y'"):
            builder.commit("z", "merge", ["x", "y"])

    def test_new_branch_as_own_merge_parent(
        self, builder: CommitGraphBuilder, repo
    ) -> None:
        """Test that self-merge on a branch that does not exist yet is rejected."""
        with pytest.raises(GraphError, match="'n'"):
            builder.commit("n", "m", ["n"])

        assert repo.branches.local.get("n") is None

    def test_error_names_target_branch(self, builder: CommitGraphBuilder) -> None:
        """Test that the error message names the operation's target."""
        with pytest.raises(GraphError, match="while committing to 'a'"):
            builder.commit("a", "m", ["ghost"])


class TestTipLookup:
    """Test branch tip lookup."""

    def test_tip_missing_branch(self, builder: CommitGraphBuilder) -> None:
        """Test that a missing branch has no tip."""
        assert builder.tip("nope") is None

    def test_tip_existing_branch(self, builder: CommitGraphBuilder) -> None:
        """Test that tip follows the latest commit."""
        builder.commit("a", "a1")
        a2 = builder.commit("a", "a2")

        assert builder.tip("a") == a2

    def test_fatal_lookup(self, builder: CommitGraphBuilder) -> None:
        """Test the lookup policy for required branches."""
        with pytest.raises(GraphError):
            builder._lookup("nope", MissingBranch.FATAL)
        assert builder._lookup("nope", MissingBranch.OPTIONAL) is None


class TestRun:
    """Test executing operation sequences."""

    def test_run_returns_final_tips(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that run returns the last commit of every touched branch."""
        tips = builder.run(
            [
                CommitOp("a", "a1"),
                CommitOp("b", "b1"),
                CommitOp("a", "a2"),
            ]
        )

        assert set(tips) == {"a", "b"}
        assert repo[tips["a"]].message == "a2"
        assert repo[tips["b"]].message == "b1"

    def test_run_aborts_on_first_error(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that operations after a failure are not executed."""
        with pytest.raises(GraphError):
            builder.run(
                [
                    CommitOp("a", "a1"),
                    CommitOp("b", "b1", ("ghost",)),
                    CommitOp("c", "c1"),
                ]
            )

        assert repo.branches.local.get("a") is not None
        assert repo.branches.local.get("b") is None
        assert repo.branches.local.get("c") is None

    def test_run_empty_script(self, builder: CommitGraphBuilder, repo) -> None:
        """Test that an empty script creates nothing."""
        assert builder.run([]) == {}
        assert repo.is_empty
