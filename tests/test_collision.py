"""Tests for branch name collision detection"""
import pytest

from git_worktree_keeper.exceptions import NameCollisionError
from git_worktree_keeper.models.collision import CollisionKind
from git_worktree_keeper.models.worktree import BranchNamespace
from git_worktree_keeper.services.collision import CollisionResolver, check_collision, suggest_alternative


class TestFindCollision:
    """Test collision classification"""

    @pytest.fixture
    def namespace(self):
        return BranchNamespace.from_names(["main", "feature/x"])

    @pytest.mark.parametrize("name", ["feature/y", "bugfix", "feat", "feature-x", "main2"])
    def test_no_collision(self, namespace, name):
        assert CollisionResolver.find_collision(name, namespace) is None
        check_collision(name, namespace)

    def test_exact(self, namespace):
        kind, conflicts = CollisionResolver.find_collision("main", namespace)
        assert kind is CollisionKind.EXACT
        assert conflicts == ["main"]

    def test_forward(self, namespace):
        kind, conflicts = CollisionResolver.find_collision("feature", namespace)
        assert kind is CollisionKind.FORWARD
        assert conflicts == ["feature/x"]

    def test_backward(self, namespace):
        kind, conflicts = CollisionResolver.find_collision("feature/x/y", namespace)
        assert kind is CollisionKind.BACKWARD
        assert conflicts == ["feature/x"]

    def test_exact_takes_precedence(self):
        namespace = ["a", "a/b", "x"]
        kind, _ = CollisionResolver.find_collision("a", namespace)
        assert kind is CollisionKind.EXACT

    def test_remote_names_count(self):
        namespace = BranchNamespace(local=["main"], remote=["release/1.0"])
        kind, conflicts = CollisionResolver.find_collision("release", namespace)
        assert kind is CollisionKind.FORWARD
        assert conflicts == ["release/1.0"]


class TestCheckCollision:
    """Test collision errors and their messages"""

    def test_exact_message(self):
        with pytest.raises(NameCollisionError) as exc_info:
            check_collision("main", ["main"])

        assert exc_info.value.kind is CollisionKind.EXACT
        assert str(exc_info.value) == "Branch 'main' already exists"

    def test_forward_message_lists_conflicts(self):
        with pytest.raises(NameCollisionError) as exc_info:
            check_collision("feature", ["main", "feature/x"])

        message = str(exc_info.value)
        assert "feature/x" in message
        assert "conflicts with" in message

    def test_backward_message(self):
        with pytest.raises(NameCollisionError) as exc_info:
            check_collision("feature/x/y", ["feature/x"])

        assert exc_info.value.kind is CollisionKind.BACKWARD
        assert "nest under" in str(exc_info.value)

    def test_message_truncated_to_three_examples(self):
        namespace = [f"feature/{n}" for n in ("a", "b", "c", "d", "e")]

        with pytest.raises(NameCollisionError) as exc_info:
            check_collision("feature", namespace)

        error = exc_info.value
        assert error.conflicts == namespace
        message = str(error)
        assert "feature/a, feature/b, feature/c and 2 more" in message
        assert "feature/d" not in message

    def test_exactly_three_has_no_remainder(self):
        with pytest.raises(NameCollisionError) as exc_info:
            check_collision("x", ["x/1", "x/2", "x/3"])
        assert "more" not in str(exc_info.value)


class TestSuggestAlternative:
    """Test alternative name suggestions"""

    def test_first_suffix(self):
        assert suggest_alternative("feature-test", ["main", "feature-test"]) == "feature-test-1"

    def test_skips_taken_suffixes(self):
        namespace = ["feature-test", "feature-test-1", "feature-test-2"]
        assert suggest_alternative("feature-test", namespace) == "feature-test-3"

    def test_skips_forward_collision(self):
        # "x-1" is blocked because "x-1/y" exists
        assert suggest_alternative("x", ["x", "x-1/y"]) == "x-2"

    def test_keeps_slashes_without_ancestor(self):
        assert suggest_alternative("feature/api", ["feature/api"]) == "feature/api-1"

    def test_flattens_under_existing_ancestor(self):
        suggestion = suggest_alternative("feature/x/y", ["feature/x"])
        assert suggestion == "feature-x-y-1"
        check_collision(suggestion, ["feature/x"])

    @pytest.mark.parametrize("name,namespace", [
        ("main", ["main"]),
        ("feature", ["feature/x", "feature-1", "feature-2/z"]),
        ("a/b/c", ["a", "a-b-c-1", "a-b-c-2"]),
        ("a/b", ["a/b", "a/b-1", "a/b-2/c"]),
        ("release/1.0", ["release/1.0", "release/1.0-1/hotfix"]),
        ("new-name", []),
    ])
    def test_suggestion_never_collides(self, name, namespace):
        suggestion = suggest_alternative(name, namespace)
        assert suggestion != name
        check_collision(suggestion, namespace)
