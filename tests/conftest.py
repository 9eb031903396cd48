"""Pytest fixtures for git-worktree-keeper tests"""
import logging
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import git
import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.services.lifecycle import WorktreeLifecycle
from git_worktree_keeper.utils.logging import ColoredFormatter


def commit_file(repo: git.Repo, name: str, content: str, message: str) -> str:
    """Write a file in the repo's working tree and commit it with the git CLI."""
    path = Path(repo.working_tree_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.git.add(name)
    repo.git.commit("-m", message)
    return repo.git.rev_parse("HEAD")


@pytest.fixture
def commit():
    """Helper that writes and commits a file in a given repo."""
    return commit_file


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def config():
    """Default configuration."""
    return Config()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing.

    Worktrees land next to it in ``temp_dir`` (the repository's parent).
    """
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    # Rename master to main if needed
    try:
        repo.git.branch('-M', 'main')
    except Exception:
        pass

    yield repo

    repo.close()


@pytest.fixture
def git_repo_with_branches(git_repo):
    """Repository with a couple of extra local branches."""
    git_repo.git.branch('feature/existing')
    git_repo.git.branch('bugfix')
    yield git_repo


@pytest.fixture
def lifecycle(git_repo, config):
    """Lifecycle manager bound to the test repository, no decision callback."""
    return WorktreeLifecycle.for_path(git_repo.working_tree_dir, config)


@pytest.fixture
def mock_git_ops():
    """GitOperations double whose primitives are AsyncMocks."""
    ops = Mock(spec=GitOperations)
    ops.remote_name = "origin"
    ops.repo_path = "/fake/repo"
    for name in (
        "run",
        "get_repository_root",
        "get_current_branch",
        "list_worktrees_porcelain",
        "get_local_branches",
        "get_remote_branches",
        "get_last_commit",
        "get_symbolic_ref",
        "add_worktree_new_branch",
        "add_worktree_existing_branch",
        "add_worktree_tracking_branch",
        "remove_worktree",
        "delete_branch",
        "get_status_porcelain",
        "count_commits",
        "merge",
        "rebase",
        "push",
    ):
        setattr(ops, name, AsyncMock())

    ops.get_repository_root.return_value = "/fake/repo"
    ops.get_local_branches.return_value = ["main"]
    ops.get_remote_branches.return_value = []
    ops.list_worktrees_porcelain.return_value = (
        "worktree /fake/repo\nHEAD abc123\nbranch refs/heads/main\n"
    )
    return ops


@pytest.fixture
def sample_porcelain():
    """Porcelain listing with a main, a locked and a detached worktree."""
    return (
        "worktree /path/to/main\n"
        "HEAD abcdef1234567890\n"
        "branch refs/heads/main\n"
        "\n"
        "worktree /path/to/feature\n"
        "HEAD fedcba0987654321\n"
        "branch refs/heads/feature/api\n"
        "locked needs review\n"
        "\n"
        "worktree /path/to/detached\n"
        "HEAD 1234567890abcdef\n"
        "detached\n"
        "prunable gitdir file points to non-existent location\n"
        "\n"
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they don't leak between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, logging.FileHandler) or isinstance(handler.formatter, ColoredFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
