"""Git operations service"""

import asyncio
from typing import Optional, Union, TYPE_CHECKING

import git

from git_worktree_keeper.exceptions import (
    GitNotFoundError,
    GitOperationError,
    NotGitRepositoryError,
)
from git_worktree_keeper.utils.logging import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)

NOT_FULLY_MERGED = "not fully merged"


def stderr_text(error: git.exc.GitCommandError) -> str:
    """Extract git's own message from a GitCommandError.

    GitPython wraps stderr as ``\\n  stderr: '<text>'``; only ``<text>`` is kept.
    """
    stderr = (error.stderr if hasattr(error, "stderr") else str(error)) or ""
    stderr = stderr.strip()
    if stderr.startswith("stderr: '") and stderr.endswith("'"):
        stderr = stderr[len("stderr: '"):-1]
    return stderr.strip()


def is_not_fully_merged(error: GitOperationError) -> bool:
    """True if a branch deletion failed only because the branch has unmerged commits."""
    return NOT_FULLY_MERGED in str(error)


class GitOperations:
    """Async primitives over the git binary.

    Each call opens a fresh repository handle and runs the blocking GitPython
    call in a worker thread, so every git invocation is an await point.
    """

    def __init__(self, repo_path: str, config: Union["Config", dict, None] = None):
        """Initialize the service.

        Args:
            repo_path: Path inside the git repository
            config: Configuration dictionary or Config object
        """
        self.repo_path = repo_path
        self.config = config or {}
        self.remote_name = self.config.get("remote_name", "origin") or "origin"

    def _get_repo(self) -> git.Repo:
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call to ensure thread safety.

        Returns:
            git.Repo: A fresh repository instance
        """
        try:
            return git.Repo(self.repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise NotGitRepositoryError(self.repo_path) from None

    def _execute(self, operation: str, args: list, cwd: Optional[str] = None, branch: Optional[str] = None) -> str:
        """Run ``git [-C cwd] <args>`` synchronously, translating failures."""
        repo = self._get_repo()
        command = ["git"]
        if cwd:
            command += ["-C", cwd]
        command += args

        try:
            output = repo.git.execute(command)
        except git.exc.GitCommandNotFound:
            raise GitNotFoundError() from None
        except git.exc.GitCommandError as e:
            message = stderr_text(e)
            status = e.status if hasattr(e, "status") else "unknown"
            logger.debug(f"git {' '.join(args)} failed (exit {status}): {message}")
            raise GitOperationError(operation, branch, message or None) from e
        finally:
            repo.close()

        return output if isinstance(output, str) else str(output)

    async def run(self, operation: str, *args: str, cwd: Optional[str] = None, branch: Optional[str] = None) -> str:
        """Run a git command in a worker thread and return its stdout."""
        return await asyncio.to_thread(self._execute, operation, list(args), cwd, branch)

    # Repository queries

    async def get_repository_root(self) -> str:
        """Absolute path of the working tree containing ``repo_path``."""
        output = await self.run("rev_parse", "rev-parse", "--show-toplevel")
        return output.strip()

    async def get_current_branch(self, path: Optional[str] = None) -> Optional[str]:
        """Branch checked out at ``path`` (default: repo_path), or None if detached."""
        output = await self.run("current_branch", "rev-parse", "--abbrev-ref", "HEAD", cwd=path)
        name = output.strip()
        return None if name == "HEAD" else name

    async def list_worktrees_porcelain(self) -> str:
        """Raw output of ``git worktree list --porcelain``."""
        return await self.run("worktree_list", "worktree", "list", "--porcelain")

    async def get_local_branches(self) -> list[str]:
        """Local branch names."""
        output = await self.run("branch_list", "branch", "--format=%(refname:short)")
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def get_remote_branches(self) -> list[str]:
        """Remote-tracking branch names including the remote, e.g. ``origin/feature``."""
        output = await self.run("branch_list_remote", "branch", "-r", "--format=%(refname:short)")
        branches = []
        for line in output.splitlines():
            name = line.strip()
            # Skip the origin/HEAD symbolic ref and bare remote names
            if not name or "/" not in name or name.endswith("/HEAD"):
                continue
            branches.append(name)
        return branches

    async def get_last_commit(self, path: str) -> Optional[tuple[str, str, str]]:
        """(ISO date, subject, full hash) of HEAD in ``path``, or None for an empty history."""
        output = await self.run("log", "log", "-1", "--format=%cI%x00%s%x00%H", cwd=path)
        fields = output.strip().split("\x00")
        if len(fields) != 3:
            return None
        return fields[0], fields[1], fields[2]

    async def get_symbolic_ref(self, ref: str) -> Optional[str]:
        """Target of a symbolic ref, or None if it is not set."""
        try:
            output = await self.run("symbolic_ref", "symbolic-ref", ref)
        except GitOperationError as e:
            logger.debug(f"Symbolic ref {ref} not available: {e}")
            return None
        return output.strip() or None

    # Worktree mutations

    async def add_worktree_new_branch(self, branch_name: str, path: str, base_ref: str) -> None:
        """``git worktree add -b <branch> <path> <base>``"""
        await self.run("worktree_add", "worktree", "add", "-b", branch_name, path, base_ref, branch=branch_name)
        logger.info(f"Created worktree at {path} on new branch {branch_name} from {base_ref}")

    async def add_worktree_existing_branch(self, path: str, branch_name: str) -> None:
        """``git worktree add <path> <branch>``"""
        await self.run("worktree_add", "worktree", "add", path, branch_name, branch=branch_name)
        logger.info(f"Created worktree at {path} for branch {branch_name}")

    async def add_worktree_tracking_branch(self, local_name: str, path: str, remote_ref: str) -> None:
        """``git worktree add --track -b <local> <path> <remote/branch>``"""
        await self.run(
            "worktree_add", "worktree", "add", "--track", "-b", local_name, path, remote_ref, branch=local_name
        )
        logger.info(f"Created worktree at {path} tracking {remote_ref}")

    async def remove_worktree(self, path: str, force: bool = False) -> None:
        """``git worktree remove [--force --force] <path>``"""
        args = ["worktree", "remove"]
        if force:
            # git only removes a locked worktree when --force is given twice
            args += ["--force", "--force"]
        args.append(path)
        await self.run("worktree_remove", *args)
        logger.info(f"Removed worktree at {path}")

    async def delete_branch(self, branch_name: str, force: bool = False) -> None:
        """``git branch -d|-D <branch>``"""
        await self.run("branch_delete", "branch", "-D" if force else "-d", branch_name, branch=branch_name)
        logger.info(f"Deleted branch {branch_name}{' (forced)' if force else ''}")

    # Working-copy operations used by sync

    async def get_status_porcelain(self, path: str) -> str:
        """``git status --porcelain`` in ``path``."""
        return await self.run("status", "status", "--porcelain", cwd=path)

    async def count_commits(self, path: str, rev_range: str) -> int:
        """``git rev-list --count <range>`` in ``path``."""
        output = await self.run("rev_list", "rev-list", "--count", rev_range, cwd=path)
        return int(output.strip() or 0)

    async def merge(self, path: str, ref: str) -> None:
        await self.run("merge", "merge", ref, "--no-edit", cwd=path)

    async def rebase(self, path: str, ref: str) -> None:
        await self.run("rebase", "rebase", ref, cwd=path)

    async def push(self, path: str, force_with_lease: bool = False) -> None:
        args = ["push"]
        if force_with_lease:
            args.append("--force-with-lease")
        await self.run("push", *args, cwd=path)
