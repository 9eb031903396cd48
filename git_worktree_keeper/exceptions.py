"""Custom exceptions for git-worktree-keeper"""

from typing import Iterable, Optional, Sequence

from git_worktree_keeper.models.collision import CollisionKind

# Number of conflicting names quoted in a collision message
MAX_COLLISION_EXAMPLES = 3


class WorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""
    pass


class GitOperationError(WorktreeKeeperError):
    """Exception raised when a git invocation fails.

    When git reported a message it is used verbatim as the exception text,
    so callers can show the tool's own explanation (lock contention,
    permissions, an existing path...).
    """

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        if message:
            error_msg = message
        else:
            error_msg = f"Git operation '{operation}' failed"
            if branch:
                error_msg += f" for branch '{branch}'"

        super().__init__(error_msg)


class NotGitRepositoryError(GitOperationError):
    """Exception raised when the working directory is not inside a git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("open_repository", message=f"Not a git repository: {path}")


class GitNotFoundError(GitOperationError):
    """Exception raised when the git executable cannot be found."""

    def __init__(self):
        super().__init__("locate_git", message="git executable not found in PATH")


class NameCollisionError(WorktreeKeeperError):
    """Exception raised when a branch name collides with the existing namespace."""

    def __init__(self, name: str, kind: CollisionKind, conflicts: Sequence[str] = ()):
        self.name = name
        self.kind = kind
        self.conflicts = list(conflicts)

        if kind is CollisionKind.EXACT:
            error_msg = f"Branch '{name}' already exists"
        elif kind is CollisionKind.FORWARD:
            error_msg = (
                f"Cannot create branch '{name}': it conflicts with existing branches "
                f"{_format_examples(self.conflicts)}"
            )
        else:
            error_msg = (
                f"Cannot create branch '{name}': it would nest under existing branches "
                f"{_format_examples(self.conflicts)}"
            )

        super().__init__(error_msg)


class UserCancelledError(WorktreeKeeperError):
    """Exception raised when the user cancels an operation at a decision point."""

    def __init__(self, operation: str = "create", path: Optional[str] = None):
        self.operation = operation
        self.path = path
        super().__init__(f"Worktree {operation} cancelled by user")


class DirectoryExistsError(WorktreeKeeperError):
    """Exception raised when a target path exists and was neither resolved nor removable."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason

        error_msg = f"Directory '{path}' already exists"
        if reason:
            error_msg += f" and could not be removed: {reason}"

        super().__init__(error_msg)


class WorktreeNotFoundError(WorktreeKeeperError):
    """Exception raised when no worktree is checked out on the requested branch."""

    def __init__(self, branch: str, similar: Iterable[str] = ()):
        self.branch = branch
        self.similar = list(similar)

        error_msg = f"Worktree for branch '{branch}' not found"
        if self.similar:
            error_msg += f" (similar: {', '.join(self.similar)})"

        super().__init__(error_msg)


class BranchNotFoundError(WorktreeKeeperError):
    """Exception raised when a branch to attach exists neither locally nor on a remote."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"Branch '{branch}' not found")


def _format_examples(names: Sequence[str]) -> str:
    """Quote up to MAX_COLLISION_EXAMPLES names and count the rest."""
    examples = ", ".join(names[:MAX_COLLISION_EXAMPLES])
    remainder = len(names) - MAX_COLLISION_EXAMPLES
    if remainder > 0:
        examples += f" and {remainder} more"
    return examples
