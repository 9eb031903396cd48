"""Git-related services for git-worktree-keeper."""

from .operations import GitOperations
from .worktrees import WorktreeRepository, parse_worktree_porcelain
from .branch_queries import BranchQueries

__all__ = [
    "GitOperations",
    "WorktreeRepository",
    "parse_worktree_porcelain",
    "BranchQueries",
]
