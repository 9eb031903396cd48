"""
git-worktree-keeper - Manage many git worktrees side by side
"""

from .__version__ import __version__
from .config import Config
from .services.lifecycle import WorktreeLifecycle
from .services.batch import BatchOrchestrator

__all__ = ["Config", "WorktreeLifecycle", "BatchOrchestrator", "__version__"]
