"""Utility functions for git-worktree-keeper.

This package provides utility modules:
- logging: Logging configuration and logger creation
- concurrency: Batch worker count resolution
"""

from .logging import setup_logging, get_logger, ColoredFormatter
from .concurrency import get_worker_count, MAX_CONCURRENCY

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    # Concurrency
    "get_worker_count",
    "MAX_CONCURRENCY",
]
