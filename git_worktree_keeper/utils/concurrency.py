"""Concurrency helpers for batch execution."""

from typing import Optional

from git_worktree_keeper.config import DEFAULT_CONCURRENCY
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

# git takes repository-wide locks for worktree and ref updates; more parallel
# workers than this only produces lock contention failures.
MAX_CONCURRENCY = 32


def get_worker_count(user_specified: Optional[int] = None, item_count: Optional[int] = None) -> int:
    """Resolve how many batch workers may run at once.

    Args:
        user_specified: Worker count requested by the caller, if any
        item_count: Number of items in the batch, if known

    Returns:
        A positive worker count, never more than the number of items
    """
    if user_specified is not None and user_specified > 0:
        workers = min(user_specified, MAX_CONCURRENCY)
        if user_specified > MAX_CONCURRENCY:
            logger.debug(f"Requested {user_specified} workers, capped at {MAX_CONCURRENCY}")
    else:
        workers = DEFAULT_CONCURRENCY

    if item_count is not None and item_count > 0:
        workers = min(workers, item_count)

    return workers
