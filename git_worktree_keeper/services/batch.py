"""Concurrent batch execution of worktree operations."""

import asyncio
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional

from git_worktree_keeper.exceptions import UserCancelledError
from git_worktree_keeper.models.batch import BatchItem, BatchReport, BatchStatus
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.lifecycle import WorktreeLifecycle
from git_worktree_keeper.services.sync import SyncService
from git_worktree_keeper.utils.concurrency import get_worker_count
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

Worker = Callable[[BatchItem], Awaitable[Any]]


class BatchOrchestrator:
    """Runs independent per-item work under a bounded pool.

    git serialises some repository-wide administrative locks, so a small
    fixed pool keeps lock contention failures rare. A failing item never
    affects its siblings and nothing is cancelled mid-batch.
    """

    def __init__(self, lifecycle: WorktreeLifecycle, sync_service: Optional[SyncService] = None):
        self.lifecycle = lifecycle
        self.config = lifecycle.config
        self.sync_service = sync_service or SyncService(lifecycle.git_ops)

    async def run_all(self, items: list[BatchItem], worker: Worker, concurrency: Optional[int] = None) -> list[BatchItem]:
        """Run ``worker`` on every item and settle each item exactly once.

        All items are submitted at once; the semaphore defers execution so
        that at most ``concurrency`` workers are in flight.

        Args:
            items: Pending items, owned by this call until it returns
            worker: Coroutine function; its return value becomes ``item.result``
            concurrency: Pool size (default: config.concurrency)

        Returns:
            The same items in input order, each SUCCESS, FAILED or SKIPPED
        """
        if not items:
            return []

        max_workers = get_worker_count(concurrency or self.config.concurrency, len(items))
        logger.debug(f"Running {len(items)} items with {max_workers} workers")
        limiter = asyncio.Semaphore(max_workers)

        async def run_one(item: BatchItem) -> BatchItem:
            async with limiter:
                try:
                    result = await worker(item)
                except UserCancelledError as e:
                    item.status = BatchStatus.SKIPPED
                    item.error = str(e)
                    logger.info(f"{item.desired_name}: {e}")
                except Exception as e:
                    item.status = BatchStatus.FAILED
                    item.error = str(e) or type(e).__name__
                    logger.error(f"Error processing {item.desired_name}: {item.error}")
                else:
                    item.status = BatchStatus.SUCCESS
                    item.result = result
            return item

        tasks = [asyncio.ensure_future(run_one(item)) for item in items]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        # A worker that raised a BaseException (e.g. CancelledError) skipped run_one's handlers
        for item, outcome in zip(items, outcomes):
            if isinstance(outcome, BaseException):
                item.status = BatchStatus.FAILED
                item.error = str(outcome) or type(outcome).__name__
                logger.error(f"Error processing {item.desired_name}: {item.error}")
        return list(items)

    async def bulk_create(
        self,
        items: list[BatchItem],
        base_branch: Optional[str] = None,
        concurrency: Optional[int] = None,
    ) -> BatchReport:
        """Create one worktree per item.

        The directory check is always skipped: no interactive decision can be
        taken concurrently, so an existing directory surfaces as git's own
        failure for that item.
        """
        async def create(item: BatchItem) -> str:
            branch_name = self.lifecycle.apply_branch_prefix(item.desired_name)
            return await self.lifecycle.create(branch_name, item.base_ref or base_branch, skip_dir_check=True)

        await self.run_all(items, create, concurrency)
        return BatchReport.from_items(items)

    async def bulk_sync(
        self,
        records: list[WorktreeRecord],
        main_branch: str,
        rebase: bool = False,
        push: bool = False,
        dry_run: bool = False,
        concurrency: Optional[int] = None,
    ) -> BatchReport:
        """Sync every worktree in ``records`` with ``main_branch``.

        With ``dry_run`` each worktree is only inspected (see SyncService.preview).
        """
        records_by_item = {}
        items = []
        for record in records:
            item = BatchItem(desired_name=record.branch_name or record.path)
            records_by_item[id(item)] = record
            items.append(item)

        async def sync(item: BatchItem):
            record = records_by_item[id(item)]
            if dry_run:
                return await self.sync_service.preview(record, main_branch)
            return await self.sync_service.sync_worktree(record, main_branch, rebase=rebase, push=push)

        await self.run_all(items, sync, concurrency)
        return BatchReport.from_items(items)

    async def bulk_delete(self, branch_names: list[str], force: bool = False, concurrency: Optional[int] = None) -> BatchReport:
        """Delete the worktrees of several branches."""
        items = [BatchItem(desired_name=name) for name in branch_names]

        async def delete(item: BatchItem) -> str:
            return await self.lifecycle.delete(item.desired_name, force=force)

        await self.run_all(items, delete, concurrency)
        return BatchReport.from_items(items)


def parse_batch_lines(lines: Iterable[str]) -> list[BatchItem]:
    """Parse ``name | description | #123`` lines into batch items.

    Blank lines and lines starting with ``#`` are skipped. The third column
    may carry an issue number (``#123``).
    """
    items = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        parts = [part.strip() for part in stripped.split("|")]
        if not parts[0]:
            continue
        item = BatchItem(desired_name=parts[0])
        if len(parts) > 1 and parts[1]:
            item.description = parts[1]
        if len(parts) > 2 and parts[2].startswith("#"):
            item.issue_number = parts[2][1:]
        items.append(item)
    return items


def load_batch_file(path: str) -> list[BatchItem]:
    """Read batch items from a file (see parse_batch_lines)."""
    content = Path(path).read_text(encoding="utf-8")
    return parse_batch_lines(content.splitlines())
