"""Sync worktrees with the main branch"""

from typing import Optional

from git_worktree_keeper.exceptions import GitOperationError
from git_worktree_keeper.models.batch import SyncResult, SyncStatus
from git_worktree_keeper.models.worktree import WorktreeRecord
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


class SyncService:
    """Merges or rebases the main branch into individual worktrees."""

    def __init__(self, git_ops: GitOperations):
        self.git_ops = git_ops

    async def detect_main_branch(self) -> str:
        """Default branch of the remote, else ``main``, else ``master``."""
        remote = self.git_ops.remote_name
        target = await self.git_ops.get_symbolic_ref(f"refs/remotes/{remote}/HEAD")
        if target:
            return target.replace(f"refs/remotes/{remote}/", "", 1)

        local = await self.git_ops.get_local_branches()
        if "main" not in local and "master" in local:
            return "master"
        return "main"

    async def sync_worktree(
        self,
        record: WorktreeRecord,
        main_branch: str,
        rebase: bool = False,
        push: bool = False,
    ) -> SyncResult:
        """Bring one worktree up to date with ``main_branch``.

        Worktrees with uncommitted changes are skipped and worktrees that are
        not behind are reported up to date. Merge/rebase/push failures raise
        GitOperationError with git's message.
        """
        branch = record.branch_name
        if not branch:
            return SyncResult(branch=record.path, status=SyncStatus.SKIPPED, reason="detached HEAD")
        if branch == main_branch:
            return SyncResult(branch=branch, status=SyncStatus.SKIPPED, reason="is the main branch")

        status = await self.git_ops.get_status_porcelain(record.path)
        if status.strip():
            return SyncResult(branch=branch, status=SyncStatus.SKIPPED, reason="uncommitted changes")

        behind = await self.git_ops.count_commits(record.path, f"{branch}..{main_branch}")
        if behind == 0:
            return SyncResult(branch=branch, status=SyncStatus.UP_TO_DATE, reason="already up to date")

        method = "rebase" if rebase else "merge"
        logger.info(f"Syncing {branch} with {main_branch} by {method} ({behind} commit(s) behind)")
        if rebase:
            await self.git_ops.rebase(record.path, main_branch)
        else:
            await self.git_ops.merge(record.path, main_branch)

        if push:
            await self.git_ops.push(record.path, force_with_lease=rebase)

        return SyncResult(branch=branch, status=SyncStatus.SUCCESS, method=method, pushed=push, behind=behind)

    async def preview(self, record: WorktreeRecord, main_branch: str) -> SyncResult:
        """What sync_worktree would do, without touching the worktree."""
        branch = record.branch_name or record.path
        try:
            status = await self.git_ops.get_status_porcelain(record.path)
            if status.strip():
                return SyncResult(branch=branch, status=SyncStatus.SKIPPED, reason="uncommitted changes")
            behind = await self.git_ops.count_commits(record.path, f"{branch}..{main_branch}")
        except GitOperationError as e:
            return SyncResult(branch=branch, status=SyncStatus.SKIPPED, reason=str(e))
        if behind == 0:
            return SyncResult(branch=branch, status=SyncStatus.UP_TO_DATE, reason="already up to date")
        return SyncResult(branch=branch, status=SyncStatus.SUCCESS, reason=f"{behind} commit(s) behind", behind=behind)

    @staticmethod
    def select_targets(records: list[WorktreeRecord], branches: Optional[list[str]] = None) -> list[WorktreeRecord]:
        """Linked worktrees to sync, optionally limited to ``branches``."""
        targets = [r for r in records if not r.is_main and not r.prunable]
        if branches:
            targets = [r for r in targets if r.branch_name in branches]
        return targets
