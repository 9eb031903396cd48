"""Worktree lifecycle: create, attach and delete.

Every operation runs its steps strictly in order:

    requested -> collision checked -> directory checked -> [decision]
    -> mutated -> cleaned -> done

and any step may abort by raising. Nothing is retried after a failed git
mutation; the only retry is the single "rename" branch of the directory
check, which re-enters the operation with the directory check disabled.
"""

import asyncio
import inspect
import os
import shutil
from typing import Awaitable, Callable, Optional, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import (
    BranchNotFoundError,
    DirectoryExistsError,
    GitOperationError,
    UserCancelledError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.collision import CollisionDecision, DirectoryConflict
from git_worktree_keeper.services.collision import CollisionResolver
from git_worktree_keeper.services.git.branch_queries import BranchQueries, strip_remote_prefix
from git_worktree_keeper.services.git.operations import GitOperations, is_not_fully_merged
from git_worktree_keeper.services.git.worktrees import WorktreeRepository
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

DecisionCallback = Callable[
    [DirectoryConflict], Union[CollisionDecision, str, Awaitable[Union[CollisionDecision, str]]]
]


class WorktreeLifecycle:
    """Creates, attaches and deletes worktrees on top of GitOperations."""

    def __init__(
        self,
        config: Config,
        git_ops: GitOperations,
        repository: Optional[WorktreeRepository] = None,
        branch_queries: Optional[BranchQueries] = None,
        decide: Optional[DecisionCallback] = None,
    ):
        """Initialize the lifecycle manager.

        Args:
            config: Worktree placement and prefix settings
            git_ops: Git primitives
            repository: Worktree inventory (built from git_ops if omitted)
            branch_queries: Branch namespace queries (built from git_ops if omitted)
            decide: Called once per existing target directory to choose
                delete, rename or cancel. Without it an existing directory
                raises DirectoryExistsError.
        """
        self.config = config
        self.git_ops = git_ops
        self.repository = repository or WorktreeRepository(git_ops)
        self.branch_queries = branch_queries or BranchQueries(git_ops)
        self.decide = decide

    @classmethod
    def for_path(cls, repo_path: str, config: Config, decide: Optional[DecisionCallback] = None) -> "WorktreeLifecycle":
        """Build a lifecycle manager for the repository containing ``repo_path``."""
        return cls(config, GitOperations(repo_path, config), decide=decide)

    # Paths

    def base_directory(self, repo_root: str) -> str:
        """Directory that holds the worktrees; never pruned during cleanup."""
        if self.config.worktrees_base:
            base = os.path.expanduser(self.config.worktrees_base)
            return os.path.abspath(os.path.join(repo_root, base))
        return os.path.dirname(os.path.abspath(repo_root))

    def worktree_path_for(self, directory_name: str, repo_root: str) -> str:
        """Absolute worktree directory for ``directory_name``. Pure."""
        return os.path.abspath(
            os.path.join(self.base_directory(repo_root), self.config.directory_prefix + directory_name)
        )

    def apply_branch_prefix(self, branch_name: str) -> str:
        """Prepend the configured branch prefix unless it is already there."""
        prefix = self.config.branch_prefix
        if prefix and not branch_name.startswith(prefix):
            return prefix + branch_name
        return branch_name

    # Operations

    async def create(self, branch_name: str, base_branch: Optional[str] = None, skip_dir_check: bool = False) -> str:
        """Create a worktree on a new branch.

        Args:
            branch_name: New branch, also used as the directory name
            base_branch: Start point; defaults to the main worktree's branch
            skip_dir_check: Don't look for an existing target directory

        Returns:
            Absolute path of the new worktree

        Raises:
            NameCollisionError: The branch name clashes with the namespace
            UserCancelledError: The decision callback chose cancel
            DirectoryExistsError: Target exists and no callback was given, or
                the delete decision could not remove it
            GitOperationError: git refused the mutation (message verbatim)
        """
        namespace = await self.branch_queries.get_namespace()
        CollisionResolver.check_collision(branch_name, namespace)

        repo_root = await self.git_ops.get_repository_root()
        target = self.worktree_path_for(branch_name, repo_root)

        if not skip_dir_check and os.path.lexists(target):
            conflict = DirectoryConflict(
                path=target,
                branch_name=branch_name,
                operation="create",
                alternative_name=CollisionResolver.suggest_alternative(branch_name, namespace),
            )
            decision = await self._resolve_conflict(conflict)
            if decision is CollisionDecision.RENAME:
                logger.info(f"Directory {target} exists, creating {conflict.alternative_name} instead")
                return await self.create(conflict.alternative_name, base_branch, skip_dir_check=True)
            await self._remove_directory(target)

        if not base_branch:
            base_branch = await self._default_base_branch()

        await self.git_ops.add_worktree_new_branch(branch_name, target, base_branch)
        return target

    async def attach(self, existing_branch: str, skip_dir_check: bool = False, directory_name: Optional[str] = None) -> str:
        """Create a worktree for a branch that already exists.

        ``existing_branch`` may be a local branch or a remote-tracking name
        such as ``origin/feature``; the latter is checked out as a new local
        tracking branch. No collision check is made since the branch is
        supposed to exist. On rename only the directory changes.

        Returns:
            Absolute path of the new worktree
        """
        local_branches = await self.branch_queries.get_local_branches()
        remote_ref = None
        local_name = existing_branch
        if existing_branch not in local_branches:
            if existing_branch not in await self.branch_queries.get_remote_branches():
                raise BranchNotFoundError(existing_branch)
            remote_ref = existing_branch
            local_name = strip_remote_prefix(existing_branch)
            if local_name in local_branches:
                remote_ref = None

        repo_root = await self.git_ops.get_repository_root()
        directory_name = directory_name or local_name.replace("/", "-")
        target = self.worktree_path_for(directory_name, repo_root)

        if not skip_dir_check and os.path.lexists(target):
            namespace = await self.branch_queries.get_namespace()
            conflict = DirectoryConflict(
                path=target,
                branch_name=local_name,
                operation="attach",
                alternative_name=CollisionResolver.suggest_alternative(directory_name, namespace),
            )
            decision = await self._resolve_conflict(conflict)
            if decision is CollisionDecision.RENAME:
                logger.info(f"Directory {target} exists, using {conflict.alternative_name} instead")
                return await self.attach(existing_branch, skip_dir_check=True, directory_name=conflict.alternative_name)
            await self._remove_directory(target)

        if remote_ref:
            await self.git_ops.add_worktree_tracking_branch(local_name, target, remote_ref)
        else:
            await self.git_ops.add_worktree_existing_branch(target, local_name)
        return target

    async def delete(self, branch_name: str, force: bool = False) -> str:
        """Remove the worktree checked out on ``branch_name`` and delete the branch.

        The worktree is looked up by its branch, not its directory name, so
        worktrees attached under a renamed directory are found too.

        Args:
            branch_name: Branch checked out in the worktree
            force: Remove the worktree even if it is dirty or locked

        Returns:
            Path of the removed worktree

        Raises:
            WorktreeNotFoundError: No worktree has this branch checked out
            GitOperationError: git failed to remove the worktree, or the soft
                branch delete failed for a reason other than unmerged commits
        """
        records = await self.repository.list()
        record = next((r for r in records if r.branch_name == branch_name), None)
        if record is None:
            similar = [r.branch_name for r in records if r.branch_name and branch_name in r.branch_name]
            raise WorktreeNotFoundError(branch_name, similar)
        if record.is_main:
            raise GitOperationError("worktree_remove", branch_name, f"'{record.path}' is the main worktree")

        repo_root = await self.git_ops.get_repository_root()
        base_dir = self.base_directory(repo_root)

        await self.git_ops.remove_worktree(record.path, force=force)

        await asyncio.to_thread(prune_empty_parents, record.path, base_dir)

        try:
            await self.git_ops.delete_branch(branch_name)
        except GitOperationError as e:
            if not is_not_fully_merged(e):
                raise
            logger.info(f"Branch {branch_name} is not fully merged, forcing deletion")
            try:
                await self.git_ops.delete_branch(branch_name, force=True)
            except GitOperationError as forced_error:
                # The worktree is already gone; a leftover branch is only reported
                logger.warning(f"Removed worktree {record.path} but could not delete branch {branch_name}: {forced_error}")

        return record.path

    # Helpers

    async def _default_base_branch(self) -> str:
        """The main worktree's current branch (its commit if detached)."""
        main = await self.repository.get_main_worktree()
        if main is not None:
            if main.branch_name:
                return main.branch_name
            if main.head:
                return main.head

        current = await self.git_ops.get_current_branch()
        if not current:
            raise GitOperationError("resolve_base", message="Cannot determine a base branch; pass one explicitly")
        return current

    async def _resolve_conflict(self, conflict: DirectoryConflict) -> CollisionDecision:
        """Ask the decision callback once; cancel aborts the operation."""
        if self.decide is None:
            raise DirectoryExistsError(conflict.path)

        decision = self.decide(conflict)
        if inspect.isawaitable(decision):
            decision = await decision
        decision = CollisionDecision(decision)
        logger.debug(f"Decision for {conflict}: {decision.value}")

        if decision is CollisionDecision.CANCEL:
            raise UserCancelledError(conflict.operation, conflict.path)
        return decision

    async def _remove_directory(self, path: str) -> None:
        """Remove whatever occupies the target path (directory, file or symlink)."""
        logger.info(f"Deleting existing path {path}")
        try:
            await asyncio.to_thread(_remove_path, path)
        except OSError as e:
            raise DirectoryExistsError(path, reason=e.strerror or str(e)) from e


def _remove_path(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def prune_empty_parents(removed_path: str, base_dir: str) -> list[str]:
    """Remove empty ancestors of ``removed_path`` up to (excluding) ``base_dir``.

    Stops at the first non-empty directory. Paths outside ``base_dir`` are
    left alone. Errors end the walk quietly since the worktree itself is
    already gone.

    Returns:
        Directories that were removed, deepest first
    """
    base_dir = os.path.abspath(base_dir)
    current = os.path.dirname(os.path.abspath(removed_path))
    removed = []

    while current != base_dir and current.startswith(base_dir + os.sep):
        try:
            if os.listdir(current):
                break
            os.rmdir(current)
        except OSError as e:
            logger.debug(f"Stopped cleaning up at {current}: {e}")
            break
        removed.append(current)
        current = os.path.dirname(current)

    if removed:
        logger.debug(f"Removed empty directories: {', '.join(removed)}")
    return removed
