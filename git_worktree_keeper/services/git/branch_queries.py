"""Branch query service for git-worktree-keeper."""

from git_worktree_keeper.models.worktree import BranchNamespace
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def strip_remote_prefix(remote_branch: str) -> str:
    """``origin/feature/x`` -> ``feature/x``"""
    return remote_branch.split("/", 1)[1] if "/" in remote_branch else remote_branch


class BranchQueries:
    """Service for querying the branch namespace."""

    def __init__(self, git_ops: GitOperations):
        self.git_ops = git_ops

    async def get_local_branches(self) -> list[str]:
        return await self.git_ops.get_local_branches()

    async def get_remote_branches(self) -> list[str]:
        """Remote-tracking names with their remote, e.g. ``origin/main``."""
        return await self.git_ops.get_remote_branches()

    async def get_namespace(self) -> BranchNamespace:
        """Local names plus remote-tracking names with the remote stripped."""
        local = await self.get_local_branches()
        remote = [strip_remote_prefix(name) for name in await self.get_remote_branches()]
        logger.debug(f"Branch namespace: {len(local)} local, {len(remote)} remote")
        return BranchNamespace(local=local, remote=remote)
