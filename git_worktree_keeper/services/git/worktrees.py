"""Worktree inventory service for git-worktree-keeper."""

from typing import Optional

from git_worktree_keeper.exceptions import GitOperationError
from git_worktree_keeper.models.worktree import LastCommit, WorktreeRecord
from git_worktree_keeper.services.git.operations import GitOperations
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)


def parse_worktree_porcelain(output: str) -> list[WorktreeRecord]:
    """Parse ``git worktree list --porcelain`` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or a bare "detached" line)
        locked [reason]
        prunable [reason]
        (blank line between worktrees)

    A record is flushed only when the next ``worktree`` line starts or the
    input ends. Unknown lines are ignored so newer git versions still parse.

    Args:
        output: Raw porcelain text, possibly empty

    Returns:
        One WorktreeRecord per ``worktree`` line, in listing order
    """
    records: list[WorktreeRecord] = []
    current: Optional[WorktreeRecord] = None

    for raw_line in output.splitlines():
        line = raw_line.rstrip("\r")
        if not line.strip():
            continue

        if line.startswith("worktree "):
            if current is not None:
                records.append(current)
            current = WorktreeRecord(path=line[len("worktree "):], is_main=not records)
            continue

        if current is None:
            # Attribute line before any worktree line
            continue

        if line.startswith("HEAD "):
            current.head = line[len("HEAD "):]
        elif line.startswith("branch "):
            current.branch = line[len("branch "):]
            current.detached = False
        elif line == "detached":
            current.detached = True
            current.branch = None
        elif line == "prunable" or line.startswith("prunable "):
            current.prunable = True
        elif line == "locked" or line.startswith("locked "):
            current.locked = True
            reason = line[len("locked "):] if line.startswith("locked ") else ""
            current.lock_reason = reason or None

    if current is not None:
        records.append(current)

    return records


class WorktreeRepository:
    """Read-only view of the repository's worktrees.

    Nothing is cached: every call asks git again, so results are never stale
    within a call but must be re-queried after a mutation.
    """

    def __init__(self, git_ops: GitOperations):
        """Initialize the repository view.

        Args:
            git_ops: Git primitives used to query the inventory
        """
        self.git_ops = git_ops

    async def list(self) -> list[WorktreeRecord]:
        """Get every worktree of the repository.

        Returns:
            List of WorktreeRecord objects, main worktree first

        Raises:
            NotGitRepositoryError, GitNotFoundError, GitOperationError
        """
        output = await self.git_ops.list_worktrees_porcelain()
        records = parse_worktree_porcelain(output)
        logger.debug(f"Found {len(records)} worktrees")
        for record in records:
            logger.debug(f"  {record}")
        return records

    async def get_main_worktree(self) -> Optional[WorktreeRecord]:
        """The repository's original working directory (first listed)."""
        records = await self.list()
        return records[0] if records else None

    async def find_by_branch(self, branch_name: str) -> Optional[WorktreeRecord]:
        """Worktree whose checked-out branch is ``branch_name`` (without refs/heads/)."""
        for record in await self.list():
            if record.branch_name == branch_name:
                return record
        return None

    async def get_last_commit(self, path: str) -> Optional[LastCommit]:
        """Last commit of the worktree at ``path``, or None if it cannot be read."""
        try:
            fields = await self.git_ops.get_last_commit(path)
        except (GitOperationError, OSError) as e:
            logger.debug(f"Could not read last commit for {path}: {e}")
            return None

        if fields is None:
            return None
        date, message, commit_hash = fields
        return LastCommit(date=date, message=message, short_hash=commit_hash[:7])
