"""Worktree data models."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

BRANCH_REF_PREFIX = "refs/heads/"


def strip_branch_ref(ref: Optional[str]) -> Optional[str]:
    """Turn ``refs/heads/feature/x`` into ``feature/x``; other values pass through."""
    if ref and ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX):]
    return ref


@dataclass
class WorktreeRecord:
    """One entry of ``git worktree list --porcelain``."""

    path: str
    head: str = ""
    branch: Optional[str] = None  # Full ref; None means detached
    detached: bool = False
    locked: bool = False
    lock_reason: Optional[str] = None
    prunable: bool = False
    is_main: bool = False  # First entry of the listing is the main working tree

    @property
    def branch_name(self) -> Optional[str]:
        """Branch name without the ``refs/heads/`` prefix."""
        return strip_branch_ref(self.branch)

    def __str__(self) -> str:
        """String representation of worktree."""
        name = self.branch_name or f"(detached {self.head[:7]})"
        flags = []
        if self.is_main:
            flags.append("main")
        if self.locked:
            flags.append("locked")
        if self.prunable:
            flags.append("prunable")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{name} @ {self.path}{suffix}"


@dataclass
class LastCommit:
    """Summary of the commit a worktree's HEAD points at."""

    date: str
    message: str
    short_hash: str


@dataclass
class BranchNamespace:
    """Local and remote-tracking branch names, remote prefix stripped."""

    local: list[str] = field(default_factory=list)
    remote: list[str] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        """Union of local and remote names in first-seen order."""
        seen: dict[str, None] = {}
        for name in [*self.local, *self.remote]:
            seen.setdefault(name, None)
        return list(seen)

    def __contains__(self, name: str) -> bool:
        return name in self.local or name in self.remote

    def __iter__(self):
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "BranchNamespace":
        """Build a namespace of local names only (handy for tests and callers)."""
        return cls(local=list(names))
