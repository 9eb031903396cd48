"""Batch item, sync result and report models"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class BatchStatus(Enum):
    """Lifecycle of a batch item."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"  # Worker cancelled by the user; not a failure


class SyncStatus(Enum):
    """Outcome of syncing one worktree with the main branch."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    UP_TO_DATE = "up-to-date"


@dataclass
class SyncResult:
    """Result of syncing a single worktree."""
    branch: str
    status: SyncStatus
    method: Optional[str] = None  # merge or rebase
    reason: Optional[str] = None
    pushed: bool = False
    behind: int = 0


@dataclass
class BatchItem:
    """One unit of work in a batch run.

    Created by the caller in PENDING state; the orchestrator settles it
    exactly once.
    """
    desired_name: str
    base_ref: Optional[str] = None
    description: Optional[str] = None
    issue_number: Optional[str] = None
    status: BatchStatus = BatchStatus.PENDING
    result: Any = None
    error: Optional[str] = None

    @property
    def result_path(self) -> Optional[str]:
        """Worktree path produced by a create/attach worker."""
        return self.result if isinstance(self.result, str) else None

    @property
    def is_settled(self) -> bool:
        return self.status is not BatchStatus.PENDING


@dataclass
class ReportLine:
    """Per-item line of a batch report."""
    name: str
    status: str
    reason: str = ""


@dataclass
class BatchReport:
    """Aggregate of a batch run, complete enough for a summary without re-querying git."""
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    up_to_date: int = 0
    lines: List[ReportLine] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.lines)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @classmethod
    def from_items(cls, items: List[BatchItem]) -> "BatchReport":
        """Build a report from settled items, keeping their order."""
        report = cls()
        for item in items:
            if item.status is BatchStatus.FAILED:
                report.failed += 1
                report.lines.append(ReportLine(item.desired_name, "failed", item.error or ""))
            elif item.status is BatchStatus.SKIPPED:
                report.skipped += 1
                report.lines.append(ReportLine(item.desired_name, "skipped", item.error or ""))
            elif isinstance(item.result, SyncResult):
                report._add_sync_result(item)
            elif item.status is BatchStatus.SUCCESS:
                report.succeeded += 1
                report.lines.append(ReportLine(item.desired_name, "success", item.result_path or ""))
            else:
                report.lines.append(ReportLine(item.desired_name, "pending"))
        return report

    def _add_sync_result(self, item: BatchItem) -> None:
        result: SyncResult = item.result
        if result.status is SyncStatus.SKIPPED:
            self.skipped += 1
        elif result.status is SyncStatus.UP_TO_DATE:
            self.up_to_date += 1
        else:
            self.succeeded += 1

        reason = result.reason or ""
        if result.status is SyncStatus.SUCCESS and result.method:
            reason = f"{result.method} of {result.behind} commit(s)"
            if result.pushed:
                reason += ", pushed"
        self.lines.append(ReportLine(item.desired_name, result.status.value, reason))

    def to_dict(self) -> dict:
        """JSON-friendly form of the report."""
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "up_to_date": self.up_to_date,
            "items": [
                {"name": line.name, "status": line.status, "reason": line.reason}
                for line in self.lines
            ],
        }
