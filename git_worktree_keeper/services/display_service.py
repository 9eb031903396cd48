"""Display and formatting service for worktrees and batch reports"""
import json
from typing import List, Optional

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from git_worktree_keeper.models.batch import BatchReport
from git_worktree_keeper.models.collision import CollisionDecision, DirectoryConflict
from git_worktree_keeper.models.worktree import LastCommit, WorktreeRecord
from git_worktree_keeper.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_STYLES = {
    "success": "green",
    "failed": "red",
    "skipped": "yellow",
    "up-to-date": "cyan",
    "pending": "dim",
}


class DisplayService:
    def __init__(self, console: Optional[Console] = None, json_output: bool = False):
        self.console = console or Console()
        self.json_output = json_output

    def display_worktrees(self, records: List[WorktreeRecord], last_commits: Optional[dict] = None) -> None:
        """Display a table of worktrees (or JSON in json mode)."""
        last_commits = last_commits or {}

        if self.json_output:
            self.console.print_json(json.dumps([
                {
                    "path": r.path,
                    "branch": r.branch_name,
                    "head": r.head,
                    "main": r.is_main,
                    "detached": r.detached,
                    "locked": r.locked,
                    "lock_reason": r.lock_reason,
                    "prunable": r.prunable,
                }
                for r in records
            ]))
            return

        table = Table()
        table.add_column("Branch")
        table.add_column("Path")
        table.add_column("Last Commit")
        table.add_column("Notes")

        for record in records:
            commit: Optional[LastCommit] = last_commits.get(record.path)
            commit_text = f"{commit.short_hash} {commit.message}" if commit else record.head[:7]
            notes = []
            if record.is_main:
                notes.append("main")
            if record.locked:
                notes.append(f"locked: {record.lock_reason}" if record.lock_reason else "locked")
            if record.prunable:
                notes.append("prunable")
            table.add_row(
                record.branch_name or "(detached)",
                record.path,
                commit_text,
                ", ".join(notes),
                style="cyan" if record.is_main else None,
            )

        self.console.print(table)

    def display_report(self, report: BatchReport, title: str = "Results") -> None:
        """Summarise a batch run: counts first, then one line per item."""
        if self.json_output:
            self.console.print_json(json.dumps(report.to_dict()))
            return

        self.console.print(f"\n[bold]{title}[/bold]")
        table = Table()
        table.add_column("Name")
        table.add_column("Status")
        table.add_column("Detail")
        for line in report.lines:
            style = STATUS_STYLES.get(line.status)
            table.add_row(line.name, f"[{style}]{line.status}[/{style}]" if style else line.status, line.reason)
        self.console.print(table)

        summary = [f"[green]{report.succeeded} succeeded[/green]"]
        if report.up_to_date:
            summary.append(f"[cyan]{report.up_to_date} up to date[/cyan]")
        if report.skipped:
            summary.append(f"[yellow]{report.skipped} skipped[/yellow]")
        if report.failed:
            summary.append(f"[red]{report.failed} failed[/red]")
        self.console.print(", ".join(summary))

    def ask_directory_decision(self, conflict: DirectoryConflict) -> CollisionDecision:
        """Interactive decision callback for an existing target directory."""
        self.console.print(f"[yellow]Directory '{conflict.path}' already exists.[/yellow]")
        if conflict.alternative_name:
            self.console.print(f"  rename -> use '{conflict.alternative_name}' instead")
        self.console.print("  delete -> remove the directory and continue")
        self.console.print("  cancel -> stop")
        answer = Prompt.ask(
            "What should happen?",
            choices=[d.value for d in CollisionDecision],
            default=CollisionDecision.CANCEL.value,
            console=self.console,
        )
        return CollisionDecision(answer)

    def success(self, message: str) -> None:
        if not self.json_output:
            self.console.print(f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]Error: {message}[/red]")
