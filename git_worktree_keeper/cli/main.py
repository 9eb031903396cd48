"""Command-line entry point for git-worktree-keeper"""

import asyncio
import os
import sys

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config, DEFAULT_CONCURRENCY
from git_worktree_keeper.exceptions import WorktreeKeeperError
from git_worktree_keeper.models.batch import BatchItem
from git_worktree_keeper.services.batch import BatchOrchestrator, load_batch_file
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.services.lifecycle import WorktreeLifecycle
from git_worktree_keeper.services.sync import SyncService
from git_worktree_keeper.utils.logging import setup_logging, get_logger

logger = get_logger(__name__)


async def run_command(parsed_args, config: Config, display: DisplayService) -> int:
    """Dispatch one subcommand; returns the process exit code."""
    decide = None if parsed_args.json else display.ask_directory_decision
    lifecycle = WorktreeLifecycle.for_path(os.path.abspath(parsed_args.repo), config, decide=decide)
    command = parsed_args.command

    if command in ("list", "ls"):
        records = await lifecycle.repository.list()
        commits = await asyncio.gather(*(lifecycle.repository.get_last_commit(r.path) for r in records))
        last_commits = {r.path: commit for r, commit in zip(records, commits)}
        display.display_worktrees(records, last_commits)
        return 0

    if command == "create":
        path = await lifecycle.create(parsed_args.branch, parsed_args.base, skip_dir_check=parsed_args.yes)
        display.success(f"Created worktree '{parsed_args.branch}' at {path}")
        return 0

    if command == "attach":
        path = await lifecycle.attach(parsed_args.branch, skip_dir_check=parsed_args.yes)
        display.success(f"Attached '{parsed_args.branch}' at {path}")
        return 0

    orchestrator = BatchOrchestrator(lifecycle)

    if command in ("delete", "rm"):
        if len(parsed_args.branches) == 1:
            path = await lifecycle.delete(parsed_args.branches[0], force=parsed_args.force)
            display.success(f"Removed worktree at {path}")
            return 0
        report = await orchestrator.bulk_delete(parsed_args.branches, force=parsed_args.force)
        display.display_report(report, "Delete results")
        return 0 if report.ok else 1

    if command == "batch":
        items = load_batch_file(parsed_args.from_file) if parsed_args.from_file else []
        items += [BatchItem(desired_name=name) for name in parsed_args.names]
        if not items:
            display.error("No worktrees to create")
            return 1
        report = await orchestrator.bulk_create(items, parsed_args.base, parsed_args.concurrency)
        display.display_report(report, "Create results")
        return 0 if report.ok else 1

    if command == "sync":
        sync_service: SyncService = orchestrator.sync_service
        main_branch = parsed_args.main or await sync_service.detect_main_branch()
        records = SyncService.select_targets(await lifecycle.repository.list(), parsed_args.branches)
        report = await orchestrator.bulk_sync(
            records,
            main_branch,
            rebase=parsed_args.rebase,
            push=parsed_args.push,
            dry_run=parsed_args.dry_run,
            concurrency=parsed_args.concurrency,
        )
        title = "Sync preview" if parsed_args.dry_run else "Sync results"
        display.display_report(report, f"{title} against {main_branch}")
        return 0 if report.ok else 1

    display.error(f"Unknown command: {command}")
    return 1


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)
    display = DisplayService(json_output=parsed_args.json)

    try:
        config = Config(
            worktrees_base=parsed_args.worktrees_base,
            directory_prefix=parsed_args.directory_prefix,
            branch_prefix=parsed_args.branch_prefix,
            concurrency=getattr(parsed_args, "concurrency", None) or DEFAULT_CONCURRENCY,
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )
        return asyncio.run(run_command(parsed_args, config, display))
    except KeyboardInterrupt:
        display.console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (WorktreeKeeperError, ValueError) as e:
        display.error(str(e))
        if parsed_args.debug:
            display.console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
