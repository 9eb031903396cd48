"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.config import DEFAULT_CONCURRENCY
from git_worktree_keeper.utils.concurrency import MAX_CONCURRENCY


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="git-worktree-keeper",
        description="Manage many git worktrees side by side",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--debug", action="store_true", help="Show debug information for troubleshooting")
    parser.add_argument("--version", action="version", version=f"git-worktree-keeper {__version__}")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    parser.add_argument("--repo", default=".", help="Path inside the repository (default: current directory)")
    parser.add_argument("--worktrees-base", help="Directory that holds worktrees (default: repository parent)")
    parser.add_argument("--directory-prefix", default="", help="Prefix for worktree directory names")
    parser.add_argument("--branch-prefix", default="", help="Prefix for branches created in batch mode")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", aliases=["ls"], help="List worktrees")

    create = subparsers.add_parser("create", help="Create a worktree on a new branch")
    create.add_argument("branch", help="Name of the new branch")
    create.add_argument("-b", "--base", help="Base branch (default: the main worktree's branch)")
    create.add_argument("-y", "--yes", action="store_true", help="Skip the existing-directory check")

    attach = subparsers.add_parser("attach", help="Create a worktree for an existing branch")
    attach.add_argument("branch", help="Existing local or remote-tracking branch")
    attach.add_argument("-y", "--yes", action="store_true", help="Skip the existing-directory check")

    delete = subparsers.add_parser("delete", aliases=["rm"], help="Remove worktrees and their branches")
    delete.add_argument("branches", nargs="+", help="Branches whose worktrees should be removed")
    delete.add_argument("-f", "--force", action="store_true", help="Remove dirty or locked worktrees")

    batch = subparsers.add_parser("batch", help="Create several worktrees concurrently")
    batch.add_argument("names", nargs="*", help="Branch names to create")
    batch.add_argument("-f", "--from-file", help="Read 'name | description | #issue' lines from a file")
    batch.add_argument("-b", "--base", help="Base branch for all new worktrees")
    _add_concurrency(batch)

    sync = subparsers.add_parser("sync", help="Merge or rebase the main branch into worktrees")
    sync.add_argument("branches", nargs="*", help="Worktree branches to sync (default: all)")
    sync.add_argument("-m", "--main", help="Main branch (default: remote HEAD, main or master)")
    sync.add_argument("--rebase", action="store_true", help="Rebase instead of merging")
    sync.add_argument("--push", action="store_true", help="Push after syncing")
    sync.add_argument("--dry-run", action="store_true", help="Only show what would happen")
    _add_concurrency(sync)

    return parser


def _add_concurrency(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        metavar="N",
        help=f"Number of parallel workers (default: {DEFAULT_CONCURRENCY}, at most {MAX_CONCURRENCY})",
    )


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
