"""Command-line argument parsing for agent-monitor and agent-worktree."""

import argparse
from typing import List, Optional

from agent_monitor.__version__ import __version__
from agent_monitor.cli.completion import PrintCompletionAction
from agent_monitor.config import parse_agent_kind


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def _agent_kind(value: str):
    try:
        return parse_agent_kind(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_logging_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )


def build_monitor_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-monitor",
        description="Show git worktrees under your workspace roots and the coding agents running in them",
        epilog="PR and CI columns need the GitHub CLI (gh) installed and authenticated.",
    )
    parser.add_argument("--version", action="version", version=f"agent-monitor {__version__}")
    parser.add_argument(
        "--watch", action="store_true", help="Keep refreshing the dashboard until interrupted (Ctrl-C)"
    )
    parser.add_argument(
        "--interval",
        type=_positive_float,
        default=1.0,
        metavar="N",
        help="Seconds between refreshes in watch mode (default: 1)",
    )
    parser.add_argument(
        "--root",
        dest="roots",
        action="append",
        metavar="PATH",
        help="Workspace root to scan (repeatable; replaces the default roots)",
    )
    parser.add_argument(
        "--agent",
        dest="agents",
        action="append",
        type=_agent_kind,
        metavar="KIND=PATTERN",
        help="Extra agent kind recognised by a command-line substring (repeatable)",
    )
    parser.add_argument("--no-pr", action="store_true", help="Skip pull request and CI lookups")
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=10.0,
        metavar="SECONDS",
        help="Timeout for each git or gh call (default: 10)",
    )
    parser.add_argument("--legend", action="store_true", help="Explain the dashboard symbols")
    _add_logging_flags(parser)
    return parser


def parse_monitor_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse agent-monitor arguments."""
    return build_monitor_parser().parse_args(argv)


def build_worktree_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agent-worktree",
        description="Create or remove a branch worktree next to the current repository",
    )
    parser.add_argument("--version", action="version", version=f"agent-worktree {__version__}")
    parser.add_argument(
        "--completion",
        action=PrintCompletionAction,
        help="Print a bash completion script (use: source <(agent-worktree --completion))",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview mode - show what would happen without changing anything",
    )
    launchers = parser.add_mutually_exclusive_group()
    launchers.add_argument(
        "--bash", dest="launcher", action="store_const", const="bash",
        help="Open a shell in the new worktree (add only)",
    )
    launchers.add_argument(
        "--claude", dest="launcher", action="store_const", const="claude",
        help="Start claude in the new worktree (add only)",
    )
    launchers.add_argument(
        "--gemini", dest="launcher", action="store_const", const="gemini",
        help="Start gemini in the new worktree (add only)",
    )
    _add_logging_flags(parser)

    commands = parser.add_subparsers(dest="command", metavar="{add,remove}")
    add = commands.add_parser("add", help="Create a new branch and its worktree")
    add.add_argument("branch", help="Name of the new branch")
    remove = commands.add_parser("remove", help="Remove the worktree of a branch")
    remove.add_argument("branch", help="Branch whose worktree to remove")
    return parser


def parse_worktree_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse agent-worktree arguments. Usage errors exit with status 2."""
    parser = build_worktree_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a command is required: add <branch> or remove <branch>")
    if args.launcher and args.command != "add":
        parser.error(f"--{args.launcher} can only be used with 'add'")
    return args
