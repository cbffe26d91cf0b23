"""Entry point for agent-worktree"""

import os
import sys
from typing import List, Optional

import git
from rich.console import Console
from rich.text import Text

from agent_monitor.cli.args import parse_worktree_args
from agent_monitor.config import WorktreeToolConfig
from agent_monitor.exceptions import AgentMonitorError, WorktreeCommandError, WorktreeToolError
from agent_monitor.services.worktree_manager import WorktreeManager, git_error_message
from agent_monitor.logging_config import setup_logging

err_console = Console(stderr=True)


def report_error(error: AgentMonitorError) -> None:
    err_console.print(Text.assemble(("error:", "bold red"), " ", str(error)))
    if isinstance(error, WorktreeToolError) and error.hint:
        err_console.print(Text(f"  {error.hint}", style="dim"))


def main(argv: Optional[List[str]] = None, cwd: Optional[str] = None) -> int:
    """Main entry point for the worktree tool."""
    parsed_args = parse_worktree_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    config = WorktreeToolConfig(
        cwd=cwd or os.getcwd(),
        dry_run=parsed_args.dry_run,
        launcher=parsed_args.launcher,
        interactive=sys.stdin.isatty(),
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
    )
    manager = WorktreeManager(config, err_console=err_console)

    try:
        if parsed_args.command == "add":
            manager.add(parsed_args.branch)
        else:
            manager.remove(parsed_args.branch)
        return 0
    except AgentMonitorError as e:
        report_error(e)
        if parsed_args.debug:
            err_console.print_exception()
        return 1
    except git.exc.GitCommandError as e:
        report_error(WorktreeCommandError("command", git_error_message(e)))
        if parsed_args.debug:
            err_console.print_exception()
        return 1
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
