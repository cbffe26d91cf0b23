"""Entry point for agent-monitor"""

import sys
from typing import List, Optional

from rich.console import Console

from agent_monitor.cli.args import parse_monitor_args
from agent_monitor.config import MonitorConfig, default_agent_kinds
from agent_monitor.constants import DEFAULT_WORKSPACE_ROOTS
from agent_monitor.core import AgentMonitor
from agent_monitor.exceptions import AgentMonitorError
from agent_monitor.logging_config import get_log_file, setup_logging

err_console = Console(stderr=True)


def build_config(parsed_args) -> MonitorConfig:
    """Turn parsed arguments into a MonitorConfig."""
    return MonitorConfig(
        workspace_roots=parsed_args.roots or list(DEFAULT_WORKSPACE_ROOTS),
        agent_kinds=default_agent_kinds() + list(parsed_args.agents or []),
        watch=parsed_args.watch,
        interval=parsed_args.interval,
        check_pull_requests=not parsed_args.no_pr,
        command_timeout=parsed_args.timeout,
        show_legend=parsed_args.legend,
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the monitor."""
    parsed_args = parse_monitor_args(argv)

    # Watch mode redraws the screen, so log records go to a file instead
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug, watch_mode=parsed_args.watch)

    try:
        config = build_config(parsed_args)
        if parsed_args.debug:
            err_console.print("[yellow]Debug mode enabled[/yellow]")
            for key, value in config.to_dict().items():
                err_console.print(f"  {key}: {value}", markup=False)
            if parsed_args.watch:
                err_console.print(f"[dim]Logging to {get_log_file()}[/dim]")

        monitor = AgentMonitor(config)
        return monitor.run()
    except KeyboardInterrupt:
        return 0
    except (AgentMonitorError, ValueError) as e:
        err_console.print(f"[red]error:[/red] {e}", highlight=False)
        if parsed_args.debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
