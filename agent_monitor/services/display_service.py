"""Dashboard rendering for scan results"""
from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from agent_monitor.constants import COLUMNS, LEGEND_TEXT
from agent_monitor.formatters import (
    format_agents,
    format_ago,
    format_branch,
    format_checks,
    format_dirty,
    format_last_commit,
    format_pull_request,
)
from agent_monitor.models.scan import ScanDiagnostics, ScanResult
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)


class DisplayService:
    def __init__(self, console: Optional[Console] = None, show_legend: bool = False):
        self.console = console or Console()
        self.show_legend = show_legend

    def build_table(self, result: ScanResult, now: Optional[datetime] = None) -> Table:
        """One row per worktree, grouped by repository; the name shows on the first row only."""
        now = now or result.scanned_at
        table = Table(show_lines=False)

        for col in COLUMNS:
            if col.width:
                table.add_column(col.label, max_width=col.width, overflow="fold")
            else:
                table.add_column(col.label)

        agents_by_worktree = result.agents_by_worktree()

        for index, repository in enumerate(result.repositories):
            if index:
                table.add_section()
            for row_number, worktree in enumerate(repository.worktrees):
                status = worktree.status
                pull_request = status.pull_request if status else None

                # Match COLUMNS order: Repository, Branch, Last Change, Last Commit, Dirty, PR, Checks, Agents
                table.add_row(
                    Text(repository.display_name if row_number == 0 else "", style="bold cyan"),
                    Text(format_branch(worktree)),
                    format_ago(status.last_change if status else None, now),
                    format_last_commit(status.last_commit if status else None, now),
                    format_dirty(status.dirty if status else None),
                    format_pull_request(pull_request),
                    format_checks(pull_request),
                    format_agents(agents_by_worktree.get(worktree.path, []), now),
                )

        return table

    def format_header(self, result: ScanResult) -> str:
        worktree_count = len(result.worktrees)
        return (
            f"[bold]Agent monitor[/bold] - {result.scanned_at.astimezone():%Y-%m-%d %H:%M:%S} - "
            f"{len(result.repositories)} repositories, {worktree_count} worktrees, "
            f"{len(result.assignments)} agents"
        )

    @staticmethod
    def format_diagnostics(diagnostics: ScanDiagnostics) -> Optional[str]:
        """One-line summary of what the scan left out, None when nothing was."""
        parts: List[str] = []
        if diagnostics.skipped_repositories:
            parts.append(f"{diagnostics.skipped_repositories} unreadable repositories skipped")
        if diagnostics.skipped_worktrees:
            parts.append(f"{diagnostics.skipped_worktrees} detached worktrees hidden")
        if diagnostics.missing_worktrees:
            parts.append(f"{diagnostics.missing_worktrees} missing worktrees hidden (git worktree prune)")
        if diagnostics.dropped_agents:
            parts.append(f"{diagnostics.dropped_agents} agents outside known worktrees")
        if not parts:
            return None
        return ", ".join(parts)

    def display(self, result: ScanResult, clear: bool = False) -> None:
        """Print the dashboard, optionally clearing the screen first (watch mode)."""
        table = self.build_table(result)
        if clear:
            self.console.clear()

        self.console.print(self.format_header(result))
        if result.repositories:
            self.console.print(table)
        else:
            self.console.print("[yellow]No git repositories found under the workspace roots[/yellow]")

        summary = self.format_diagnostics(result.diagnostics)
        if summary:
            self.console.print(f"[dim]{summary}[/dim]")

        if self.show_legend:
            self.console.print(LEGEND_TEXT, markup=False, highlight=False)
