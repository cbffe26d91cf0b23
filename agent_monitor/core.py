"""Core functionality for agent-monitor"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from agent_monitor.config import MonitorConfig
from agent_monitor.models.scan import ScanDiagnostics, ScanResult
from agent_monitor.services.correlation import correlate_agents
from agent_monitor.services.display_service import DisplayService
from agent_monitor.services.git import (
    PullRequestService,
    RepositoryLocator,
    WorktreeInventory,
    WorktreeStatusProbe,
)
from agent_monitor.services.process_service import ProcessScanner
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)


class AgentMonitor:
    """Builds the repositories -> worktrees -> agents picture, from scratch on every scan."""

    def __init__(
        self,
        config: Union[MonitorConfig, dict],
        display_service: Optional[DisplayService] = None,
        process_scanner: Optional[ProcessScanner] = None,
    ):
        """Initialize the monitor.

        Args:
            config: MonitorConfig or equivalent dict
            display_service: Renderer, defaults to one printing to stdout
            process_scanner: Agent process source, defaults to the psutil scanner
        """
        if isinstance(config, dict):
            self.config = MonitorConfig.from_dict(config)
        else:
            self.config = config

        self.locator = RepositoryLocator(self.config.expanded_roots())
        self.inventory = WorktreeInventory(command_timeout=self.config.command_timeout)
        pull_requests = None
        if self.config.check_pull_requests:
            pull_requests = PullRequestService(timeout=self.config.command_timeout)
            if not pull_requests.is_available():
                logger.info("gh not found on PATH; PR and check columns will stay empty")
        self.status_probe = WorktreeStatusProbe(
            command_timeout=self.config.command_timeout,
            walk_max_entries=self.config.walk_max_entries,
            walk_max_depth=self.config.walk_max_depth,
            pull_requests=pull_requests,
        )
        self.process_scanner = process_scanner or ProcessScanner(self.config.agent_kinds)
        self.display_service = display_service or DisplayService(show_legend=self.config.show_legend)

    def scan(self) -> ScanResult:
        """Run one full, sequential scan cycle."""
        diagnostics = ScanDiagnostics()
        result = ScanResult(scanned_at=datetime.now(timezone.utc), diagnostics=diagnostics)

        for repository in self.locator.locate(diagnostics):
            try:
                repository.worktrees = self.inventory.list_worktrees(repository, diagnostics)
            except Exception as e:
                message = f"Skipping {repository.display_name}: could not list worktrees ({e})"
                logger.warning(message)
                diagnostics.warn(message)
                diagnostics.skipped_repositories += 1
                continue

            for worktree in repository.worktrees:
                worktree.status = self.status_probe.probe(worktree)
            result.repositories.append(repository)

        try:
            result.agents = self.process_scanner.scan()
        except Exception as e:
            message = f"Could not enumerate processes: {e}"
            logger.warning(message)
            diagnostics.warn(message)
            result.agents = []

        result.assignments = correlate_agents(result.agents, result.worktrees)
        diagnostics.dropped_agents = len(result.agents) - len(result.assignments)

        logger.info(
            f"Scanned {len(result.repositories)} repositories, {len(result.worktrees)} worktrees, "
            f"{len(result.assignments)}/{len(result.agents)} agents assigned"
        )
        return result

    def run_once(self) -> ScanResult:
        result = self.scan()
        self.display_service.display(result)
        return result

    def watch(
        self,
        max_cycles: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Clear-and-redraw every interval until interrupted.

        Returns the number of completed cycles. KeyboardInterrupt ends the loop
        cleanly; max_cycles bounds it (for tests).
        """
        cycles = 0
        try:
            while max_cycles is None or cycles < max_cycles:
                result = self.scan()
                self.display_service.display(result, clear=True)
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break
                sleep(self.config.interval)
        except KeyboardInterrupt:
            logger.info(f"Watch interrupted after {cycles} cycles")
        return cycles

    def run(self) -> int:
        """Render once or watch, depending on configuration. Returns the exit code."""
        if self.config.watch:
            self.watch()
        else:
            self.run_once()
        return 0
