"""Result of one monitoring cycle."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from agent_monitor.models.agent import AgentProcess, Assignment
from agent_monitor.models.repository import Repository
from agent_monitor.models.worktree import Worktree


@dataclass
class ScanDiagnostics:
    """What a scan had to leave out, so the dashboard can say so."""

    warnings: List[str] = field(default_factory=list)
    skipped_repositories: int = 0
    skipped_worktrees: int = 0  # Detached HEAD linked worktrees
    missing_worktrees: int = 0  # Registered, but the directory is gone
    dropped_agents: int = 0  # No readable cwd, or cwd outside every known worktree

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def has_drops(self) -> bool:
        return bool(
            self.skipped_repositories
            or self.skipped_worktrees
            or self.missing_worktrees
            or self.dropped_agents
        )


@dataclass
class ScanResult:
    """Repositories, their probed worktrees, and the agents assigned to them."""

    scanned_at: datetime
    repositories: List[Repository] = field(default_factory=list)
    agents: List[AgentProcess] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)
    diagnostics: ScanDiagnostics = field(default_factory=ScanDiagnostics)

    @property
    def worktrees(self) -> List[Worktree]:
        return [wt for repo in self.repositories for wt in repo.worktrees]

    def agents_by_worktree(self) -> Dict[str, List[AgentProcess]]:
        """Assigned agents keyed by worktree path, in PID order."""
        grouped: Dict[str, List[AgentProcess]] = {}
        for assignment in self.assignments:
            grouped.setdefault(assignment.worktree.path, []).append(assignment.agent)
        for agents in grouped.values():
            agents.sort(key=lambda agent: agent.pid)
        return grouped
