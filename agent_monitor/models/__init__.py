"""Data models for agent-monitor."""

from .repository import Repository
from .worktree import CheckStatus, LastCommit, PullRequestInfo, Worktree, WorktreeStatus
from .agent import AgentProcess, Assignment
from .scan import ScanDiagnostics, ScanResult

__all__ = [
    "Repository",
    "Worktree",
    "WorktreeStatus",
    "LastCommit",
    "PullRequestInfo",
    "CheckStatus",
    "AgentProcess",
    "Assignment",
    "ScanDiagnostics",
    "ScanResult",
]
