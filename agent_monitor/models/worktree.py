"""Worktree data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class CheckStatus(Enum):
    """Aggregated CI status of a pull request."""
    FAILING = "failing"
    PENDING = "pending"
    PASSING = "passing"
    UNKNOWN = "unknown"


@dataclass
class LastCommit:
    """Commit currently at HEAD of a worktree."""
    committed_at: datetime
    short_sha: str


@dataclass
class PullRequestInfo:
    """Open pull request for a worktree's branch."""
    number: int
    state: str
    checks: CheckStatus = CheckStatus.UNKNOWN


@dataclass
class WorktreeStatus:
    """Derived status of a worktree. Every field is None when it couldn't be determined."""
    last_change: Optional[datetime] = None
    last_commit: Optional[LastCommit] = None
    dirty: Optional[bool] = None  # None = couldn't check
    pull_request: Optional[PullRequestInfo] = None


@dataclass
class Worktree:
    """A working directory of a repository, bound to a branch."""

    path: str
    branch_name: Optional[str]  # None only for a detached main worktree
    repository_root: str
    is_main: bool = False
    status: Optional[WorktreeStatus] = None

    def __str__(self) -> str:
        main_marker = " (main)" if self.is_main else ""
        return f"{self.branch_name or 'detached'} @ {self.path}{main_marker}"
