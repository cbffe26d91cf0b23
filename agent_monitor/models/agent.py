"""Agent process models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from agent_monitor.models.worktree import Worktree


@dataclass
class AgentProcess:
    """A running coding agent. Only meaningful for the scan that produced it."""

    pid: int
    kind: str
    command_line: str
    cwd: Optional[str]  # None when the working directory isn't readable
    started_at: Optional[datetime]
    memory_bytes: Optional[int]


@dataclass
class Assignment:
    """Agent running inside a worktree (cwd equal to or below the worktree path)."""

    agent: AgentProcess
    worktree: Worktree
