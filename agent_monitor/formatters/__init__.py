"""Formatting utilities for agent-monitor.

This package provides the formatting functions used by the dashboard,
organized into logical modules:
- date: Relative times and durations
- status: Dirty flag, commit and pull request cells
- agent: Agent summary lines and memory sizes
"""

# Date formatters
from .date import format_ago, format_duration

# Status formatters
from .status import (
    format_branch,
    format_dirty,
    format_last_commit,
    format_pull_request,
    format_checks,
)

# Agent formatters
from .agent import format_memory, format_agent_line, format_agents

__all__ = [
    # Date
    "format_ago",
    "format_duration",
    # Status
    "format_branch",
    "format_dirty",
    "format_last_commit",
    "format_pull_request",
    "format_checks",
    # Agent
    "format_memory",
    "format_agent_line",
    "format_agents",
]
