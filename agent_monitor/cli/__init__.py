"""Command-line interfaces for agent-monitor.

This package provides the `agent-monitor` and `agent-worktree` entry points
and their argument parsing.
"""

from .main import main
from .worktree import main as worktree_main
from .args import parse_monitor_args, parse_worktree_args

__all__ = ["main", "worktree_main", "parse_monitor_args", "parse_worktree_args"]
