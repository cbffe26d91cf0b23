"""
agent-monitor - Live inventory of git worktrees and the coding agents working in them
"""

from .__version__ import __version__
from .core import AgentMonitor

__all__ = ["AgentMonitor", "__version__"]
