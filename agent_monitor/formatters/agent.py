"""Agent formatting utilities."""

from datetime import datetime
from typing import List, Optional

from rich.text import Text

from agent_monitor.formatters.date import format_duration
from agent_monitor.models.agent import AgentProcess


def format_memory(num_bytes: Optional[int]) -> str:
    """
    Format a byte count with one decimal in the largest fitting unit.

    Example:
        format_memory(327155712) -> "312.0 MB"
    """
    if num_bytes is None:
        return "?"
    if num_bytes < 1024:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            return f"{value:.1f} {unit}"
    return f"{value:.1f} GB"


def format_agent_line(agent: AgentProcess, now: Optional[datetime] = None) -> str:
    """'[claude] 4242, up 1h 5m, 312.0 MB'"""
    return (
        f"[{agent.kind}] {agent.pid}, up {format_duration(agent.started_at, now)}, "
        f"{format_memory(agent.memory_bytes)}"
    )


def format_agents(agents: List[AgentProcess], now: Optional[datetime] = None) -> Text:
    """One line per agent, stacked in a single cell (plain text, no markup)."""
    return Text("\n".join(format_agent_line(agent, now) for agent in agents))
