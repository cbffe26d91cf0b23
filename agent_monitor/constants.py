"""Shared constants for agent-monitor."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("repository", "Repository", 24),
    ColumnDefinition("branch", "Branch", 28),
    ColumnDefinition("last_change", "Last Change", 12),
    ColumnDefinition("last_commit", "Last Commit", 20),
    ColumnDefinition("dirty", "Dirty", 5),
    ColumnDefinition("pr", "PR", 12),
    ColumnDefinition("checks", "Checks", 8),
    ColumnDefinition("agents", "Agents", 0),
]


# Candidate workspace roots, in scan order ("~" is expanded at scan time)
DEFAULT_WORKSPACE_ROOTS: List[str] = [
    "~/workspaces",
    "/workspaces",
    "~/repos",
    "~/projects",
    "~/code",
]

# Agent kind name -> command-line substrings, in classification order
DEFAULT_AGENT_KINDS = {
    "claude": ["claude"],
    "gemini": ["gemini"],
}

# Untracked local files copied into a freshly created worktree
DEFAULT_CONFIG_FILES: List[str] = [
    ".env",
    ".env.local",
    ".env.development.local",
    ".env.test.local",
    ".secrets",
    ".secrets.local",
    ".claude/settings.local.json",
]

# Setup scripts looked up (in order) inside a new worktree
DEFAULT_SETUP_HOOKS: List[str] = [
    ".worktree-setup.sh",
    "scripts/setup-worktree.sh",
    "scripts/setup.sh",
]

LAUNCHERS = ("bash", "claude", "gemini")


# Symbol constants
SYMBOL_DIRTY = "●"
SYMBOL_CLEAN = "✓"
SYMBOL_UNKNOWN = "⚠"
SYMBOL_NONE = "-"
DETACHED_LABEL = "(detached)"


# Check status colors (Rich color names)
CHECK_COLORS = {
    "failing": "red",
    "pending": "yellow",
    "passing": "green",
    "unknown": "dim",
}

PR_STATE_COLORS = {
    "OPEN": "green",
    "DRAFT": "dim",
    "MERGED": "magenta",
    "CLOSED": "red",
}


LEGEND_TEXT = """
Legend:
● = Uncommitted or untracked changes    ✓ = Clean
⚠ = Status unknown (see log)            - = No pull request
Agents: [kind] PID, uptime, resident memory
"""
