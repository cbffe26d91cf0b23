"""Configuration handling for agent-monitor"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from agent_monitor.constants import (
    DEFAULT_AGENT_KINDS,
    DEFAULT_CONFIG_FILES,
    DEFAULT_SETUP_HOOKS,
    DEFAULT_WORKSPACE_ROOTS,
    LAUNCHERS,
)


@dataclass(frozen=True)
class AgentKind:
    """A recognised agent: its display name and the command-line substrings that identify it."""

    name: str
    patterns: tuple

    def matches(self, command_line: str) -> bool:
        lowered = command_line.lower()
        return any(pattern.lower() in lowered for pattern in self.patterns)


def default_agent_kinds() -> List[AgentKind]:
    return [AgentKind(name, tuple(patterns)) for name, patterns in DEFAULT_AGENT_KINDS.items()]


def parse_agent_kind(value: str) -> AgentKind:
    """Parse a KIND=PATTERN[,PATTERN...] command-line value."""
    name, sep, patterns = value.partition("=")
    name = name.strip()
    pattern_list = tuple(p.strip() for p in patterns.split(",") if p.strip())
    if not sep or not name or not pattern_list:
        raise ValueError(f"agent kind must look like KIND=PATTERN, got '{value}'")
    return AgentKind(name, pattern_list)


@dataclass
class MonitorConfig:
    """Configuration for the agent monitor with validation."""

    # Where to look for repositories
    workspace_roots: List[str] = field(default_factory=lambda: list(DEFAULT_WORKSPACE_ROOTS))

    # Agent classification, first match wins
    agent_kinds: List[AgentKind] = field(default_factory=default_agent_kinds)

    # Refresh
    watch: bool = False
    interval: float = 1.0

    # Status probing
    check_pull_requests: bool = True
    command_timeout: float = 10.0  # Applied to every git and gh invocation
    walk_max_entries: int = 20000
    walk_max_depth: int = 12

    # Output
    show_legend: bool = False
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_workspace_roots()
        self._validate_agent_kinds()
        self._validate_interval()
        self._validate_command_timeout()
        self._validate_walk_limits()

    def _validate_workspace_roots(self):
        if not isinstance(self.workspace_roots, list):
            raise ValueError("workspace_roots must be a list")

    def _validate_agent_kinds(self):
        names = [kind.name for kind in self.agent_kinds]
        if len(names) != len(set(names)):
            raise ValueError(f"agent kind names must be unique, got {names}")

    def _validate_interval(self):
        if self.interval <= 0:
            raise ValueError(f"interval must be positive, got {self.interval}")

    def _validate_command_timeout(self):
        if self.command_timeout <= 0:
            raise ValueError(f"command_timeout must be positive, got {self.command_timeout}")

    def _validate_walk_limits(self):
        if self.walk_max_entries <= 0:
            raise ValueError(f"walk_max_entries must be positive, got {self.walk_max_entries}")
        if self.walk_max_depth < 0:
            raise ValueError(f"walk_max_depth cannot be negative, got {self.walk_max_depth}")

    def expanded_roots(self) -> List[str]:
        """Workspace roots with '~' expanded, in configured order."""
        return [os.path.expanduser(root) for root in self.workspace_roots]

    def to_dict(self) -> dict:
        return {
            "workspace_roots": self.workspace_roots,
            "agent_kinds": {kind.name: list(kind.patterns) for kind in self.agent_kinds},
            "watch": self.watch,
            "interval": self.interval,
            "check_pull_requests": self.check_pull_requests,
            "command_timeout": self.command_timeout,
            "walk_max_entries": self.walk_max_entries,
            "walk_max_depth": self.walk_max_depth,
            "show_legend": self.show_legend,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "MonitorConfig":
        """Create MonitorConfig from dictionary, ignoring unknown keys."""
        known_fields = {
            "workspace_roots",
            "watch",
            "interval",
            "check_pull_requests",
            "command_timeout",
            "walk_max_entries",
            "walk_max_depth",
            "show_legend",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        kinds: Optional[Dict[str, List[str]]] = config_dict.get("agent_kinds")
        if kinds is not None:
            filtered["agent_kinds"] = [AgentKind(name, tuple(p)) for name, p in kinds.items()]
        return cls(**filtered)


@dataclass
class WorktreeToolConfig:
    """Configuration for one invocation of the worktree tool."""

    cwd: str = field(default_factory=os.getcwd)
    dry_run: bool = False
    launcher: Optional[str] = None  # bash, claude, gemini
    interactive: bool = True
    config_files: List[str] = field(default_factory=lambda: list(DEFAULT_CONFIG_FILES))
    setup_hooks: List[str] = field(default_factory=lambda: list(DEFAULT_SETUP_HOOKS))
    command_timeout: float = 60.0
    hook_timeout: Optional[float] = 600.0
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        if self.launcher is not None and self.launcher not in LAUNCHERS:
            raise ValueError(f"launcher must be one of {list(LAUNCHERS)}, got '{self.launcher}'")
        if self.command_timeout <= 0:
            raise ValueError(f"command_timeout must be positive, got {self.command_timeout}")
        if self.hook_timeout is not None and self.hook_timeout <= 0:
            raise ValueError(f"hook_timeout must be positive, got {self.hook_timeout}")

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)
