"""Discovery of running coding agents from the OS process table"""

import os
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

import psutil

from agent_monitor.config import AgentKind
from agent_monitor.models.agent import AgentProcess
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _best_effort(getter: Callable[[], T]) -> Optional[T]:
    """Call a psutil getter, None if access is denied.

    NoSuchProcess (the process exited) propagates to the caller.
    """
    try:
        return getter()
    except psutil.AccessDenied:
        return None


class ProcessScanner:
    """Finds processes whose command line identifies a known agent kind."""

    def __init__(self, agent_kinds: List[AgentKind], own_pid: Optional[int] = None):
        """Initialize the scanner.

        Args:
            agent_kinds: Agent kinds in classification order (first match wins)
            own_pid: Process to ignore, defaults to this process
        """
        self.agent_kinds = agent_kinds
        self.own_pid = own_pid if own_pid is not None else os.getpid()

    def classify(self, command_line: str) -> Optional[str]:
        """Name of the first agent kind matching command_line, None if unknown."""
        if not command_line:
            return None
        for kind in self.agent_kinds:
            if kind.matches(command_line):
                return kind.name
        return None

    def scan(self) -> List[AgentProcess]:
        """Every classified agent process currently running, in PID order."""
        agents: List[AgentProcess] = []

        for proc in psutil.process_iter(["pid", "name", "cmdline"]):
            info = proc.info
            cmdline = info.get("cmdline") or []
            command_line = " ".join(cmdline) if cmdline else (info.get("name") or "")

            kind = self.classify(command_line)
            if kind is None or proc.pid == self.own_pid:
                continue

            agent = self._describe(proc, kind, command_line)
            if agent is not None:
                agents.append(agent)

        agents.sort(key=lambda agent: agent.pid)
        logger.debug(f"Found {len(agents)} agent processes")
        return agents

    def _describe(self, proc: psutil.Process, kind: str, command_line: str) -> Optional[AgentProcess]:
        try:
            with proc.oneshot():
                created = _best_effort(proc.create_time)
                memory = _best_effort(proc.memory_info)
                cwd = _best_effort(proc.cwd)
        except psutil.NoSuchProcess:
            # Exited between listing and inspection
            logger.debug(f"Process {proc.pid} ({kind}) vanished during scan")
            return None

        return AgentProcess(
            pid=proc.pid,
            kind=kind,
            command_line=command_line,
            cwd=cwd or None,
            started_at=datetime.fromtimestamp(created, tz=timezone.utc) if created is not None else None,
            memory_bytes=memory.rss if memory is not None else None,
        )
