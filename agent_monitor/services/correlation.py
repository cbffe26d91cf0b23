"""Assignment of agent processes to the worktrees they run in."""

import os
from typing import List, Optional

from agent_monitor.models.agent import AgentProcess, Assignment
from agent_monitor.models.worktree import Worktree


def is_within(path: str, parent: str) -> bool:
    """True if path equals parent or lies below it (component-wise, not by string prefix)."""
    path = os.path.normpath(path)
    parent = os.path.normpath(parent)
    if path == parent:
        return True
    prefix = parent if parent.endswith(os.sep) else parent + os.sep
    return path.startswith(prefix)


def find_worktree(cwd: str, worktrees: List[Worktree]) -> Optional[Worktree]:
    """Most specific (longest path) worktree containing cwd; first found wins ties."""
    best: Optional[Worktree] = None
    for worktree in worktrees:
        if not is_within(cwd, worktree.path):
            continue
        if best is None or len(os.path.normpath(worktree.path)) > len(os.path.normpath(best.path)):
            best = worktree
    return best


def correlate_agents(agents: List[AgentProcess], worktrees: List[Worktree]) -> List[Assignment]:
    """Assign each agent to the worktree holding its working directory.

    Agents without a readable cwd, or outside every worktree, get no assignment.
    """
    assignments = []
    for agent in agents:
        if not agent.cwd:
            continue
        worktree = find_worktree(agent.cwd, worktrees)
        if worktree is not None:
            assignments.append(Assignment(agent=agent, worktree=worktree))
    return assignments
