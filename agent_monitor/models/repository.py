"""Repository data model."""

from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from agent_monitor.models.worktree import Worktree


@dataclass
class Repository:
    """A git repository found under one of the workspace roots.

    Identity is the canonical (symlink-resolved) path of its main working tree.
    """

    root: str
    display_name: str
    worktrees: List["Worktree"] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.display_name} @ {self.root}"
