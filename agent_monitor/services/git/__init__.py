"""Git-related services for agent-monitor."""

from .repositories import RepositoryLocator, parse_remote_slug
from .worktrees import WorktreeInventory, parse_worktree_porcelain
from .status import WorktreeStatusProbe
from .github import PullRequestService, summarize_checks

__all__ = [
    "RepositoryLocator",
    "parse_remote_slug",
    "WorktreeInventory",
    "parse_worktree_porcelain",
    "WorktreeStatusProbe",
    "PullRequestService",
    "summarize_checks",
]
