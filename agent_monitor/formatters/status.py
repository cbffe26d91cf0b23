"""Worktree status formatting utilities."""

from datetime import datetime
from typing import Optional

from rich.text import Text

from agent_monitor.constants import (
    CHECK_COLORS,
    DETACHED_LABEL,
    PR_STATE_COLORS,
    SYMBOL_CLEAN,
    SYMBOL_DIRTY,
    SYMBOL_NONE,
    SYMBOL_UNKNOWN,
)
from agent_monitor.formatters.date import format_ago
from agent_monitor.models.worktree import LastCommit, PullRequestInfo, Worktree


def format_branch(worktree: Worktree) -> str:
    """Branch name, with a tree marker for linked worktrees."""
    name = worktree.branch_name or DETACHED_LABEL
    return name if worktree.is_main else f"└─ {name}"


def format_dirty(dirty: Optional[bool]) -> Text:
    """
    Format the dirty flag as a glyph.

    Returns:
        ● (yellow) when dirty, ✓ (green) when clean, ⚠ when it couldn't be checked
    """
    if dirty is None:
        return Text(SYMBOL_UNKNOWN, style="dim")
    if dirty:
        return Text(SYMBOL_DIRTY, style="yellow")
    return Text(SYMBOL_CLEAN, style="green")


def format_last_commit(last_commit: Optional[LastCommit], now: Optional[datetime] = None) -> str:
    """'3h ago (abc1234)', or 'never' before the first commit."""
    if last_commit is None:
        return "never"
    return f"{format_ago(last_commit.committed_at, now)} ({last_commit.short_sha})"


def format_pull_request(pull_request: Optional[PullRequestInfo]) -> Text:
    if pull_request is None:
        return Text(SYMBOL_NONE, style="dim")
    return Text(
        f"#{pull_request.number} {pull_request.state.lower()}",
        style=PR_STATE_COLORS.get(pull_request.state, ""),
    )


def format_checks(pull_request: Optional[PullRequestInfo]) -> Text:
    if pull_request is None:
        return Text("")
    value = pull_request.checks.value
    return Text(value, style=CHECK_COLORS.get(value, ""))
