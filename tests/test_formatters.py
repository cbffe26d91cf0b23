"""Tests for formatting utilities"""
from datetime import datetime, timedelta, timezone

import pytest

from agent_monitor.constants import SYMBOL_CLEAN, SYMBOL_DIRTY, SYMBOL_UNKNOWN
from agent_monitor.formatters import (
    format_agent_line,
    format_agents,
    format_ago,
    format_branch,
    format_checks,
    format_dirty,
    format_duration,
    format_last_commit,
    format_memory,
    format_pull_request,
)
from agent_monitor.models.worktree import CheckStatus, LastCommit, PullRequestInfo, Worktree

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


class TestFormatAgo:
    """Test humanized relative times."""

    def test_ninety_minutes(self):
        """Test ninety minutes renders in hours."""
        assert format_ago(NOW - timedelta(minutes=90), NOW) == "1h ago"

    def test_never(self):
        """Test a missing time renders as never."""
        assert format_ago(None, NOW) == "never"

    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(hours=23, minutes=59), "23h ago"),
            (timedelta(days=3), "3d ago"),
            (timedelta(days=45), "1mo ago"),
            (timedelta(days=400), "1y ago"),
        ],
    )
    def test_coarsest_unit(self, delta, expected):
        """Test the coarsest fitting unit is used."""
        assert format_ago(NOW - delta, NOW) == expected

    def test_future_is_just_now(self):
        """Test times in the future render as just now."""
        assert format_ago(NOW + timedelta(minutes=5), NOW) == "just now"


class TestFormatDuration:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=45), "45s"),
            (timedelta(minutes=12), "12m"),
            (timedelta(hours=2, minutes=5), "2h 5m"),
            (timedelta(days=3, hours=4), "3d 4h"),
        ],
    )
    def test_duration_units(self, delta, expected):
        """Test duration formatting across units."""
        assert format_duration(NOW - delta, NOW) == expected

    def test_unknown_start(self):
        """Test an unknown start time renders as a question mark."""
        assert format_duration(None, NOW) == "?"


class TestFormatMemory:
    @pytest.mark.parametrize(
        "num_bytes, expected",
        [
            (512, "512 B"),
            (2048, "2.0 KB"),
            (312 * 1024 * 1024, "312.0 MB"),
            (3 * 1024 ** 3, "3.0 GB"),
            (None, "?"),
        ],
    )
    def test_memory_units(self, num_bytes, expected):
        """Test memory formatting across units."""
        assert format_memory(num_bytes) == expected


class TestAgentFormatting:
    def test_agent_line(self, make_agent):
        """Test the agent line format."""
        agent = make_agent(pid=4242, started_at=NOW - timedelta(hours=1, minutes=5),
                           memory_bytes=312 * 1024 * 1024)

        assert format_agent_line(agent, NOW) == "[claude] 4242, up 1h 5m, 312.0 MB"

    def test_agents_stack_in_one_cell(self, make_agent):
        """Test several agents stack in one cell."""
        cell = format_agents([make_agent(pid=1), make_agent(pid=2, kind="gemini")], NOW)

        lines = cell.plain.split("\n")
        assert len(lines) == 2
        assert lines[0].startswith("[claude] 1,")
        assert lines[1].startswith("[gemini] 2,")

    def test_no_agents(self):
        """Test a worktree without agents renders an empty cell."""
        assert format_agents([], NOW).plain == ""


class TestStatusFormatting:
    def test_dirty_glyphs(self):
        """Test the dirty glyphs."""
        assert format_dirty(True).plain == SYMBOL_DIRTY
        assert format_dirty(False).plain == SYMBOL_CLEAN
        assert format_dirty(None).plain == SYMBOL_UNKNOWN

    def test_last_commit(self):
        """Test the last commit cell."""
        last_commit = LastCommit(committed_at=NOW - timedelta(days=2), short_sha="abc1234")

        assert format_last_commit(last_commit, NOW) == "2d ago (abc1234)"
        assert format_last_commit(None, NOW) == "never"

    def test_pull_request(self):
        """Test the pull request cell."""
        pr = PullRequestInfo(number=12, state="OPEN", checks=CheckStatus.PENDING)

        assert format_pull_request(pr).plain == "#12 open"
        assert format_checks(pr).plain == "pending"
        assert format_pull_request(None).plain == "-"
        assert format_checks(None).plain == ""

    def test_branch(self):
        """Test the branch cell marks linked worktrees."""
        main = Worktree(path="/w/app", branch_name="main", repository_root="/w/app", is_main=True)
        linked = Worktree(path="/w/f", branch_name="feature/x", repository_root="/w/app")
        detached = Worktree(path="/w/app", branch_name=None, repository_root="/w/app", is_main=True)

        assert format_branch(main) == "main"
        assert format_branch(linked) == "└─ feature/x"
        assert format_branch(detached) == "(detached)"
