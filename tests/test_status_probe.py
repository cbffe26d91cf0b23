"""Tests for WorktreeStatusProbe and pull request lookup"""
import json
import os
import subprocess
from datetime import datetime, timezone
from unittest.mock import Mock, patch

import git

from agent_monitor.models.worktree import CheckStatus, PullRequestInfo, Worktree
from agent_monitor.services.git.github import PullRequestService, summarize_checks
from agent_monitor.services.git.status import WorktreeStatusProbe, parse_status_porcelain


def worktree_for(repo, branch="main") -> Worktree:
    return Worktree(
        path=repo.working_tree_dir,
        branch_name=branch,
        repository_root=repo.working_tree_dir,
        is_main=True,
    )


class TestParseStatusPorcelain:
    """Test parsing of git status --porcelain."""

    def test_clean(self):
        """Test empty output means no changes."""
        assert parse_status_porcelain("") == {"modified": False, "untracked": False, "staged": False}

    def test_untracked_only(self):
        """Test ?? lines set only the untracked flag."""
        assert parse_status_porcelain("?? notes.txt") == {
            "modified": False, "untracked": True, "staged": False,
        }

    def test_staged_and_modified(self):
        """Test index and working tree columns are read separately."""
        details = parse_status_porcelain("M  staged.py\n M unstaged.py")

        assert details["staged"] is True
        assert details["modified"] is True
        assert details["untracked"] is False


class TestDirtyFlag:
    """Test dirty detection against a real repository."""

    def test_clean_worktree(self, git_repo):
        """Test a freshly committed repository is clean."""
        assert WorktreeStatusProbe().is_dirty(git_repo.working_tree_dir) is False

    def test_untracked_file_only_is_dirty(self, git_repo):
        """Test a single untracked file makes the worktree dirty."""
        with open(os.path.join(git_repo.working_tree_dir, "scratch.txt"), "w") as f:
            f.write("temp\n")

        probe = WorktreeStatusProbe()

        assert probe.is_dirty(git_repo.working_tree_dir) is True
        assert probe.get_status_details(git_repo.working_tree_dir) == {
            "modified": False, "untracked": True, "staged": False,
        }

    def test_unstaged_change_is_dirty(self, git_repo):
        """Test a modified tracked file makes the worktree dirty."""
        with open(os.path.join(git_repo.working_tree_dir, "README.md"), "a") as f:
            f.write("more\n")

        assert WorktreeStatusProbe().is_dirty(git_repo.working_tree_dir) is True

    def test_staged_change_is_dirty(self, git_repo):
        """Test a staged new file is reported as staged."""
        with open(os.path.join(git_repo.working_tree_dir, "new.py"), "w") as f:
            f.write("x = 1\n")
        git_repo.index.add(["new.py"])

        details = WorktreeStatusProbe().get_status_details(git_repo.working_tree_dir)

        assert details["staged"] is True

    def test_missing_path_is_unknown(self, temp_dir):
        """Test a missing directory gives an unknown dirty flag."""
        assert WorktreeStatusProbe().is_dirty(str(temp_dir / "gone")) is None

    def test_untracked_file_hidden_by_config_is_dirty(self, git_repo):
        """Test untracked files count even with status.showUntrackedFiles=no."""
        git_repo.git.config("status.showUntrackedFiles", "no")
        with open(os.path.join(git_repo.working_tree_dir, "new.txt"), "w") as f:
            f.write("new\n")

        probe = WorktreeStatusProbe()

        assert probe.is_dirty(git_repo.working_tree_dir) is True
        assert probe.get_status_details(git_repo.working_tree_dir)["untracked"] is True


class TestLastCommit:
    """Test last commit lookup."""

    def test_last_commit(self, git_repo):
        """Test short hash and commit date of HEAD."""
        last_commit = WorktreeStatusProbe().get_last_commit(git_repo.working_tree_dir)

        assert last_commit.short_sha == git_repo.head.commit.hexsha[:7]
        assert last_commit.committed_at == datetime.fromtimestamp(
            git_repo.head.commit.committed_date, tz=timezone.utc
        )

    def test_no_commits_yet(self, temp_dir):
        """Test a repository without commits has no last commit."""
        repo = git.Repo.init(temp_dir / "empty")
        try:
            assert WorktreeStatusProbe().get_last_commit(repo.working_tree_dir) is None
        finally:
            repo.close()


class TestLastFileChange:
    """Test the bounded file walk."""

    def test_newest_file_outside_git_metadata(self, git_repo):
        """Test the newest mtime is taken from files outside .git."""
        root = git_repo.working_tree_dir
        os.makedirs(os.path.join(root, "src"))
        with open(os.path.join(root, "src", "app.py"), "w") as f:
            f.write("print('hi')\n")
        os.utime(os.path.join(root, "README.md"), (1_600_000_000, 1_600_000_000))
        os.utime(os.path.join(root, "src", "app.py"), (1_700_000_000, 1_700_000_000))

        last_change = WorktreeStatusProbe().get_last_file_change(root)

        assert last_change == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)

    def test_empty_tree(self, temp_dir):
        """Test an empty directory has no last change."""
        (temp_dir / "empty").mkdir()

        assert WorktreeStatusProbe().get_last_file_change(str(temp_dir / "empty")) is None

    def test_missing_tree(self, temp_dir):
        """Test a missing directory has no last change."""
        assert WorktreeStatusProbe().get_last_file_change(str(temp_dir / "missing")) is None

    def test_depth_limit(self, temp_dir):
        """Test files below the depth limit are not visited."""
        deep = temp_dir / "tree" / "a" / "b"
        deep.mkdir(parents=True)
        (deep / "deep.txt").write_text("x")
        (temp_dir / "tree" / "top.txt").write_text("y")
        os.utime(deep / "deep.txt", (1_700_000_000, 1_700_000_000))
        os.utime(temp_dir / "tree" / "top.txt", (1_600_000_000, 1_600_000_000))

        probe = WorktreeStatusProbe(walk_max_depth=1)

        assert probe.get_last_file_change(str(temp_dir / "tree")) == datetime.fromtimestamp(
            1_600_000_000, tz=timezone.utc
        )

    def test_entry_limit_still_returns_a_time(self, temp_dir):
        """Test hitting the entry limit returns the newest time seen so far."""
        tree = temp_dir / "tree"
        tree.mkdir()
        for i in range(10):
            (tree / f"f{i}.txt").write_text(str(i))

        probe = WorktreeStatusProbe(walk_max_entries=3)

        assert probe.get_last_file_change(str(tree)) is not None


class TestSummarizeChecks:
    """Test check rollup precedence."""

    def test_failure_wins(self):
        """Test one failing check makes the rollup failing."""
        rollup = [
            {"conclusion": "SUCCESS", "status": "COMPLETED"},
            {"state": "PENDING"},
            {"conclusion": "FAILURE", "status": "COMPLETED"},
        ]
        assert summarize_checks(rollup) is CheckStatus.FAILING

    def test_pending_over_success(self):
        """Test an unfinished check outranks successful ones."""
        rollup = [{"conclusion": "SUCCESS"}, {"conclusion": "", "status": "IN_PROGRESS"}]
        assert summarize_checks(rollup) is CheckStatus.PENDING

    def test_all_success(self):
        """Test only successful checks make the rollup passing."""
        assert summarize_checks([{"state": "SUCCESS"}, {"conclusion": "SUCCESS"}]) is CheckStatus.PASSING

    def test_nothing_recognisable(self):
        """Test neutral or malformed entries give unknown."""
        assert summarize_checks([{"conclusion": "NEUTRAL"}, "junk"]) is CheckStatus.UNKNOWN

    def test_no_checks(self):
        """Test an empty or missing rollup gives unknown."""
        assert summarize_checks([]) is CheckStatus.UNKNOWN
        assert summarize_checks(None) is CheckStatus.UNKNOWN


class TestPullRequestService:
    """Test gh-based PR lookup with the CLI mocked out."""

    def _completed(self, stdout="", returncode=0, stderr=""):
        return subprocess.CompletedProcess(args=["gh"], returncode=returncode, stdout=stdout, stderr=stderr)

    @patch("agent_monitor.services.git.github.shutil.which", return_value="/usr/bin/gh")
    @patch("agent_monitor.services.git.github.subprocess.run")
    def test_open_pr_with_failing_checks(self, mock_run, _which):
        """Test gh output is turned into PullRequestInfo."""
        mock_run.return_value = self._completed(json.dumps([
            {"number": 12, "state": "OPEN", "statusCheckRollup": [
                {"conclusion": "SUCCESS"}, {"conclusion": "FAILURE"},
            ]},
        ]))

        pr = PullRequestService().get_pull_request("/work/app", "feature/login")

        assert pr == PullRequestInfo(number=12, state="OPEN", checks=CheckStatus.FAILING)
        args = mock_run.call_args[0][0]
        assert args[1:3] == ["pr", "list"]
        assert "feature/login" in args
        assert mock_run.call_args[1]["cwd"] == "/work/app"
        assert mock_run.call_args[1]["timeout"] == 10.0

    @patch("agent_monitor.services.git.github.shutil.which", return_value="/usr/bin/gh")
    @patch("agent_monitor.services.git.github.subprocess.run")
    def test_no_pr(self, mock_run, _which):
        """Test an empty list means no pull request."""
        mock_run.return_value = self._completed("[]")

        assert PullRequestService().get_pull_request("/work/app", "feature/login") is None

    @patch("agent_monitor.services.git.github.shutil.which", return_value=None)
    def test_gh_not_installed(self, _which):
        """Test a missing gh executable means no pull request."""
        assert PullRequestService().get_pull_request("/work/app", "main") is None

    @patch("agent_monitor.services.git.github.shutil.which", return_value="/usr/bin/gh")
    @patch("agent_monitor.services.git.github.subprocess.run")
    def test_not_authenticated(self, mock_run, _which):
        """Test a nonzero gh exit means no pull request."""
        mock_run.return_value = self._completed(returncode=4, stderr="gh auth login")

        assert PullRequestService().get_pull_request("/work/app", "main") is None

    @patch("agent_monitor.services.git.github.shutil.which", return_value="/usr/bin/gh")
    @patch("agent_monitor.services.git.github.subprocess.run")
    def test_timeout(self, mock_run, _which):
        """Test a gh timeout means no pull request."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="gh", timeout=10)

        assert PullRequestService().get_pull_request("/work/app", "main") is None

    @patch("agent_monitor.services.git.github.shutil.which", return_value="/usr/bin/gh")
    @patch("agent_monitor.services.git.github.subprocess.run")
    def test_garbage_output(self, mock_run, _which):
        """Test unparseable gh output means no pull request."""
        mock_run.return_value = self._completed("not json")

        assert PullRequestService().get_pull_request("/work/app", "main") is None


class TestProbe:
    """Test the combined probe."""

    def test_probe_collects_all_facts(self, git_repo):
        """Test the probe fills every status field."""
        pull_requests = Mock(spec=PullRequestService)
        pull_requests.get_pull_request.return_value = PullRequestInfo(3, "OPEN", CheckStatus.PASSING)
        probe = WorktreeStatusProbe(pull_requests=pull_requests)

        status = probe.probe(worktree_for(git_repo))

        assert status.dirty is False
        assert status.last_commit is not None
        assert status.last_change is not None
        assert status.pull_request.number == 3
        pull_requests.get_pull_request.assert_called_once_with(git_repo.working_tree_dir, "main")

    def test_pr_failure_does_not_block_other_facts(self, git_repo):
        """Test a failing PR lookup leaves the other fields intact."""
        pull_requests = Mock(spec=PullRequestService)
        pull_requests.get_pull_request.side_effect = RuntimeError("boom")

        status = WorktreeStatusProbe(pull_requests=pull_requests).probe(worktree_for(git_repo))

        assert status.pull_request is None
        assert status.dirty is False
        assert status.last_commit is not None

    def test_no_pr_lookup_without_branch(self, git_repo):
        """Test a detached worktree skips the PR lookup."""
        pull_requests = Mock(spec=PullRequestService)

        status = WorktreeStatusProbe(pull_requests=pull_requests).probe(worktree_for(git_repo, branch=None))

        assert status.pull_request is None
        pull_requests.get_pull_request.assert_not_called()

    def test_no_pr_service(self, git_repo):
        """Test PR lookups can be disabled."""
        assert WorktreeStatusProbe(pull_requests=None).probe(worktree_for(git_repo)).pull_request is None
