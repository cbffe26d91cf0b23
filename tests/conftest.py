"""Pytest fixtures for agent-monitor tests"""
import io
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import git
import pytest
from rich.console import Console

from agent_monitor.models.agent import AgentProcess


def init_repo(path: Path, remote_url: Optional[str] = None) -> git.Repo:
    """Create a repository at path with one commit on 'main'."""
    path.mkdir(parents=True)
    repo = git.Repo.init(path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    readme = path / "README.md"
    readme.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")

    if remote_url:
        repo.create_remote("origin", remote_url)
    return repo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing (symlinks resolved)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def workspace(temp_dir):
    """A workspace root directory."""
    root = temp_dir / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def git_repo(workspace):
    """Create a real Git repository inside the workspace root."""
    repo = init_repo(workspace / "test_repo", "git@github.com:test/test-repo.git")
    yield repo
    repo.close()


@pytest.fixture
def git_repo_with_upstream(temp_dir, workspace):
    """A repository whose 'main' tracks a bare remote, plus a second clone of that remote."""
    remote_path = temp_dir / "remote.git"
    git.Repo.init(remote_path, bare=True).close()

    repo = init_repo(workspace / "tracked_repo")
    repo.create_remote("origin", str(remote_path))
    repo.git.push("-u", "origin", "main")

    other = git.Repo.clone_from(str(remote_path), str(temp_dir / "other_clone"), branch="main")
    other.config_writer().set_value("user", "name", "Other User").release()
    other.config_writer().set_value("user", "email", "other@example.com").release()

    yield repo, other

    other.close()
    repo.close()


@pytest.fixture
def make_console():
    """Factory for consoles writing to a string buffer."""
    def _make() -> Console:
        return Console(file=io.StringIO(), width=250, color_system=None)
    return _make


@pytest.fixture
def make_agent():
    """Factory for AgentProcess records."""
    def _make(pid: int = 4242, cwd: Optional[str] = "/work/repo", kind: str = "claude",
              started_at: Optional[datetime] = None, memory_bytes: Optional[int] = 300 * 1024 * 1024):
        return AgentProcess(
            pid=pid,
            kind=kind,
            command_line=f"node /usr/local/bin/{kind}",
            cwd=cwd,
            started_at=started_at or datetime(2026, 1, 1, tzinfo=timezone.utc),
            memory_bytes=memory_bytes,
        )
    return _make


@pytest.fixture
def mock_config(workspace):
    """Monitor configuration dictionary scanning only the test workspace."""
    return {
        'workspace_roots': [str(workspace)],
        'check_pull_requests': False,
        'command_timeout': 10,
        'verbose': False,
        'debug': False,
    }


@pytest.fixture
def make_repo():
    """Factory creating repositories with one commit; closed after the test."""
    created = []

    def _make(path: Path, remote_url: Optional[str] = None) -> git.Repo:
        repo = init_repo(path, remote_url)
        created.append(repo)
        return repo

    yield _make

    for repo in created:
        repo.close()
