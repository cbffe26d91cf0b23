"""Per-worktree status: last file change, last commit, dirty flag and pull request."""

import os
import stat
from datetime import datetime, timezone
from typing import Optional

import git

from agent_monitor.models.worktree import LastCommit, PullRequestInfo, Worktree, WorktreeStatus
from agent_monitor.services.git.github import PullRequestService
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)

VCS_METADATA = ".git"


def parse_status_porcelain(status: str) -> dict:
    """Parse ``git status --porcelain`` into modified/untracked/staged flags.

    Porcelain format is ``XY filename`` where X is the index status and Y
    the working tree status.
    """
    has_modified = False
    has_untracked = False
    has_staged = False

    for line in status.split("\n"):
        if len(line) < 2:
            continue

        if line.startswith("??"):
            has_untracked = True
            continue

        if line[0] != " ":
            has_staged = True
        if line[1] != " ":
            has_modified = True

    return {
        "modified": has_modified,
        "untracked": has_untracked,
        "staged": has_staged,
    }


class WorktreeStatusProbe:
    """Computes WorktreeStatus. Each fact fails on its own without blocking the others."""

    def __init__(
        self,
        command_timeout: Optional[float] = 10.0,
        walk_max_entries: int = 20000,
        walk_max_depth: int = 12,
        pull_requests: Optional[PullRequestService] = None,
    ):
        self.command_timeout = command_timeout
        self.walk_max_entries = walk_max_entries
        self.walk_max_depth = walk_max_depth
        self.pull_requests = pull_requests

    def probe(self, worktree: Worktree) -> WorktreeStatus:
        return WorktreeStatus(
            last_change=self.get_last_file_change(worktree.path),
            last_commit=self.get_last_commit(worktree.path),
            dirty=self.is_dirty(worktree.path),
            pull_request=self.get_pull_request(worktree),
        )

    def get_last_file_change(self, path: str) -> Optional[datetime]:
        """Newest file modification time below path, skipping VCS metadata.

        The walk stops after walk_max_entries entries or walk_max_depth levels;
        the newest time seen so far is returned. None if nothing was found.
        """
        newest: Optional[float] = None
        visited = 0
        pending = [(path, 0)]

        while pending:
            directory, depth = pending.pop()
            try:
                with os.scandir(directory) as entries:
                    for entry in entries:
                        if entry.name == VCS_METADATA:
                            continue
                        visited += 1
                        if visited > self.walk_max_entries:
                            logger.debug(f"Stopped walking {path} after {self.walk_max_entries} entries")
                            return self._to_datetime(newest)
                        try:
                            entry_stat = entry.stat(follow_symlinks=False)
                        except OSError:
                            continue  # Removed while walking
                        if stat.S_ISDIR(entry_stat.st_mode):
                            if depth < self.walk_max_depth:
                                pending.append((entry.path, depth + 1))
                        elif newest is None or entry_stat.st_mtime > newest:
                            newest = entry_stat.st_mtime
            except OSError as e:
                if directory == path:
                    logger.warning(f"Could not walk worktree {path}: {e}")
                    return None
                logger.debug(f"Skipping unreadable directory {directory}: {e}")

        return self._to_datetime(newest)

    def get_last_commit(self, path: str) -> Optional[LastCommit]:
        """Committed date and short hash of HEAD, None before the first commit."""
        try:
            repo = git.Repo(path)
        except Exception as e:
            logger.warning(f"Could not open worktree {path}: {e}")
            return None

        try:
            commit = repo.head.commit
            return LastCommit(
                committed_at=datetime.fromtimestamp(commit.committed_date, tz=timezone.utc),
                short_sha=commit.hexsha[:7],
            )
        except ValueError:
            logger.debug(f"No commits yet in {path}")
            return None
        except Exception as e:
            logger.warning(f"Could not read last commit of {path}: {e}")
            return None
        finally:
            repo.close()

    def get_status_details(self, path: str) -> dict:
        """Modified/untracked/staged flags, or an empty dict if git status failed."""
        if not os.path.exists(path):
            logger.debug(f"Worktree path {path} doesn't exist")
            return {}

        try:
            repo = git.Repo(path)
        except Exception as e:
            logger.warning(f"Could not open worktree {path}: {e}")
            return {}

        try:
            # Untracked files count even with status.showUntrackedFiles=no
            status = repo.git.status(
                "--porcelain", "--untracked-files=normal", kill_after_timeout=self.command_timeout
            )
            return parse_status_porcelain(status)
        except git.exc.GitCommandError as e:
            stderr = (e.stderr if hasattr(e, "stderr") else str(e)).strip()
            status_code = e.status if hasattr(e, "status") else "unknown"

            if stderr:
                error_msg = f"git status failed (exit {status_code}): {stderr}"
            else:
                error_msg = f"git status failed with exit code {status_code}"

            logger.warning(f"Could not check worktree status for {path}: {error_msg}")
            return {}
        finally:
            repo.close()

    def is_dirty(self, path: str) -> Optional[bool]:
        """True with staged, unstaged or untracked changes; None if unknown."""
        details = self.get_status_details(path)
        if not details:
            return None
        return details["modified"] or details["untracked"] or details["staged"]

    def get_pull_request(self, worktree: Worktree) -> Optional[PullRequestInfo]:
        if self.pull_requests is None or not worktree.branch_name:
            return None
        try:
            return self.pull_requests.get_pull_request(worktree.path, worktree.branch_name)
        except Exception as e:
            logger.warning(f"PR lookup failed for {worktree.branch_name}: {e}")
            return None

    @staticmethod
    def _to_datetime(timestamp: Optional[float]) -> Optional[datetime]:
        if timestamp is None:
            return None
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
