"""Worktree inventory for located repositories."""

import os
from typing import Any, Dict, Iterator, List, Optional

import git

from agent_monitor.models.repository import Repository
from agent_monitor.models.scan import ScanDiagnostics
from agent_monitor.models.worktree import Worktree
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)


def parse_worktree_porcelain(output: str) -> Iterator[Dict[str, Any]]:
    """Parse ``git worktree list --porcelain`` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached", or "bare")
        (blank line between worktrees)

    Yields one dict per worktree with keys path, head, branch (None when
    detached), bare and prunable (its directory is gone). Raises ValueError
    on a line that doesn't belong to a worktree record; entries yielded
    before that point remain valid.
    """
    current: Dict[str, Any] = {}
    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            if current:
                yield current
                current = {}
            continue

        if line.startswith("worktree "):
            if current:
                yield current
            current = {
                "path": line.split(" ", 1)[1],
                "head": None,
                "branch": None,
                "bare": False,
                "prunable": False,
            }
            continue

        if not current:
            raise ValueError(f"unexpected line outside a worktree record: {line!r}")

        if line.startswith("HEAD "):
            current["head"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            # Extract branch name from "branch refs/heads/branch-name"
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
        elif line == "bare":
            current["bare"] = True
        elif line == "prunable" or line.startswith("prunable "):
            current["prunable"] = True
        # "detached" and "locked" carry nothing we display

    # Handle last entry if no trailing blank line
    if current:
        yield current


class WorktreeInventory:
    """Lists the worktrees of a repository, main worktree first."""

    def __init__(self, command_timeout: Optional[float] = None):
        self.command_timeout = command_timeout

    def list_worktrees(
        self, repository: Repository, diagnostics: Optional[ScanDiagnostics] = None
    ) -> List[Worktree]:
        """Return the main worktree followed by every linked worktree on a branch.

        Linked worktrees with a detached HEAD or a missing directory are
        skipped (and counted).
        """
        root = repository.root
        repo = git.Repo(root)
        try:
            worktrees = [
                Worktree(
                    path=root,
                    branch_name=self._active_branch(repo),
                    repository_root=root,
                    is_main=True,
                )
            ]
            seen = {root}

            try:
                output = repo.git.worktree(
                    "list", "--porcelain", kill_after_timeout=self.command_timeout
                )
            except git.exc.GitCommandError as e:
                self._warn(diagnostics, f"Could not list worktrees of {repository.display_name}: {e}")
                return worktrees

            try:
                for record in parse_worktree_porcelain(output):
                    if record["bare"]:
                        continue
                    path = os.path.realpath(record["path"])
                    if path in seen:
                        continue
                    if record.get("prunable") or not os.path.exists(path):
                        logger.debug(f"Skipping missing worktree at {path} (git worktree prune removes it)")
                        if diagnostics:
                            diagnostics.missing_worktrees += 1
                        continue
                    if not record["branch"]:
                        logger.debug(f"Skipping detached worktree at {path}")
                        if diagnostics:
                            diagnostics.skipped_worktrees += 1
                        continue
                    seen.add(path)
                    worktrees.append(
                        Worktree(path=path, branch_name=record["branch"], repository_root=root)
                    )
            except ValueError as e:
                self._warn(
                    diagnostics,
                    f"Could not parse worktree list of {repository.display_name}: {e}",
                )

            logger.debug(f"Found {len(worktrees)} worktrees in {repository.display_name}")
            return worktrees
        finally:
            repo.close()

    @staticmethod
    def _active_branch(repo: git.Repo) -> Optional[str]:
        try:
            return repo.active_branch.name
        except TypeError:
            return None  # Detached HEAD

    @staticmethod
    def _warn(diagnostics: Optional[ScanDiagnostics], message: str) -> None:
        logger.warning(message)
        if diagnostics:
            diagnostics.warn(message)
