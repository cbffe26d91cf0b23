"""Pull request lookup through the GitHub CLI (gh)"""

import json
import shutil
import subprocess
from typing import Any, Iterable, Optional

from agent_monitor.models.worktree import CheckStatus, PullRequestInfo
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)

PR_FIELDS = "number,state,statusCheckRollup"

FAILING_STATES = {"FAILURE", "ERROR", "CANCELLED", "TIMED_OUT", "ACTION_REQUIRED", "STARTUP_FAILURE"}
PENDING_STATES = {"PENDING", "EXPECTED", "IN_PROGRESS", "QUEUED", "WAITING", "REQUESTED"}
SUCCESS_STATES = {"SUCCESS"}


def _check_state(item: Any) -> str:
    """Normalised state of one rollup entry (CheckRun or StatusContext)."""
    if not isinstance(item, dict):
        return ""
    # StatusContext carries "state"; a CheckRun carries "conclusion" once completed
    state = item.get("conclusion") or item.get("state") or ""
    if not state and str(item.get("status", "")).upper() != "COMPLETED":
        state = item.get("status") or ""
    return str(state).upper()


def summarize_checks(rollup: Optional[Iterable[Any]]) -> CheckStatus:
    """Aggregate individual check results.

    Any failure wins over pending, pending wins over success, and a rollup
    with none of those is unknown.
    """
    if not rollup:
        return CheckStatus.UNKNOWN

    states = {_check_state(item) for item in rollup}
    if states & FAILING_STATES:
        return CheckStatus.FAILING
    if states & PENDING_STATES:
        return CheckStatus.PENDING
    if states & SUCCESS_STATES:
        return CheckStatus.PASSING
    return CheckStatus.UNKNOWN


class PullRequestService:
    """Finds the open pull request for a branch. Never raises: no PR is None."""

    def __init__(self, timeout: Optional[float] = 10.0, gh_executable: str = "gh"):
        self.timeout = timeout
        self.gh_executable = gh_executable

    def is_available(self) -> bool:
        return shutil.which(self.gh_executable) is not None

    def get_pull_request(self, worktree_path: str, branch_name: str) -> Optional[PullRequestInfo]:
        """Open PR whose head is branch_name, queried from inside the worktree."""
        gh = shutil.which(self.gh_executable)
        if gh is None:
            logger.debug("[GitHub] gh not found on PATH, skipping PR lookup")
            return None

        try:
            result = subprocess.run(
                [
                    gh, "pr", "list",
                    "--head", branch_name,
                    "--state", "open",
                    "--limit", "1",
                    "--json", PR_FIELDS,
                ],
                cwd=worktree_path,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"[GitHub] PR lookup for {branch_name} timed out after {self.timeout}s")
            return None
        except OSError as e:
            logger.debug(f"[GitHub] Could not run gh for {branch_name}: {e}")
            return None

        if result.returncode != 0:
            # Not authenticated, not a GitHub remote, no network...
            logger.debug(
                f"[GitHub] gh pr list failed for {branch_name} (exit {result.returncode}): "
                f"{result.stderr.strip()}"
            )
            return None

        try:
            pulls = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            logger.debug(f"[GitHub] Unparseable gh output for {branch_name}: {e}")
            return None

        if not isinstance(pulls, list) or not pulls or not isinstance(pulls[0], dict):
            return None

        pr = pulls[0]
        try:
            number = int(pr["number"])
        except (KeyError, TypeError, ValueError):
            return None

        return PullRequestInfo(
            number=number,
            state=str(pr.get("state") or "OPEN").upper(),
            checks=summarize_checks(pr.get("statusCheckRollup")),
        )
