"""Custom exceptions for agent-monitor"""

from typing import Optional


class AgentMonitorError(Exception):
    """Base exception for all agent-monitor errors."""
    pass


class WorktreeToolError(AgentMonitorError):
    """A failure of the worktree tool, with an optional remedy for the user."""

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(message)


class NotAGitRepositoryError(WorktreeToolError):
    def __init__(self, path: str):
        super().__init__(
            f"'{path}' is not inside a git repository",
            "Run this command from within the repository you want to branch from",
        )


class InvalidBranchNameError(WorktreeToolError):
    def __init__(self, branch: str, reason: Optional[str] = None):
        message = f"Invalid branch name '{branch}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, "Use a name accepted by 'git check-ref-format --branch'")


class BranchExistsError(WorktreeToolError):
    def __init__(self, branch: str):
        super().__init__(
            f"Branch '{branch}' already exists",
            "This tool only creates new branches; pick another name",
        )


class UncommittedChangesError(WorktreeToolError):
    def __init__(self, path: str):
        super().__init__(
            f"You have uncommitted changes in {path}",
            "Commit or stash your changes first",
        )


class BranchBehindRemoteError(WorktreeToolError):
    def __init__(self, branch: str, upstream: str, behind: int):
        super().__init__(
            f"Branch '{branch}' is {behind} commit(s) behind '{upstream}'",
            "Pull the latest changes first (git pull)",
        )


class TargetPathExistsError(WorktreeToolError):
    def __init__(self, path: str):
        super().__init__(
            f"Target directory {path} already exists",
            "Remove or rename the existing directory, or choose another branch name",
        )


class WorktreeNotFoundError(WorktreeToolError):
    def __init__(self, branch: str):
        super().__init__(
            f"No worktree found for branch '{branch}'",
            "Run 'git worktree list' to see existing worktrees",
        )


class WorktreeDirtyError(WorktreeToolError):
    def __init__(self, path: str):
        super().__init__(
            f"Worktree at {path} has uncommitted or untracked changes",
            f"Commit or stash them, or force removal with: git worktree remove --force {path}",
        )


class WorktreeCommandError(WorktreeToolError):
    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(
            f"git {operation} failed: {message}",
            "Inspect the repository with 'git worktree list' and 'git status'",
        )
