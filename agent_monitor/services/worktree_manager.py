"""Creation and removal of branch worktrees with pre-flight checks"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import git
from rich.console import Console
from rich.text import Text

from agent_monitor.config import WorktreeToolConfig
from agent_monitor.exceptions import (
    BranchBehindRemoteError,
    BranchExistsError,
    InvalidBranchNameError,
    NotAGitRepositoryError,
    TargetPathExistsError,
    UncommittedChangesError,
    WorktreeCommandError,
    WorktreeDirtyError,
    WorktreeNotFoundError,
    WorktreeToolError,
)
from agent_monitor.services.git.status import parse_status_porcelain
from agent_monitor.services.git.worktrees import parse_worktree_porcelain
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)

LAUNCH_COMMANDS = {
    "claude": "claude",
    "gemini": "gemini",
}


def git_error_message(e: git.exc.GitCommandError) -> str:
    stderr = (e.stderr if hasattr(e, "stderr") else str(e)).strip()
    status = e.status if hasattr(e, "status") else "unknown"
    if stderr:
        return f"(exit {status}) {stderr}"
    return f"exit code {status}"


def worktree_dir_name(branch_name: str) -> str:
    """Directory name for a branch's worktree: slashes become dashes."""
    return branch_name.replace("/", "-")


class WorktreeManager:
    """Runs the add and remove flows. Every check happens before the first mutation."""

    def __init__(
        self,
        config: WorktreeToolConfig,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        """Initialize the manager.

        Args:
            config: Invocation settings, including the directory to operate from
            console: Where progress and dry-run previews go
            err_console: Where warnings go
            confirm: Yes/no prompt, defaults to asking on console
        """
        self.config = config
        self.dry_run = config.dry_run
        self.timeout = config.command_timeout
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.confirm = confirm or self._ask
        self.warnings: List[str] = []

    # Reporting

    def info(self, message: str) -> None:
        self.console.print(Text(message))

    def warn(self, message: str) -> None:
        logger.debug(f"warning: {message}")
        self.warnings.append(message)
        self.err_console.print(Text.assemble(("warning:", "bold yellow"), " ", message))

    def would(self, message: str) -> None:
        """Preview of a step skipped by --dry-run."""
        self.console.print(Text.assemble(("[dry-run]", "cyan"), f" Would {message}"))

    def _ask(self, question: str) -> bool:
        response = self.console.input(Text(f"{question} [y/N] "))
        return response.strip().lower() in ("y", "yes")

    # Shared steps

    def open_repository(self) -> git.Repo:
        try:
            repo = git.Repo(self.config.cwd, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            raise NotAGitRepositoryError(self.config.cwd)
        if repo.working_tree_dir is None:
            repo.close()
            raise NotAGitRepositoryError(self.config.cwd)
        return repo

    def validate_branch_name(self, repo: git.Repo, branch_name: str) -> None:
        if not branch_name or not branch_name.strip():
            raise InvalidBranchNameError(branch_name, "branch name is empty")
        if branch_name != branch_name.strip() or branch_name.startswith("-"):
            raise InvalidBranchNameError(branch_name, "branch name cannot start with '-' or carry whitespace")
        try:
            repo.git.check_ref_format("--branch", branch_name, kill_after_timeout=self.timeout)
        except git.exc.GitCommandError:
            raise InvalidBranchNameError(branch_name)

    def list_worktree_records(self, repo: git.Repo) -> List[dict]:
        try:
            output = repo.git.worktree("list", "--porcelain", kill_after_timeout=self.timeout)
        except git.exc.GitCommandError as e:
            raise WorktreeCommandError("worktree list", git_error_message(e))
        try:
            return list(parse_worktree_porcelain(output))
        except ValueError as e:
            raise WorktreeCommandError("worktree list", f"unexpected output: {e}")

    # add

    def check_branch_available(self, repo: git.Repo, branch_name: str) -> None:
        if branch_name in [head.name for head in repo.heads]:
            raise BranchExistsError(branch_name)

    def check_local_clean(self, repo: git.Repo) -> None:
        """Staged or unstaged changes block creation; untracked files don't."""
        if repo.is_dirty(index=True, working_tree=True, untracked_files=False):
            raise UncommittedChangesError(repo.working_tree_dir)

    def check_remote_sync(self, repo: git.Repo) -> Optional[Tuple[int, int]]:
        """Compare HEAD with its upstream.

        Behind is fatal, ahead is a warning, and a missing upstream is a
        warning. Returns (ahead, behind) when a comparison was made.
        """
        try:
            branch = repo.active_branch
        except TypeError:
            self.warn("HEAD is detached; skipping remote sync check")
            return None

        upstream = branch.tracking_branch()
        if upstream is None:
            self.warn(f"Branch '{branch.name}' has no upstream; skipping remote sync check")
            return None

        if self.dry_run:
            self.would(f"fetch '{upstream.remote_name}' (comparing against cached remote refs)")
        else:
            try:
                repo.git.fetch(upstream.remote_name, kill_after_timeout=self.timeout)
            except git.exc.GitCommandError as e:
                self.warn(
                    f"Could not fetch '{upstream.remote_name}': {git_error_message(e)}; "
                    "comparing against cached remote refs"
                )

        if not upstream.is_valid():
            self.warn(f"Upstream '{upstream.name}' does not exist; skipping remote sync check")
            return None

        try:
            counts = repo.git.rev_list(
                "--left-right", "--count", f"{branch.name}...{upstream.name}",
                kill_after_timeout=self.timeout,
            )
            ahead, behind = (int(n) for n in counts.split())
        except git.exc.GitCommandError as e:
            raise WorktreeCommandError("rev-list", git_error_message(e))
        except ValueError:
            raise WorktreeCommandError("rev-list", f"unexpected output: {counts!r}")

        if behind:
            raise BranchBehindRemoteError(branch.name, upstream.name, behind)
        if ahead:
            self.warn(f"Branch '{branch.name}' is {ahead} commit(s) ahead of '{upstream.name}' (not pushed)")
        return ahead, behind

    def compute_target_path(self, repo: git.Repo, branch_name: str) -> Path:
        root = Path(repo.working_tree_dir)
        target = root.parent / worktree_dir_name(branch_name)
        if target.exists():
            raise TargetPathExistsError(str(target))
        return target

    def create_worktree(self, repo: git.Repo, branch_name: str, target: Path) -> None:
        if self.dry_run:
            self.would(f"create branch '{branch_name}' and worktree at {target} (git worktree add -b)")
            return
        try:
            repo.git.worktree("add", "-b", branch_name, str(target), kill_after_timeout=self.timeout)
        except git.exc.GitCommandError as e:
            raise WorktreeCommandError("worktree add", git_error_message(e))
        self.info(f"✓ Created worktree for '{branch_name}' at {target}")

    def copy_config_files(self, source_root: Path, target: Path) -> List[str]:
        """Copy allow-listed local files the checkout doesn't carry. Missing sources are skipped."""
        copied = []
        for relative in self.config.config_files:
            source = source_root / relative
            if not source.is_file():
                continue
            destination = target / relative
            if destination.exists():
                logger.debug(f"{relative} already present in the new worktree")
                continue
            if self.dry_run:
                self.would(f"copy {relative}")
                copied.append(relative)
                continue
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
            except OSError as e:
                self.warn(f"Could not copy {relative}: {e}")
                continue
            self.info(f"✓ Copied {relative}")
            copied.append(relative)
        return copied

    def find_setup_hook(self, base: Path) -> Optional[Path]:
        for relative in self.config.setup_hooks:
            candidate = base / relative
            if candidate.is_file():
                return candidate
        return None

    def run_setup_hook(self, target: Path, hook: Path) -> Optional[int]:
        """Run the hook inside the new worktree. A failure is reported, never rolled back."""
        if self.dry_run:
            self.would(f"run setup hook {hook.name}")
            return None

        command = [str(hook)] if os.access(hook, os.X_OK) else ["bash", str(hook)]
        self.info(f"Running setup hook {hook.relative_to(target)}")
        try:
            completed = subprocess.run(command, cwd=target, timeout=self.config.hook_timeout, check=False)
        except subprocess.TimeoutExpired:
            self.warn(f"Setup hook timed out after {self.config.hook_timeout}s; the worktree at {target} was kept")
            return None
        except OSError as e:
            self.warn(f"Could not run setup hook: {e}")
            return None

        if completed.returncode != 0:
            self.warn(f"Setup hook exited with status {completed.returncode}; the worktree at {target} was kept")
        return completed.returncode

    def launch(self, target: Path, launcher: str) -> None:
        if launcher == "bash":
            executable = os.environ.get("SHELL") or "bash"
        else:
            executable = LAUNCH_COMMANDS[launcher]

        if self.dry_run:
            self.would(f"launch {executable} in {target}")
            return
        if shutil.which(executable) is None:
            self.warn(f"'{executable}' not found on PATH; not launching it")
            return

        self.info(f"Launching {executable} in {target}")
        try:
            subprocess.run([executable], cwd=target, check=False)
        except OSError as e:
            self.warn(f"Could not launch {executable}: {e}; the worktree at {target} is ready")

    def add(self, branch_name: str) -> Path:
        """Create a new branch with its own worktree next to the repository."""
        repo = self.open_repository()
        try:
            self.validate_branch_name(repo, branch_name)
            self.check_branch_available(repo, branch_name)
            self.check_local_clean(repo)
            self.check_remote_sync(repo)
            target = self.compute_target_path(repo, branch_name)
            source_root = Path(repo.working_tree_dir)

            self.create_worktree(repo, branch_name, target)
            self.copy_config_files(source_root, target)

            # A dry run has no checkout yet; the hook would come from HEAD
            hook = self.find_setup_hook(source_root if self.dry_run else target)
            if hook is not None:
                self.run_setup_hook(target, hook)

            if self.config.launcher:
                self.launch(target, self.config.launcher)
            return target
        finally:
            repo.close()

    # remove

    def locate_worktree(self, repo: git.Repo, branch_name: str) -> Path:
        records = self.list_worktree_records(repo)
        for index, record in enumerate(records):
            if record.get("branch") != branch_name:
                continue
            if index == 0:
                raise WorktreeToolError(
                    f"Branch '{branch_name}' is checked out in the main worktree {record['path']}",
                    "Only linked worktrees can be removed",
                )
            return Path(record["path"])
        raise WorktreeNotFoundError(branch_name)

    def check_worktree_clean(self, path: Path) -> None:
        if not path.exists():
            logger.debug(f"Worktree directory {path} is missing; nothing to check")
            return
        try:
            worktree_repo = git.Repo(path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise WorktreeCommandError("status", f"cannot open {path}: {e}")
        try:
            # Untracked files count even with status.showUntrackedFiles=no
            status = worktree_repo.git.status(
                "--porcelain", "--untracked-files=normal", kill_after_timeout=self.timeout
            )
        except git.exc.GitCommandError as e:
            raise WorktreeCommandError("status", git_error_message(e))
        finally:
            worktree_repo.close()

        if any(parse_status_porcelain(status).values()):
            raise WorktreeDirtyError(str(path))

    def remove_worktree(self, repo: git.Repo, path: Path) -> None:
        if self.dry_run:
            self.would(f"remove worktree at {path} (git worktree remove)")
            return
        try:
            repo.git.worktree("remove", str(path), kill_after_timeout=self.timeout)
        except git.exc.GitCommandError as e:
            raise WorktreeCommandError("worktree remove", git_error_message(e))
        self.info(f"✓ Removed worktree at {path}")

    def offer_branch_delete(self, repo: git.Repo, branch_name: str) -> bool:
        """Ask whether to delete the branch too; uses a safe (merged-only) delete."""
        if self.dry_run:
            self.would(f"ask whether to delete branch '{branch_name}'")
            return False
        if not self.config.interactive:
            self.info(f"Kept branch '{branch_name}'")
            return False
        if not self.confirm(f"Delete branch '{branch_name}'?"):
            self.info(f"Kept branch '{branch_name}'")
            return False

        try:
            repo.git.branch("-d", branch_name, kill_after_timeout=self.timeout)
        except git.exc.GitCommandError as e:
            self.warn(
                f"Branch '{branch_name}' was not deleted {git_error_message(e)}. "
                f"Use 'git branch -D {branch_name}' to force"
            )
            return False
        self.info(f"✓ Deleted branch '{branch_name}'")
        return True

    def remove(self, branch_name: str) -> Path:
        """Remove the worktree holding branch_name; refuses if it has changes."""
        repo = self.open_repository()
        try:
            self.validate_branch_name(repo, branch_name)
            path = self.locate_worktree(repo, branch_name)
            self.check_worktree_clean(path)
            self.remove_worktree(repo, path)
            self.offer_branch_delete(repo, branch_name)
            return path
        finally:
            repo.close()
