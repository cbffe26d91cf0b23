"""Repository discovery under the workspace roots."""

import os
import re
from typing import List, Optional
from urllib.parse import urlparse

import git

from agent_monitor.models.repository import Repository
from agent_monitor.models.scan import ScanDiagnostics
from agent_monitor.logging_config import get_logger

logger = get_logger(__name__)

# scp-like SSH form: [user@]host:owner/repo(.git)
_SCP_REMOTE = re.compile(r"^(?:[\w.+-]+@)?(?P<host>[\w.-]+):(?P<path>[^/\\].*)$")


def parse_remote_slug(remote_url: Optional[str]) -> Optional[str]:
    """Extract ``owner/repo`` from an SSH or HTTPS remote URL.

    Returns None for anything that isn't a host-based remote (local paths,
    file:// URLs, URLs with fewer than two path segments).
    """
    if not remote_url:
        return None
    remote_url = remote_url.strip()

    if "://" in remote_url:
        # Handle URL formats (https://github.com/org/repo.git, ssh://git@host/org/repo)
        parsed_url = urlparse(remote_url)
        if not parsed_url.hostname:
            return None
        path = parsed_url.path
    else:
        # Handle SSH scp format (git@github.com:org/repo.git)
        match = _SCP_REMOTE.match(remote_url)
        if not match:
            return None
        path = match.group("path")

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]

    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        return None
    return f"{segments[-2]}/{segments[-1]}"


def canonical_root(repo: git.Repo) -> Optional[str]:
    """Symlink-resolved path of the repository's main working tree.

    A linked worktree opens as its own ``git.Repo``; it is folded back onto
    the main working tree through the shared (common) git directory.
    """
    if repo.working_tree_dir is None:
        return None  # Bare repository

    common_dir = os.path.realpath(repo.common_dir)
    if os.path.basename(common_dir) == ".git":
        return os.path.dirname(common_dir)
    return os.path.realpath(repo.working_tree_dir)


class RepositoryLocator:
    """Finds git repositories one level below each workspace root."""

    def __init__(self, roots: List[str]):
        """Initialize the locator.

        Args:
            roots: Candidate workspace root directories, in scan order
        """
        self.roots = roots

    def locate(self, diagnostics: Optional[ScanDiagnostics] = None) -> List[Repository]:
        """Return every repository found, each reported once.

        Repositories that can't be opened are skipped with a warning.
        """
        repositories: List[Repository] = []
        seen: set[str] = set()

        for root in self.roots:
            for candidate in self._candidate_dirs(root, diagnostics):
                repository = self._open_repository(candidate, diagnostics)
                if repository is None or repository.root in seen:
                    continue
                seen.add(repository.root)
                repositories.append(repository)

        logger.debug(f"Found {len(repositories)} repositories")
        return repositories

    def _candidate_dirs(self, root: str, diagnostics: Optional[ScanDiagnostics]) -> List[str]:
        """Immediate subdirectories of root that contain a .git entry."""
        if not os.path.isdir(root):
            logger.debug(f"Workspace root {root} does not exist, skipping")
            return []

        try:
            with os.scandir(root) as entries:
                names = sorted(entry.name for entry in entries if entry.is_dir())
        except OSError as e:
            message = f"Could not list workspace root {root}: {e}"
            logger.warning(message)
            if diagnostics:
                diagnostics.warn(message)
            return []

        return [
            os.path.join(root, name)
            for name in names
            if os.path.lexists(os.path.join(root, name, ".git"))
        ]

    def _open_repository(
        self, path: str, diagnostics: Optional[ScanDiagnostics]
    ) -> Optional[Repository]:
        try:
            repo = git.Repo(path)
        except Exception as e:
            message = f"Skipping {path}: not a readable git repository ({e})"
            logger.warning(message)
            if diagnostics:
                diagnostics.warn(message)
                diagnostics.skipped_repositories += 1
            return None

        try:
            root = canonical_root(repo)
            if root is None:
                logger.debug(f"Skipping bare repository at {path}")
                return None
            return Repository(root=root, display_name=self._display_name(repo, root))
        except Exception as e:
            message = f"Skipping {path}: could not resolve repository root ({e})"
            logger.warning(message)
            if diagnostics:
                diagnostics.warn(message)
                diagnostics.skipped_repositories += 1
            return None
        finally:
            repo.close()

    @staticmethod
    def _display_name(repo: git.Repo, root: str) -> str:
        """owner/repo from the origin remote, else the directory name."""
        try:
            remote_url = repo.remote("origin").url
        except (ValueError, git.exc.GitCommandError) as e:
            logger.debug(f"No origin remote for {root}: {e}")
            remote_url = None

        return parse_remote_slug(remote_url) or os.path.basename(root)
