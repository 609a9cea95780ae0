"""Repository discovery and worktree enumeration."""

import logging
import os
from pathlib import Path, PurePath
from typing import Optional

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from rsworktree.config import CONFIG_DIR_NAME

logger = logging.getLogger(__name__)


class NotAGitRepositoryError(Exception):
    """Raised when the path is not inside a git repository."""


def find_worktrees(root: Path) -> list[PurePath]:
    """
    Find worktrees below `root`.

    A worktree is any directory holding a `.git` entry. The search does not
    descend into a worktree once found, so nested checkouts are not listed.

    Args:
        root: Directory to search.

    Returns:
        Sorted paths relative to `root`.
    """
    if not root.is_dir():
        return []

    found: list[PurePath] = []
    for dirpath, dirnames, _ in os.walk(root):
        current = Path(dirpath)
        if current != root and (current / ".git").exists():
            found.append(current.relative_to(root))
            dirnames.clear()
            continue
        dirnames[:] = [d for d in dirnames if d != ".git"]

    return sorted(found)


def format_worktree(relative: PurePath) -> str:
    """Display form of a worktree path relative to the worktrees root."""
    return relative.as_posix()


class RepoContext:
    """The git repository rsworktree operates on."""

    def __init__(self, repo_path: Optional[Path] = None):
        """
        Discover the repository containing `repo_path`.

        Args:
            repo_path: Any path inside the repository. Defaults to current directory.

        Raises:
            NotAGitRepositoryError: If the path is not inside a git repository.
        """
        self.repo_path = repo_path or Path.cwd()
        try:
            self.repo = Repo(self.repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise NotAGitRepositoryError(
                f"Not a git repository: {self.repo_path}"
            ) from e

        if self.repo.working_tree_dir is None:
            raise NotAGitRepositoryError(
                f"Bare repositories are not supported: {self.repo_path}"
            )
        self.root = Path(self.repo.working_tree_dir)

    @property
    def project_name(self) -> str:
        """Project name used as the tmux window prefix."""
        return self.root.name or "unknown"

    @property
    def config_dir(self) -> Path:
        """Directory holding hooks, config and the worktrees themselves."""
        return self.root / CONFIG_DIR_NAME

    @property
    def worktrees_dir(self) -> Path:
        return self.config_dir

    def ensure_worktrees_dir(self) -> Path:
        """Create the worktrees root if needed and return it."""
        if not self.worktrees_dir.is_dir():
            logger.info(f"Creating worktrees directory: {self.worktrees_dir}")
            self.worktrees_dir.mkdir(parents=True, exist_ok=True)
        # hooks/ may have been created by hand before the first worktree
        self._exclude_config_dir()
        return self.worktrees_dir

    def _exclude_config_dir(self) -> None:
        """Keep the worktrees root out of `git status` of the main checkout."""
        exclude_file = Path(self.repo.common_dir) / "info" / "exclude"
        pattern = f"/{CONFIG_DIR_NAME}/"

        try:
            existing = exclude_file.read_text() if exclude_file.exists() else ""
            if pattern in existing.splitlines():
                return
            exclude_file.parent.mkdir(parents=True, exist_ok=True)
            with open(exclude_file, "a") as f:
                if existing and not existing.endswith("\n"):
                    f.write("\n")
                f.write(f"{pattern}\n")
        except OSError as e:
            logger.warning(f"Could not update {exclude_file}: {e}")

    def find_worktrees(self) -> list[PurePath]:
        """Worktrees under the worktrees root, relative to it."""
        return find_worktrees(self.ensure_worktrees_dir())
