"""Git worktree management operations."""

import logging
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError

from rsworktree.core.repo import RepoContext, format_worktree
from rsworktree.models.worktree import ResolvedWorktree, WorktreeEntry

logger = logging.getLogger(__name__)


class WorktreeError(Exception):
    """Base exception for worktree operations."""


class WorktreeAlreadyExistsError(WorktreeError):
    """Raised when trying to create a worktree that already exists."""


class WorktreeManager:
    """Creates, lists and removes worktrees under the worktrees root."""

    def __init__(self, repo: RepoContext):
        self.repo = repo

    @property
    def git(self):
        return self.repo.repo.git

    def create(
        self,
        name: str,
        branch: Optional[str] = None,
        base: Optional[str] = None,
    ) -> ResolvedWorktree:
        """
        Create a new worktree named `name`.

        Args:
            name: Worktree name, may contain `/` to nest it.
            branch: Branch to check out. Defaults to `name`.
            base: Start point for a new branch. Defaults to the current branch.

        Returns:
            ResolvedWorktree for the created worktree.

        Raises:
            WorktreeAlreadyExistsError: If the target directory already exists.
            WorktreeError: If git fails to create the worktree.
        """
        branch = branch or name
        worktree_path = self.repo.ensure_worktrees_dir() / name

        if worktree_path.exists():
            raise WorktreeAlreadyExistsError(
                f"Directory already exists: {worktree_path}"
            )

        try:
            if self._branch_exists(branch):
                logger.debug(f"git worktree add {worktree_path} {branch}")
                self.git.worktree("add", str(worktree_path), branch)
            else:
                start_point = base or self._current_branch()
                logger.debug(f"git worktree add -b {branch} {worktree_path} {start_point}")
                self.git.worktree("add", "-b", branch, str(worktree_path), start_point)
        except GitCommandError as e:
            raise WorktreeError(f"Failed to create worktree: {e.stderr.strip()}") from e

        logger.info(f"Created worktree {name} at {worktree_path}")
        return ResolvedWorktree(name=name, path=worktree_path.resolve())

    def _current_branch(self) -> str:
        try:
            return self.repo.repo.active_branch.name
        except TypeError as e:
            raise WorktreeError(
                "HEAD is detached; pass --base to choose a start point"
            ) from e

    def _branch_exists(self, branch: str) -> bool:
        """
        Check if a branch exists in the repository.

        Args:
            branch: Name of the branch to check.

        Returns:
            True if branch exists, False otherwise.
        """
        try:
            self.git.rev_parse("--verify", f"refs/heads/{branch}")
            return True
        except GitCommandError:
            return False

    def remove(self, worktree: ResolvedWorktree, force: bool = False) -> Path:
        """
        Remove a worktree.

        Args:
            worktree: The resolved worktree to remove.
            force: Remove even with uncommitted changes.

        Returns:
            Path of the removed worktree.

        Raises:
            WorktreeError: If git refuses to remove the worktree.
        """
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(str(worktree.path))

        try:
            logger.debug(f"git worktree {' '.join(args)}")
            self.git.worktree(*args)
        except GitCommandError as e:
            raise WorktreeError(f"Failed to remove worktree: {e.stderr.strip()}") from e

        return worktree.path

    def list_entries(self) -> list[WorktreeEntry]:
        """List every worktree under the worktrees root with its branch."""
        root = self.repo.ensure_worktrees_dir()
        return [
            WorktreeEntry(
                name=format_worktree(relative),
                path=root / relative,
                branch=branch_of(root / relative),
            )
            for relative in self.repo.find_worktrees()
        ]


def branch_of(worktree_path: Path) -> str:
    """Branch checked out in `worktree_path`, or `(detached)`."""
    try:
        return Repo(worktree_path).active_branch.name
    except TypeError:
        return "(detached)"
    except InvalidGitRepositoryError:
        return "(unknown)"
