"""
Resolution of user-supplied worktree identifiers.

An identifier is either a filesystem path or a name. Names are matched
against the display form of every worktree under the worktrees root:
the full display form, a suffix starting on a `/` boundary, or the final
path segment. Anything other than exactly one match is an error.
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path, PurePath
from typing import Optional

from rsworktree.core.repo import RepoContext, find_worktrees, format_worktree
from rsworktree.core.worktree import WorktreeError
from rsworktree.models.worktree import ResolvedWorktree

logger = logging.getLogger(__name__)


class WorktreeNotFoundError(WorktreeError):
    """Raised when no worktree matches a name."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"worktree `{identifier}` not found. "
            f"Run `rsworktree ls` to view available worktrees."
        )


class AmbiguousWorktreeError(WorktreeError):
    """Raised when a name matches more than one worktree."""

    def __init__(self, identifier: str, matches: list[str]):
        self.identifier = identifier
        self.matches = matches
        super().__init__(
            f"worktree identifier `{identifier}` is ambiguous. "
            f"Matches: {', '.join(matches)}"
        )


class WorktreeMissingError(WorktreeError):
    """Raised when a matched worktree directory no longer exists on disk."""


class WorktreePathNotFoundError(WorktreeError):
    """Raised when a worktree path given by the user does not exist."""


class WorktreeResolutionError(WorktreeError):
    """Raised when a worktree path cannot be canonicalized."""


def display_name_for(canonical: PurePath, worktrees_root: PurePath) -> str:
    """
    Display form for a canonical worktree path.

    Paths under the worktrees root are shown relative to it; anything else
    falls back to its last segment, then to the full path.
    """
    try:
        relative = canonical.relative_to(worktrees_root)
    except ValueError:
        relative = None

    if relative is not None and relative.parts:
        return format_worktree(relative)
    if canonical.name:
        return canonical.name
    return str(canonical)


def matches_identifier(display: str, relative: PurePath, identifier: str) -> bool:
    """Whether a worktree with this display form answers to `identifier`."""
    return (
        display == identifier
        or display.endswith(f"/{identifier}")
        or relative.name == identifier
    )


def match_worktrees(
    identifier: str,
    entries: Iterable[PurePath],
) -> list[tuple[str, PurePath]]:
    """All `(display, relative_path)` pairs matching `identifier`, in listing order."""
    matches = []
    for relative in entries:
        display = format_worktree(relative)
        if matches_identifier(display, relative, identifier):
            matches.append((display, relative))
    return matches


def canonicalize(path: Path) -> Path:
    """Resolve symlinks in an existing path."""
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise WorktreeResolutionError(f"failed to resolve `{path}`: {e}") from e


class WorktreeResolver:
    """Maps worktree names and paths to a single existing worktree."""

    def __init__(
        self,
        worktrees_root: Path,
        finder: Callable[[Path], list[PurePath]] = find_worktrees,
    ):
        """
        Initialize the resolver.

        Args:
            worktrees_root: Directory the worktrees live under.
            finder: Returns worktree paths relative to the root.
        """
        self.worktrees_root = worktrees_root
        self._finder = finder

    @classmethod
    def for_repo(cls, repo: RepoContext) -> "WorktreeResolver":
        return cls(repo.ensure_worktrees_dir())

    def resolve(
        self,
        name: Optional[str] = None,
        path: Optional[Path] = None,
    ) -> ResolvedWorktree:
        """
        Resolve a worktree by path (if given) or by name.

        Raises:
            WorktreeError: If neither identifier is provided, or any
                resolution error described on the by-name and by-path forms.
        """
        if path is not None:
            return self.resolve_by_path(path)
        if not name:
            raise WorktreeError("worktree name or --path must be provided")
        return self.resolve_by_name(name)

    def resolve_by_name(self, name: str) -> ResolvedWorktree:
        """
        Resolve a worktree by name.

        Args:
            name: Full display form, a trailing `/`-separated part of it, or
                the worktree directory name.

        Returns:
            ResolvedWorktree with the canonical path.

        Raises:
            WorktreeNotFoundError: If nothing matches.
            AmbiguousWorktreeError: If more than one worktree matches.
            WorktreeMissingError: If the matched directory vanished.
            WorktreeResolutionError: If the path cannot be canonicalized.
        """
        matches = match_worktrees(name, self._finder(self.worktrees_root))
        logger.debug(f"Worktree identifier {name!r} matched {[d for d, _ in matches]}")

        if not matches:
            raise WorktreeNotFoundError(name)

        if len(matches) > 1:
            raise AmbiguousWorktreeError(name, [display for display, _ in matches])

        display, relative = matches[0]
        absolute = self.worktrees_root / relative

        if not absolute.exists():
            raise WorktreeMissingError(
                f"worktree `{display}` is missing from `{absolute}`"
            )

        return ResolvedWorktree(name=display, path=canonicalize(absolute))

    def resolve_by_path(self, path: Path) -> ResolvedWorktree:
        """
        Resolve a worktree by filesystem path.

        Raises:
            WorktreePathNotFoundError: If the path does not exist.
            WorktreeResolutionError: If the path cannot be canonicalized.
        """
        if not path.exists():
            raise WorktreePathNotFoundError(f"worktree path `{path}` does not exist")

        canonical = canonicalize(path)
        root = self.worktrees_root.resolve()

        return ResolvedWorktree(
            name=display_name_for(canonical, root),
            path=canonical,
        )
