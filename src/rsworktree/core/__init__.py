"""
Core modules for rsworktree.

This package contains the core business logic for:
- Repository discovery and worktree enumeration
- Worktree name/path resolution
- Worktree creation and removal
- Lifecycle hooks
- Editor preference resolution and direct launch
- tmux inspection and editor placement
- Editor launch telemetry
"""

from rsworktree.core.hooks import HookError, HookRunner, HookSpawnError
from rsworktree.core.launcher import DirectLauncher
from rsworktree.core.placement import SessionPlacementEngine
from rsworktree.core.repo import NotAGitRepositoryError, RepoContext
from rsworktree.core.resolver import (
    AmbiguousWorktreeError,
    WorktreeMissingError,
    WorktreeNotFoundError,
    WorktreePathNotFoundError,
    WorktreeResolutionError,
    WorktreeResolver,
)
from rsworktree.core.telemetry import TelemetryLog
from rsworktree.core.tmux_manager import (
    TmuxActionError,
    TmuxError,
    TmuxInspectionError,
    TmuxTopology,
)
from rsworktree.core.worktree import (
    WorktreeAlreadyExistsError,
    WorktreeError,
    WorktreeManager,
)

__all__ = [
    "HookError",
    "HookRunner",
    "HookSpawnError",
    "DirectLauncher",
    "SessionPlacementEngine",
    "NotAGitRepositoryError",
    "RepoContext",
    "AmbiguousWorktreeError",
    "WorktreeMissingError",
    "WorktreeNotFoundError",
    "WorktreePathNotFoundError",
    "WorktreeResolutionError",
    "WorktreeResolver",
    "TelemetryLog",
    "TmuxActionError",
    "TmuxError",
    "TmuxInspectionError",
    "TmuxTopology",
    "WorktreeAlreadyExistsError",
    "WorktreeError",
    "WorktreeManager",
]
