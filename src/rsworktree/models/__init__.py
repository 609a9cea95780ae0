"""
Pydantic models for rsworktree.

This package contains data models for:
- Resolved worktrees and worktree listings
- Lifecycle hook context
- Editor preferences and launch outcomes
- tmux pane listings and placement results
- Editor launch telemetry
"""

from rsworktree.models.editor import (
    EditorLaunchStatus,
    EditorPreference,
    EditorPreferenceMissingReason,
    EditorPreferenceResolution,
    LaunchOutcome,
)
from rsworktree.models.hooks import HookContext, HookName, HookResult
from rsworktree.models.placement import (
    PaneInfo,
    PlacementAction,
    PlacementResult,
    WindowInfo,
)
from rsworktree.models.telemetry import EditorLaunchRecord, TelemetryStore
from rsworktree.models.worktree import ResolvedWorktree, WorktreeEntry

__all__ = [
    "EditorLaunchStatus",
    "EditorPreference",
    "EditorPreferenceMissingReason",
    "EditorPreferenceResolution",
    "LaunchOutcome",
    "HookContext",
    "HookName",
    "HookResult",
    "PaneInfo",
    "PlacementAction",
    "PlacementResult",
    "WindowInfo",
    "EditorLaunchRecord",
    "TelemetryStore",
    "ResolvedWorktree",
    "WorktreeEntry",
]
