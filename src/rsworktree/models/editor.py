"""
Pydantic models for editor preferences and launch outcomes.

This module provides data models for:
- The editor command configured for a repository
- Why no editor could be resolved
- The outcome of launching an editor outside tmux
"""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class EditorPreference(BaseModel):
    """Editor command plus the arguments passed before the worktree path."""

    command: str = Field(..., description="Editor executable name or path")
    args: list[str] = Field(default_factory=list, description="Extra arguments")

    @property
    def command_token(self) -> str:
        """Executable basename, as tmux reports it for a running pane."""
        return Path(self.command).name

    def argv(self, path: Path) -> list[str]:
        """Full argument vector opening `path` in the editor."""
        return [self.command, *self.args, str(path)]


class EditorPreferenceMissingReason(str, Enum):
    """Why no editor preference could be resolved."""

    NOT_CONFIGURED = "not_configured"
    EMPTY_COMMAND = "empty_command"


class EditorPreferenceResolution(BaseModel):
    """Either a found preference or the reason none is configured."""

    preference: Optional[EditorPreference] = None
    missing_reason: Optional[EditorPreferenceMissingReason] = None
    source: Optional[str] = Field(
        default=None,
        description="Where the preference came from (config, $VISUAL, $EDITOR)"
    )

    @classmethod
    def found(cls, preference: EditorPreference, source: str) -> "EditorPreferenceResolution":
        return cls(preference=preference, source=source)

    @classmethod
    def missing(cls, reason: EditorPreferenceMissingReason) -> "EditorPreferenceResolution":
        return cls(missing_reason=reason)

    @property
    def is_found(self) -> bool:
        return self.preference is not None


class EditorLaunchStatus(str, Enum):
    """Status of an editor launch attempt."""

    SUCCESS = "success"
    PREFERENCE_MISSING = "preference_missing"
    CONFIGURATION_ERROR = "configuration_error"
    EXECUTION_FAILURE = "execution_failure"


class LaunchOutcome(BaseModel):
    """Result of launching an editor directly (outside tmux)."""

    status: EditorLaunchStatus
    message: str

    @property
    def is_error(self) -> bool:
        """Whether the CLI should exit non-zero for this outcome."""
        return self.status not in (
            EditorLaunchStatus.SUCCESS,
            EditorLaunchStatus.PREFERENCE_MISSING,
        )
