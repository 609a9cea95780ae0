"""Models describing lifecycle hooks and the context passed to them."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class HookName(str, Enum):
    """Lifecycle hooks that can be installed under `.rsworktree/hooks`."""

    POST_CREATE = "post-create"

    def __str__(self) -> str:
        return self.value


class HookContext(BaseModel):
    """Values exposed to a hook script through its environment."""

    worktree_name: str = Field(..., description="Display name of the worktree")
    worktree_path: Path = Field(..., description="Absolute path to the worktree")
    branch: str = Field(..., description="Branch checked out in the worktree")
    base_branch: Optional[str] = Field(
        default=None,
        description="Branch the worktree branch was created from, if any"
    )
    base_path: Path = Field(..., description="Path to the main repository checkout")

    def to_env(self) -> dict[str, str]:
        """Environment variables injected into the hook process."""
        return {
            "RSWORKTREE_NAME": self.worktree_name,
            "RSWORKTREE_PATH": str(self.worktree_path),
            "RSWORKTREE_BRANCH": self.branch,
            "RSWORKTREE_BASE_BRANCH": self.base_branch or "",
            "RSWORKTREE_BASE_PATH": str(self.base_path),
        }


class HookResult(BaseModel):
    """Outcome of a hook invocation that did not fail outright."""

    hook: HookName
    ran: bool = Field(default=False, description="Whether the hook process was spawned")
    exit_code: Optional[int] = Field(default=None, description="Exit code if the hook ran")
    warning: Optional[str] = Field(
        default=None,
        description="Warning to show the user (non-executable hook, non-zero exit)"
    )

    @property
    def succeeded(self) -> bool:
        """True when the hook ran and exited 0."""
        return self.ran and self.exit_code == 0
