"""Pydantic models for worktree information."""

from pathlib import Path

from pydantic import BaseModel, Field


class ResolvedWorktree(BaseModel):
    """A worktree identifier resolved to a single worktree on disk."""

    name: str = Field(description="Display form of the worktree, may contain '/'")
    path: Path = Field(description="Canonical absolute path to the worktree")

    class Config:
        frozen = True

    def window_name(self, project_name: str) -> str:
        """tmux window name for this worktree: `<project>/<worktree-name>`."""
        return f"{project_name}/{self.name}"


class WorktreeEntry(BaseModel):
    """A worktree found under the worktrees root, as shown by `ls`."""

    name: str = Field(description="Display form of the worktree")
    path: Path = Field(description="Absolute path to the worktree directory")
    branch: str = Field(description="Branch checked out in the worktree")

    @property
    def short_path(self) -> str:
        """Get a shortened display path."""
        return f"~/{self.path.relative_to(Path.home())}" if self.path.is_relative_to(
            Path.home()
        ) else str(self.path)
