"""
Pydantic models for the editor launch audit log.

Every direct editor launch leaves one EditorLaunchRecord behind, kept in
a bounded TelemetryStore persisted as JSON.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from rsworktree.models.editor import EditorLaunchStatus


class EditorLaunchRecord(BaseModel):
    """Record of a single editor launch attempt."""

    timestamp: datetime = Field(default_factory=datetime.now, description="When the launch was attempted")
    worktree_name: str = Field(..., description="Display name of the worktree")
    worktree_path: str = Field(..., description="Absolute path to the worktree")
    status: EditorLaunchStatus = Field(..., description="Outcome of the attempt")
    message: str = Field(default="", description="Message reported to the user")

    class Config:
        use_enum_values = True


class TelemetryStore(BaseModel):
    """Persisted collection of editor launch records, oldest first."""

    records: list[EditorLaunchRecord] = Field(default_factory=list)

    def add(self, record: EditorLaunchRecord, max_records: int) -> None:
        """Append a record, dropping the oldest beyond `max_records`."""
        self.records.append(record)
        if len(self.records) > max_records:
            self.records = self.records[-max_records:]
