"""
Audit log of editor launch attempts.

Each direct editor launch is recorded once, whatever its outcome, in a
bounded JSON store in the user's home directory. The log is a sink:
failing to write it never fails the launch.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from rsworktree.config import TelemetryConfig
from rsworktree.models.editor import EditorLaunchStatus
from rsworktree.models.telemetry import EditorLaunchRecord, TelemetryStore
from rsworktree.utils.io import atomic_write_text, read_locked_text

logger = logging.getLogger(__name__)


class TelemetryLog:
    """Persists EditorLaunchRecords to a JSON file."""

    DEFAULT_FILENAME = "editor_launches.json"

    def __init__(self, config: Optional[TelemetryConfig] = None):
        self.config = config or TelemetryConfig()
        self.storage_path = self.config.path or self._get_default_path()

    def _get_default_path(self) -> Path:
        return Path.home() / ".rsworktree" / self.DEFAULT_FILENAME

    def load(self) -> TelemetryStore:
        """Load the store, starting fresh if the file is missing or unreadable."""
        if not self.storage_path.exists():
            return TelemetryStore()
        try:
            data = json.loads(read_locked_text(self.storage_path))
            return TelemetryStore.model_validate(data)
        # ValueError covers bad JSON and undecodable bytes
        except (ValueError, OSError, ValidationError) as e:
            logger.warning(f"Discarding unreadable telemetry log {self.storage_path}: {e}")
            return TelemetryStore()

    def log_editor_launch_attempt(
        self,
        worktree_name: str,
        worktree_path: Path,
        status: EditorLaunchStatus,
        message: str,
    ) -> EditorLaunchRecord:
        """
        Record one editor launch attempt.

        Args:
            worktree_name: Display name of the worktree.
            worktree_path: Path the editor was asked to open.
            status: Outcome of the attempt.
            message: Message reported to the user.

        Returns:
            The record, whether or not it could be persisted.
        """
        record = EditorLaunchRecord(
            worktree_name=worktree_name,
            worktree_path=str(worktree_path),
            status=status,
            message=message,
        )
        logger.debug(f"Editor launch for {worktree_name}: {status.value} ({message})")

        if not self.config.enabled:
            return record

        store = self.load()
        store.add(record, self.config.max_records)
        try:
            atomic_write_text(
                self.storage_path,
                json.dumps(store.model_dump(mode="json"), indent=2),
            )
        except OSError as e:
            logger.warning(f"Could not write telemetry log {self.storage_path}: {e}")

        return record
