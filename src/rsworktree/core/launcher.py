"""Editor launch outside tmux."""

import logging
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from rsworktree.config import Config
from rsworktree.core.editor import (
    EditorConfigurationError,
    missing_preference_message,
    resolve_editor_preference,
)
from rsworktree.core.telemetry import TelemetryLog
from rsworktree.models.editor import (
    EditorLaunchStatus,
    EditorPreference,
    LaunchOutcome,
)

logger = logging.getLogger(__name__)


class DirectLauncher:
    """
    Starts the configured editor as a plain process.

    Used when rsworktree is not running inside tmux. Every call to
    `launch` leaves exactly one record in the telemetry log.
    """

    def __init__(
        self,
        config: Config,
        telemetry: Optional[TelemetryLog] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config = config
        self.telemetry = telemetry or TelemetryLog(config.telemetry)
        self.environ = environ

    def launch(
        self,
        worktree_name: str,
        worktree_path: Path,
        background: bool = False,
    ) -> LaunchOutcome:
        """
        Open `worktree_path` in the configured editor.

        Args:
            worktree_name: Display name of the worktree.
            worktree_path: Directory to open.
            background: Detach the editor instead of waiting for it to exit.

        Returns:
            LaunchOutcome. A missing editor preference is an outcome, not an error.

        Raises:
            EditorConfigurationError: If the configured editor cannot be started.
        """
        try:
            outcome = self._launch(worktree_path, background)
        except EditorConfigurationError as e:
            self.telemetry.log_editor_launch_attempt(
                worktree_name,
                worktree_path,
                EditorLaunchStatus.CONFIGURATION_ERROR,
                str(e),
            )
            raise

        self.telemetry.log_editor_launch_attempt(
            worktree_name,
            worktree_path,
            outcome.status,
            outcome.message,
        )
        return outcome

    def _launch(self, worktree_path: Path, background: bool) -> LaunchOutcome:
        resolution = resolve_editor_preference(self.config, self.environ)

        if not resolution.is_found:
            return LaunchOutcome(
                status=EditorLaunchStatus.PREFERENCE_MISSING,
                message=missing_preference_message(resolution.missing_reason),
            )

        preference = resolution.preference
        argv = preference.argv(worktree_path)
        logger.info(f"Launching editor: {' '.join(argv)}")

        try:
            if background:
                self._spawn_detached(argv, worktree_path)
                return LaunchOutcome(
                    status=EditorLaunchStatus.SUCCESS,
                    message=f"Launched `{preference.command}` in the background (from {resolution.source}).",
                )
            completed = subprocess.run(argv, cwd=worktree_path)
        except OSError as e:
            logger.error(f"Could not start editor `{preference.command}`: {e}")
            raise EditorConfigurationError(
                f"failed to launch editor `{preference.command}`: {e}"
            ) from e

        if completed.returncode != 0:
            return LaunchOutcome(
                status=EditorLaunchStatus.EXECUTION_FAILURE,
                message=f"Editor `{preference.command}` exited with code {completed.returncode}.",
            )

        return LaunchOutcome(
            status=EditorLaunchStatus.SUCCESS,
            message=self._success_message(preference, resolution.source),
        )

    @staticmethod
    def _spawn_detached(argv: list[str], cwd: Path) -> None:
        subprocess.Popen(
            argv,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )

    @staticmethod
    def _success_message(preference: EditorPreference, source: Optional[str]) -> str:
        command = " ".join([preference.command, *preference.args])
        return f"Editor: `{command}` (from {source})."
