"""
tmux window and pane inspection for rsworktree.

This module exposes the live tmux topology of the current session as a
small query/action interface. Nothing is cached: every call is a fresh
tmux command, because the user can rearrange windows and panes between
any two calls.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Protocol, Sequence

import libtmux
import libtmux.exc

from rsworktree.models.placement import PaneInfo, WindowInfo

logger = logging.getLogger(__name__)

PANE_FORMAT = "#{pane_id}:#{pane_current_command}"
WINDOW_FORMAT = "#{window_id}:#{window_name}"


class TmuxError(Exception):
    """Base exception for tmux operations."""


class TmuxInspectionError(TmuxError):
    """Raised when querying tmux state fails."""


class TmuxActionError(TmuxError):
    """Raised when a tmux command that changes state fails."""

    def __init__(self, action: str, message: str):
        self.action = action
        super().__init__(message)


def is_inside_tmux() -> bool:
    """Check if currently running inside a tmux session."""
    return "TMUX" in os.environ


class TopologySource(Protocol):
    """Queries and actions against the current tmux session."""

    def current_window_name(self) -> str: ...

    def list_windows(self) -> list[WindowInfo]: ...

    def list_panes(self, window: Optional[str] = None) -> list[PaneInfo]: ...

    def select_window(self, window_id: str) -> None: ...

    def select_pane(self, pane_id: str) -> None: ...

    def split_window(self, working_directory: Path, command: str, flag: str = "-h") -> None: ...

    def new_window(self, name: str, working_directory: Path, command: Sequence[str]) -> None: ...


class TmuxTopology:
    """
    TopologySource backed by the tmux server of the current session.

    Commands go through libtmux's `Server.cmd`, which runs the tmux binary
    with the caller's environment, so `$TMUX` selects the client and
    session the user is looking at.
    """

    def __init__(self, server: Optional[libtmux.Server] = None):
        self._server = server

    @property
    def server(self) -> libtmux.Server:
        """Get or create libtmux server instance."""
        if self._server is None:
            self._server = libtmux.Server()
        return self._server

    def _run(self, *args: str):
        logger.debug(f"tmux {' '.join(args)}")
        return self.server.cmd(*args)

    def _query(self, description: str, *args: str) -> list[str]:
        try:
            result = self._run(*args)
        except (libtmux.exc.LibTmuxException, OSError) as e:
            raise TmuxInspectionError(f"failed to {description}: {e}") from e

        if result.returncode != 0:
            stderr = " ".join(result.stderr).strip()
            raise TmuxInspectionError(
                f"failed to {description} (exit {result.returncode}): {stderr}"
            )
        return result.stdout

    def _act(self, action: str, message: str, *args: str) -> None:
        try:
            result = self._run(*args)
        except (libtmux.exc.LibTmuxException, OSError) as e:
            raise TmuxActionError(action, f"{message}: {e}") from e

        if result.returncode != 0:
            stderr = " ".join(result.stderr).strip()
            detail = f": {stderr}" if stderr else ""
            raise TmuxActionError(action, f"{message}{detail}")

    def current_window_name(self) -> str:
        """Name of the active window in the current session."""
        lines = self._query(
            "get current tmux window name",
            "display-message", "-p", "#{window_name}",
        )
        return lines[0].strip() if lines else ""

    def list_windows(self) -> list[WindowInfo]:
        """
        Windows of the current session with their ids.

        Windows are targeted by id afterwards: tmux parses `.` and `:` in a
        `-t` target, so names like `my.app/feature` cannot be used there.
        """
        lines = self._query(
            "list tmux windows",
            "list-windows", "-F", WINDOW_FORMAT,
        )
        windows = [WindowInfo.parse(line) for line in lines]
        return [window for window in windows if window is not None]

    def list_panes(self, window: Optional[str] = None) -> list[PaneInfo]:
        """
        Panes of `window`, or of the current window, with their running command.

        Args:
            window: Target window id (`@N`). None means the current window.

        Returns:
            Panes in tmux listing order.
        """
        args = ["list-panes"]
        if window is not None:
            args.extend(["-t", window])
        args.extend(["-F", PANE_FORMAT])

        lines = self._query("list tmux panes", *args)
        panes = [PaneInfo.parse(line) for line in lines]
        return [pane for pane in panes if pane is not None]

    def select_window(self, window_id: str) -> None:
        self._act(
            "select-window",
            f"failed to switch to tmux window `{window_id}`",
            "select-window", "-t", window_id,
        )

    def select_pane(self, pane_id: str) -> None:
        self._act(
            "select-pane",
            f"failed to select editor pane `{pane_id}`",
            "select-pane", "-t", pane_id,
        )

    def split_window(self, working_directory: Path, command: str, flag: str = "-h") -> None:
        self._act(
            "split-window",
            "failed to create editor pane",
            "split-window", flag, "-c", str(working_directory), command,
        )

    def new_window(self, name: str, working_directory: Path, command: Sequence[str]) -> None:
        self._act(
            "new-window",
            f"failed to create tmux window `{name}`",
            "new-window", "-n", name, "-c", str(working_directory), *command,
        )
