"""Models for tmux pane listings and editor placement decisions."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class WindowInfo:
    """A window as reported by `tmux list-windows`."""

    window_id: str
    name: str

    @classmethod
    def parse(cls, line: str) -> Optional["WindowInfo"]:
        """Parse a `#{window_id}:#{window_name}` line. Names may contain `:`."""
        window_id, sep, name = line.partition(":")
        if not sep or not window_id.startswith("@"):
            return None
        return cls(window_id=window_id.strip(), name=name.strip())


@dataclass(frozen=True)
class PaneInfo:
    """A pane as reported by `tmux list-panes`."""

    pane_id: str
    current_command: str

    @classmethod
    def parse(cls, line: str) -> Optional["PaneInfo"]:
        """Parse a `#{pane_id}:#{pane_current_command}` line."""
        pane_id, sep, command = line.partition(":")
        if not sep:
            return None
        return cls(pane_id=pane_id.strip(), current_command=command.strip())


class PlacementAction(str, Enum):
    """Terminal actions of the placement engine."""

    SELECT_PANE = "select_pane"
    SPLIT_PANE = "split_pane"
    NEW_WINDOW = "new_window"


@dataclass
class PlacementResult:
    """What the placement engine did to put the editor on screen."""

    action: PlacementAction
    window_name: str
    pane_id: Optional[str] = None
    switched_window: bool = False

    @property
    def message(self) -> str:
        if self.action == PlacementAction.NEW_WINDOW:
            return f"Created window `{self.window_name}` with editor"
        if self.action == PlacementAction.SPLIT_PANE:
            return f"Opened editor in new pane of window `{self.window_name}`"
        if self.switched_window:
            return f"Switched to editor in window `{self.window_name}`"
        return f"Switched to editor pane `{self.pane_id}`"
