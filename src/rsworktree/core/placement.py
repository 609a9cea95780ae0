"""
Editor placement inside tmux.

Given a resolved worktree and an editor, put the editor on screen while
reusing what is already there:

1. Already in the worktree's window: focus its editor pane, or split a
   new pane running the editor.
2. The worktree's window exists elsewhere in the session: switch to it,
   then do the same as 1 for that window.
3. No such window: create it, running the editor.

The worktree's window is named `<project>/<worktree-name>`, so repeated
opens of the same worktree land in the same window. tmux state is read
right before each decision and never cached.
"""

import logging
import shlex
from typing import Optional

from rsworktree.config import SplitDirection
from rsworktree.core.editor import EditorCommandMatcher, is_editor_command
from rsworktree.core.tmux_manager import TopologySource
from rsworktree.models.editor import EditorPreference
from rsworktree.models.placement import PaneInfo, PlacementAction, PlacementResult
from rsworktree.models.worktree import ResolvedWorktree

logger = logging.getLogger(__name__)


def find_editor_pane(
    panes: list[PaneInfo],
    editor_token: str,
    matcher: EditorCommandMatcher = is_editor_command,
) -> Optional[PaneInfo]:
    """
    First pane that looks like it is running an editor.

    A pane matches when its command contains the editor's command token,
    or when the allow-list matcher accepts it (editors started through a
    wrapper show up under a different process name).
    """
    for pane in panes:
        command = pane.current_command
        if (editor_token and editor_token in command) or matcher(command):
            return pane
    return None


class SessionPlacementEngine:
    """Decides where the editor goes and runs the matching tmux commands."""

    def __init__(
        self,
        topology: TopologySource,
        project_name: str,
        matcher: EditorCommandMatcher = is_editor_command,
        split_direction: SplitDirection = SplitDirection.HORIZONTAL,
    ):
        """
        Initialize the engine.

        Args:
            topology: Source of tmux state and actions.
            project_name: Repository root name, used as window name prefix.
            matcher: Allow-list predicate for pane commands.
            split_direction: How to split a window for a new editor pane.
        """
        self.topology = topology
        self.project_name = project_name
        self.matcher = matcher
        self.split_direction = split_direction

    def window_name(self, worktree: ResolvedWorktree) -> str:
        return worktree.window_name(self.project_name)

    def place(
        self,
        worktree: ResolvedWorktree,
        preference: EditorPreference,
    ) -> PlacementResult:
        """
        Show `worktree` in the editor, reusing windows and panes when possible.

        Args:
            worktree: Worktree to open.
            preference: Editor to run.

        Returns:
            PlacementResult describing the action taken.

        Raises:
            TmuxInspectionError: If tmux state could not be read.
            TmuxActionError: If a tmux command failed. Earlier actions are
                not undone.
        """
        window_name = self.window_name(worktree)

        current = self.topology.current_window_name()
        if current == window_name:
            logger.debug(f"Already in window {window_name}")
            return self._place_in_window(worktree, preference, window_name)

        existing = next(
            (w for w in self.topology.list_windows() if w.name == window_name), None
        )
        if existing is not None:
            logger.debug(f"Switching to existing window {window_name} ({existing.window_id})")
            self.topology.select_window(existing.window_id)
            return self._place_in_window(
                worktree, preference, window_name, window_id=existing.window_id
            )

        logger.debug(f"Creating window {window_name}")
        self.topology.new_window(
            window_name,
            worktree.path,
            preference.argv(worktree.path),
        )
        return PlacementResult(action=PlacementAction.NEW_WINDOW, window_name=window_name)

    def _place_in_window(
        self,
        worktree: ResolvedWorktree,
        preference: EditorPreference,
        window_name: str,
        window_id: Optional[str] = None,
    ) -> PlacementResult:
        # None targets the current window
        switched = window_id is not None
        panes = self.topology.list_panes(window_id)
        pane = find_editor_pane(panes, preference.command_token, self.matcher)

        if pane is not None:
            self.topology.select_pane(pane.pane_id)
            return PlacementResult(
                action=PlacementAction.SELECT_PANE,
                window_name=window_name,
                pane_id=pane.pane_id,
                switched_window=switched,
            )

        command = shlex.join(preference.argv(worktree.path))
        self.topology.split_window(worktree.path, command, self.split_direction.tmux_flag)
        return PlacementResult(
            action=PlacementAction.SPLIT_PANE,
            window_name=window_name,
            switched_window=switched,
        )
