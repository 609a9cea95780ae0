"""
Editor preference resolution.

The editor comes from the `[editor]` config section, then `$VISUAL`,
then `$EDITOR`. This module also owns the heuristic deciding whether a
tmux pane is already running an editor.
"""

import logging
import os
import shlex
from collections.abc import Callable, Iterable, Mapping
from typing import Optional

from rsworktree.config import Config
from rsworktree.models.editor import (
    EditorPreference,
    EditorPreferenceMissingReason,
    EditorPreferenceResolution,
)

logger = logging.getLogger(__name__)

DEFAULT_EDITOR_COMMANDS = (
    "vim",
    "nvim",
    "nano",
    "emacs",
    "code",
    "cursor",
    "webstorm",
    "rider",
    "idea",
)

ENV_EDITOR_VARIABLES = ("VISUAL", "EDITOR")

EditorCommandMatcher = Callable[[str], bool]


class EditorError(Exception):
    """Base exception for editor operations."""


class EditorConfigurationError(EditorError):
    """Raised when a configured editor cannot be started."""


def make_editor_command_matcher(extra: Iterable[str] = ()) -> EditorCommandMatcher:
    """
    Build the allow-list predicate for pane commands.

    Args:
        extra: Commands recognised in addition to DEFAULT_EDITOR_COMMANDS.

    Returns:
        Predicate that is true when a pane's running command contains any
        allow-listed editor name.
    """
    editors = tuple(DEFAULT_EDITOR_COMMANDS) + tuple(e for e in extra if e)

    def is_editor_command(command: str) -> bool:
        return any(editor in command for editor in editors)

    return is_editor_command


is_editor_command = make_editor_command_matcher()


def _split_command(value: str) -> list[str]:
    try:
        return shlex.split(value)
    except ValueError:
        return value.split()


def resolve_editor_preference(
    config: Config,
    environ: Optional[Mapping[str, str]] = None,
) -> EditorPreferenceResolution:
    """
    Resolve the editor to open worktrees with.

    Args:
        config: Loaded rsworktree configuration.
        environ: Environment to read $VISUAL / $EDITOR from. Defaults to os.environ.

    Returns:
        EditorPreferenceResolution with the preference, or the reason none
        is configured.
    """
    environ = os.environ if environ is None else environ
    saw_empty = False

    candidates: list[tuple[str, Optional[str], list[str]]] = [
        ("config", config.editor.command, list(config.editor.args)),
    ]
    candidates.extend(
        (f"${name}", environ.get(name), []) for name in ENV_EDITOR_VARIABLES
    )

    for source, raw_command, args in candidates:
        if raw_command is None:
            continue

        parts = _split_command(raw_command)
        if not parts:
            saw_empty = True
            continue

        preference = EditorPreference(command=parts[0], args=parts[1:] + args)
        logger.debug(f"Editor preference from {source}: {preference.command} {preference.args}")
        return EditorPreferenceResolution.found(preference, source)

    reason = (
        EditorPreferenceMissingReason.EMPTY_COMMAND
        if saw_empty
        else EditorPreferenceMissingReason.NOT_CONFIGURED
    )
    return EditorPreferenceResolution.missing(reason)


def missing_preference_message(reason: Optional[EditorPreferenceMissingReason]) -> str:
    """Guidance shown when no editor is configured."""
    if reason == EditorPreferenceMissingReason.EMPTY_COMMAND:
        detail = "The configured editor command is empty."
    else:
        detail = "No editor configured."
    return (
        f"{detail} Set `command` under [editor] in .rsworktree/config.toml "
        f"or export $VISUAL / $EDITOR."
    )
