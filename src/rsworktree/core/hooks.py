"""
Lifecycle hook execution.

Hooks are opt-in executables stored as `<config-dir>/hooks/<hook-name>`.
A missing hook is a no-op, a non-executable or failing hook produces a
warning, and only a failure to spawn the process is an error.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path

from rsworktree.models.hooks import HookContext, HookName, HookResult

logger = logging.getLogger(__name__)

HOOKS_DIR = "hooks"


class HookError(Exception):
    """Base exception for hook execution."""


class HookSpawnError(HookError):
    """Raised when a hook process cannot be started."""


def is_executable(path: Path) -> bool:
    """Whether the platform would let us execute `path`."""
    if sys.platform == "win32":
        return path.is_file()
    return path.is_file() and os.access(path, os.X_OK)


class HookRunner:
    """Runs lifecycle hooks for a repository's config directory."""

    def __init__(self, config_dir: Path):
        self.config_dir = config_dir

    @property
    def hooks_dir(self) -> Path:
        return self.config_dir / HOOKS_DIR

    def hook_path(self, hook: HookName) -> Path:
        return self.hooks_dir / hook.value

    def run_hook(self, hook: HookName, context: HookContext) -> HookResult:
        """
        Run `hook` if it is installed.

        The hook runs with the worktree as working directory and the
        RSWORKTREE_* variables from `context` added to the environment.
        Its output goes straight to the terminal.

        Args:
            hook: Which hook to run.
            context: Worktree the hook runs for.

        Returns:
            HookResult describing what happened. Non-executable hooks and
            non-zero exits are reported through `HookResult.warning`.

        Raises:
            HookSpawnError: If the hook process could not be started.
        """
        hook_path = self.hook_path(hook)

        if not hook_path.exists():
            logger.debug(f"No {hook} hook at {hook_path}")
            return HookResult(hook=hook)

        if not is_executable(hook_path):
            warning = (
                f"hook `{hook_path}` exists but is not executable "
                f"(hint: make the hook executable with `chmod +x`)"
            )
            logger.warning(warning)
            return HookResult(hook=hook, warning=warning)

        logger.info(f"Running {hook} hook: {hook_path}")
        env = {**os.environ, **context.to_env()}

        try:
            completed = subprocess.run(
                [str(hook_path)],
                cwd=context.worktree_path,
                env=env,
            )
        except OSError as e:
            raise HookSpawnError(f"failed to execute hook `{hook_path}`: {e}") from e

        if completed.returncode != 0:
            warning = f"hook `{hook}` exited with code {completed.returncode}"
            logger.warning(warning)
            return HookResult(
                hook=hook,
                ran=True,
                exit_code=completed.returncode,
                warning=warning,
            )

        return HookResult(hook=hook, ran=True, exit_code=0)
