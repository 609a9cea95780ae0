"""
rsworktree - git worktree manager with tmux-aware editor launching.

This package manages worktrees under `.rsworktree/` in a repository and
opens them in an editor, reusing tmux windows and panes between runs.
"""

__version__ = "0.1.0"

from rsworktree.config import Config, load_config

__all__ = [
    "__version__",
    "Config",
    "load_config",
]
