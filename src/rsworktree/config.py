"""
Configuration management for rsworktree.

Loads configuration from TOML files in the following priority:
1. Path specified via --config flag
2. .rsworktree/config.toml in the repository root
3. ~/.config/rsworktree/config.toml
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rsworktree.provider import GitProvider

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".rsworktree"
CONFIG_FILE_NAME = "config.toml"


class SplitDirection(str, Enum):
    """Direction used when splitting a tmux window for the editor pane."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def tmux_flag(self) -> str:
        return "-h" if self == SplitDirection.HORIZONTAL else "-v"


class EditorConfig(BaseModel):
    """Editor used by `rsworktree open`."""

    command: Optional[str] = Field(
        default=None,
        description="Editor command, may include arguments (e.g. 'code --wait')",
    )
    args: list[str] = Field(
        default_factory=list,
        description="Extra arguments passed before the worktree path",
    )


class TmuxConfig(BaseModel):
    """Configuration for editor placement inside tmux."""

    split_direction: SplitDirection = Field(
        default=SplitDirection.HORIZONTAL,
        description="Split direction for new editor panes",
    )
    extra_editor_commands: list[str] = Field(
        default_factory=list,
        description="Additional pane commands recognised as editors",
    )


class HooksConfig(BaseModel):
    """Configuration for lifecycle hooks."""

    enabled: bool = Field(default=True, description="Run hooks found under .rsworktree/hooks")


class TelemetryConfig(BaseModel):
    """Configuration for the editor launch audit log."""

    enabled: bool = Field(default=True, description="Persist editor launch records")
    max_records: int = Field(default=200, ge=1, description="Records kept in the log")
    path: Optional[Path] = Field(
        default=None,
        description="Location of the log (default: ~/.rsworktree/editor_launches.json)",
    )


class Config(BaseModel):
    """Main configuration model for rsworktree."""

    provider: GitProvider = Field(default=GitProvider.GITHUB)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    tmux: TmuxConfig = Field(default_factory=TmuxConfig)
    hooks: HooksConfig = Field(default_factory=HooksConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @field_validator("provider", mode="before")
    @classmethod
    def _parse_provider(cls, value):
        if isinstance(value, str):
            return GitProvider.from_string(value)
        return value


def config_search_paths(
    repo_root: Optional[Path] = None,
    config_path: Optional[str] = None,
) -> list[Path]:
    """Candidate configuration files, highest priority first."""
    candidates = [
        Path(config_path) if config_path else None,
        repo_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME if repo_root else None,
        Path.home() / ".config" / "rsworktree" / CONFIG_FILE_NAME,
    ]
    return [path for path in candidates if path is not None]


def load_config(
    repo_root: Optional[Path] = None,
    config_path: Optional[str] = None,
) -> Config:
    """
    Load configuration from file or use defaults.

    Args:
        repo_root: Repository root used to locate `.rsworktree/config.toml`.
        config_path: Optional explicit path to config file.

    Returns:
        Config instance with loaded or default values.
    """
    for path in config_search_paths(repo_root, config_path):
        if not path.exists():
            continue
        try:
            data = toml.load(path)
            config = Config(**data)
        except (toml.TomlDecodeError, ValidationError, ValueError, OSError) as e:
            logger.warning(f"Ignoring invalid config file {path}: {e}")
            continue
        logger.debug(f"Loaded configuration from {path}")
        return config

    return Config()
