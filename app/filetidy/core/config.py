"""Application settings.

Tunables live in ~/.config/filetidy/config.toml. Every key is optional;
a missing file yields the defaults.

Example:
    [staleness]
    event_count_threshold = 10
    stale_after_seconds = 300

    [trash]
    directory = "~/.filetidy-trash"
"""

import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from filetidy.core.paths import get_config_path, get_trash_dir


class StalenessSettings(BaseModel):
    """Thresholds for the staleness bridge.

    Attributes:
        event_count_threshold: Pending events that make a root stale.
        stale_after_seconds: Age of the last scan that makes a root stale.
        suggestion_cooldown_seconds: Minimum gap between two suggestions for one root.
        removal_escalation_count: Pending events at which a removal or rename
            makes a root stale instead of possibly stale.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    event_count_threshold: Annotated[
        int,
        Field(ge=1, description="Pending events that make a root stale"),
    ] = 10
    stale_after_seconds: Annotated[
        float,
        Field(gt=0, description="Seconds after a scan before a root is stale"),
    ] = 300.0
    suggestion_cooldown_seconds: Annotated[
        float,
        Field(ge=0, description="Per-root cooldown between suggestions"),
    ] = 60.0
    removal_escalation_count: Annotated[
        int,
        Field(ge=1, description="Pending events at which removals escalate to stale"),
    ] = 3


class TrashSettings(BaseModel):
    """Location of the recoverable trash.

    Attributes:
        directory: Override for the trash directory. ``~`` is expanded.
    """

    model_config = ConfigDict(extra="forbid")

    directory: Annotated[
        str | None,
        Field(description="Trash directory (None = XDG data dir)"),
    ] = None

    @property
    def effective_directory(self) -> Path:
        """Trash directory to use."""
        if self.directory:
            return Path(self.directory).expanduser()
        return get_trash_dir()


class Settings(BaseModel):
    """Complete contents of config.toml."""

    model_config = ConfigDict(extra="forbid")

    staleness: Annotated[
        StalenessSettings,
        Field(default_factory=StalenessSettings, description="Staleness thresholds"),
    ]
    trash: Annotated[
        TrashSettings,
        Field(default_factory=TrashSettings, description="Trash location"),
    ]


class ConfigError(Exception):
    """Base exception for settings errors."""


class ConfigParseError(ConfigError):
    """Raised when config.toml cannot be parsed."""


def load_config(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated Settings. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or violates the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def require_config(config_path: Path | None = None) -> Settings:
    """Load settings or exit with a helpful error message.

    Raises:
        typer.Exit: If the config file exists but cannot be loaded.
    """
    import typer

    from filetidy.utils.formatting import print_error

    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e
