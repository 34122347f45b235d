"""XDG-compliant path management for filetidy.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state and data storage.

XDG defaults:
- Config: ~/.config/filetidy/ (settings and rules)
- State: ~/.local/state/filetidy/ (execution and undo history)
- Data: ~/.local/share/filetidy/ (recoverable trash)
"""

import os
from pathlib import Path

APP_NAME = "filetidy"

# kind -> (environment variable, fallback under $HOME)
XDG_BASES: dict[str, tuple[str, str]] = {
    "config": ("XDG_CONFIG_HOME", ".config"),
    "state": ("XDG_STATE_HOME", ".local/state"),
    "data": ("XDG_DATA_HOME", ".local/share"),
}


def app_dir(kind: str) -> Path:
    """Resolve the filetidy directory for one XDG base.

    An empty environment variable counts as unset.

    Args:
        kind: One of "config", "state" or "data".

    Returns:
        The application subdirectory of that base.
    """
    env_var, fallback = XDG_BASES[kind]
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding config.toml and rules.toml."""
    return app_dir("config")


def get_state_dir() -> Path:
    """Directory holding the audit history."""
    return app_dir("state")


def get_data_dir() -> Path:
    """Directory holding the default trash."""
    return app_dir("data")


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_rules_path() -> Path:
    return get_config_dir() / "rules.toml"


def get_history_path() -> Path:
    return get_state_dir() / "history.jsonl"


def get_trash_dir() -> Path:
    """Default trash directory.

    Files "deleted" by a plan are moved here, never unlinked.
    """
    return get_data_dir() / "trash"


def ensure_app_dir(kind: str) -> Path:
    """Create an application directory if it doesn't exist.

    Args:
        kind: One of "config", "state" or "data".

    Returns:
        The existing directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = app_dir(kind)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise RuntimeError(f"Cannot create {kind} directory {path}: Permission denied") from e
    except OSError as e:
        raise RuntimeError(f"Cannot create {kind} directory {path}: {e.strerror or e}") from e
    return path


def ensure_config_dir() -> Path:
    return ensure_app_dir("config")


def ensure_state_dir() -> Path:
    return ensure_app_dir("state")
