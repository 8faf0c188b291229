"""XDG-compliant path management for vmsweep.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, and report storage.

XDG defaults:
- Config: ~/.config/vmsweep/
- State: ~/.local/state/vmsweep/
- Data: ~/.local/share/vmsweep/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "vmsweep"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/vmsweep/ (or XDG_CONFIG_HOME/vmsweep/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data holds the run history, which must persist between runs
    but is not configuration.

    Returns:
        Path to ~/.local/state/vmsweep/ (or XDG_STATE_HOME/vmsweep/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_data_dir() -> Path:
    """Get the data directory path.

    Returns:
        Path to ~/.local/share/vmsweep/ (or XDG_DATA_HOME/vmsweep/).
    """
    return _get_xdg_dir("XDG_DATA_HOME", ".local/share")


def get_config_path() -> Path:
    """Get the default config file path.

    Returns:
        Path to ~/.config/vmsweep/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_history_path() -> Path:
    """Get the history file path.

    Returns:
        Path to ~/.local/state/vmsweep/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def get_report_dir() -> Path:
    """Get the default report output directory.

    Returns:
        Path to ~/.local/share/vmsweep/reports/.
    """
    return get_data_dir() / "reports"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir(path: Path | None = None) -> Path:
    """Create a state directory if it doesn't exist.

    Args:
        path: Explicit state directory. Defaults to get_state_dir().

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path if path is not None else get_state_dir(), "state")


def ensure_report_dir(path: Path | None = None) -> Path:
    """Create a report output directory if it doesn't exist.

    Args:
        path: Explicit output directory. Defaults to get_report_dir().

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(path if path is not None else get_report_dir(), "report")
