"""XDG locations used by dustpan.

dustpan keeps nothing between runs. It reads an optional user theme and
writes a session log:

- ``$XDG_CONFIG_HOME/dustpan/theme.toml`` (default ``~/.config``)
- ``$XDG_STATE_HOME/dustpan/dustpan.log`` (default ``~/.local/state``)
"""

import os
from pathlib import Path

APP_NAME = "dustpan"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Resolve an XDG base directory for dustpan.

    An unset or empty variable falls back to ``~/<default_subdir>``.
    """
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / default_subdir
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory holding the user theme."""
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Directory holding the session log."""
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_user_theme_path() -> Path:
    """Path of the optional user theme override."""
    return get_config_dir() / "theme.toml"


def get_log_path() -> Path:
    """Path of the session log file."""
    return get_state_dir() / "dustpan.log"


def ensure_state_dir() -> Path:
    """Create the state directory if needed.

    Returns:
        The state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_state_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create state directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create state directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
