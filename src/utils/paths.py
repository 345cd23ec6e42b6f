"""File path resolution using platformdirs.

When BIZADVISOR_DATA_DIR is set, everything lives under it. Otherwise
paths use the platform-appropriate user data directory:
  macOS: ~/Library/Application Support/bizadvisor/
  Linux: ~/.local/share/bizadvisor/
"""

import os
from pathlib import Path

import platformdirs

APP_NAME = "bizadvisor"


def get_data_dir() -> Path:
    """Return the directory for persistent data (DB, config)."""
    override = os.environ.get("BIZADVISOR_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return Path(platformdirs.user_data_dir(APP_NAME, appauthor=False))


def get_config_dir() -> Path:
    """Return the per-user configuration directory (~/.bizadvisor)."""
    return Path.home() / ".bizadvisor"


def get_default_db_path() -> Path:
    """Return the default SQLite database file path."""
    return get_data_dir() / "bizadvisor.db"


def ensure_dirs_exist() -> None:
    """Create all required directories if they don't exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
