"""
Path utilities for Sirz Mail.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location

External data (db/, config.json) lives NEXT TO the executable, not bundled inside.
"""

import os
import sys
from pathlib import Path


def get_app_dir() -> Path:
    """
    Get the application directory.
    
    - In development: the project root (parent of sirzmail/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent.parent


def get_db_dir() -> Path:
    """
    Get the data directory holding saved templates.

    SIRZ_MAIL_DATA_DIR overrides the default <app>/db location.
    """
    override = os.environ.get("SIRZ_MAIL_DATA_DIR")
    if override:
        return Path(override)
    return get_app_dir() / "db"


def get_storage_path() -> Path:
    """Get the JSON file that persists the saved template library."""
    return get_db_dir() / "storage.json"


def get_config_path() -> Path:
    """Get the path to the config file (stores API key, model, etc.)."""
    return get_app_dir() / "config.json"


def ensure_db_dir() -> Path:
    """
    Ensure the db directory exists, creating it if necessary.
    Returns the path to the db directory.
    """
    db_dir = get_db_dir()
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir
