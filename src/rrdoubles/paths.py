"""
Path utilities for rrdoubles.
"""

from pathlib import Path

DATA_DIR_NAME = ".rrdoubles"


def get_templates_dir() -> Path:
    """Get the web panel templates directory path."""
    return Path(__file__).parent / "webapp" / "templates"


def get_static_dir() -> Path:
    """Get the web panel static files directory path."""
    return Path(__file__).parent / "webapp" / "static"


def get_data_dir() -> Path:
    """
    Get the user data directory for storing the database.

    Returns:
        .rrdoubles/ in the current working directory (created if missing)
    """
    data_dir = Path.cwd() / DATA_DIR_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_default_db_path() -> Path:
    """Default SQLite database location."""
    return get_data_dir() / "rrdoubles.sqlite"
