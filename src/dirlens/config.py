"""Configuration for dirlens."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

LOGGER = logging.getLogger(__name__)

MIB = 1024 * 1024

DEFAULT_DATA_DIR = "~/.dirlens"
CONFIG_FILENAME = "config.json"


def expand_path(path: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expanduser(os.path.expandvars(path)))


class Settings(BaseModel):
    """Tunable limits for caching and scanning."""

    # Directory listing cache
    cache_ttl: float = Field(5.0, description="Seconds a directory listing stays fresh")
    max_cache_size: int = Field(50, description="Maximum number of cached directories")
    stat_batch_size: int = Field(100, description="Entries stat'ed concurrently per batch")

    # Statistics scanner
    large_file_threshold: int = Field(100 * MIB, description="Files above this are 'large'")
    top_files_limit: int = Field(20, description="Entries kept in the large/recent lists")
    recent_window: float = Field(24 * 60 * 60, description="Seconds a file counts as recent")
    duplicate_preview_limit: int = Field(50, description="Duplicate groups in a scan summary")
    retained_scans: int = Field(8, description="Scan sessions kept for pagination")

    # Installed applications cache
    apps_fresh_for: float = Field(5 * 60, description="Seconds the apps cache stays fresh")
    apps_timeout: float = Field(12.0, description="Foreground wait for an apps refresh")

    data_dir: str = Field(DEFAULT_DATA_DIR, description="Where persistent caches live")

    @property
    def data_path(self) -> Path:
        """Expanded data directory."""
        return expand_path(self.data_dir)

    @property
    def apps_cache_file(self) -> Path:
        """JSON file backing the installed applications cache."""
        return self.data_path / "installed_apps_cache.json"


def default_config_file() -> Path:
    """Location of the user config file."""
    return expand_path(DEFAULT_DATA_DIR) / CONFIG_FILENAME


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from a JSON config file.

    Missing or malformed files fall back to defaults.

    Args:
        path: Config file to read (default: ~/.dirlens/config.json)

    Returns:
        Settings instance
    """
    config_file = path or default_config_file()
    if not config_file.exists():
        return Settings()

    try:
        with open(config_file) as f:
            raw = json.load(f)
        return Settings(**raw)
    except (json.JSONDecodeError, OSError, TypeError, ValidationError) as e:
        LOGGER.warning("Ignoring config file %s: %s", config_file, e)
        return Settings()
