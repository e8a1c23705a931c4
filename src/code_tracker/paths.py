"""Helpers for locating the ledger and log files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "CodeTracker"
APP_AUTHOR = "CodeTracker"
DATA_DIR_ENV = "CODE_TRACKER_DATA_DIR"
DATA_FILE_NAME = "coding-stats.json"


def get_data_dir() -> Path:
    """Return the base directory for persistent data.

    ``CODE_TRACKER_DATA_DIR`` wins over the per-user platform directory.
    """
    override = os.getenv(DATA_DIR_ENV)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_file_path() -> Path:
    return get_data_dir() / DATA_FILE_NAME


def get_log_path() -> Path:
    return get_data_dir() / "tracker.log"


def resolve_data_file(data_file: Optional[Path]) -> Path:
    return Path(data_file) if data_file else get_data_file_path()
