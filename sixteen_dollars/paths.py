from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "sixteen-dollars"
DATABASE_FILE = "sixteen_dollars.sqlite3"


def data_directory() -> Path:
    override = os.environ.get("SIXTEEN_DOLLARS_HOME")
    if override:
        return Path(override).expanduser()
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        base = Path(xdg_data)
    else:
        base = Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def database_path(data_arg: str | None = None) -> Path:
    if data_arg:
        return Path(data_arg).expanduser().resolve()
    return data_directory() / DATABASE_FILE
