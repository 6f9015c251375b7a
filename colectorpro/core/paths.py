from __future__ import annotations

import os
from pathlib import Path

HOME_ENV = "COLECTORPRO_HOME"


def data_dir() -> Path:
    """Return the per-user data directory, creating it if needed."""
    override = os.environ.get(HOME_ENV, "").strip()
    root = Path(override).expanduser() if override else Path.home() / ".colectorpro"
    root.mkdir(parents=True, exist_ok=True)
    return root


def default_paths() -> tuple[Path, Path]:
    """Return (local_db_path, settings_json_path)."""
    root = data_dir()
    return root / "cars.sqlite3", root / "settings.json"
