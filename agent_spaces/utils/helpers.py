"""Small path helpers shared by the store, config and sessions."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

_DATA_DIRNAME = ".agent-spaces"


def home_dir() -> str:
    """Return the user's home directory as a string."""
    return str(Path.home())


def get_data_path() -> Path:
    """Return the user-scoped storage directory (not created)."""
    return Path.home() / _DATA_DIRNAME


def ensure_dir(path: Path) -> bool:
    """Create *path* if missing. Returns False (and logs) on failure."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as exc:
        logger.warning("Could not create directory {}: {}", path, exc)
        return False


def last_path_component(path: str) -> str:
    """Folder name of *path*, ignoring trailing separators."""
    value = (path or "").rstrip("/\\")
    if not value:
        return path or ""
    return Path(value).name or value
