"""Load and save ``config.json``."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from agent_spaces.config.schema import Config
from agent_spaces.utils.helpers import get_data_path


def get_config_path() -> Path:
    """Return the default configuration file path."""
    return get_data_path() / "config.json"


def load_config(path: Path | None = None) -> Config:
    """Load configuration, falling back to defaults on any read problem."""
    target = path or get_config_path()
    if not target.exists():
        return Config()
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
        return Config.model_validate(payload)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Ignoring unreadable config {}: {}", target, exc)
        return Config()


def save_config(config: Config, path: Path | None = None) -> None:
    """Persist configuration; write failures are logged, not raised."""
    target = path or get_config_path()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        payload = config.model_dump(mode="json")
        target.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to save config {}: {}", target, exc)
