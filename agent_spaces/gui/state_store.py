"""Window geometry persisted between runs in ``gui_state.json``."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from agent_spaces.session.workspace_store import atomic_write_text
from agent_spaces.utils.helpers import ensure_dir, get_data_path

MIN_WIDTH = 960
MIN_HEIGHT = 600


@dataclass(frozen=True)
class WindowState:
    width: int
    height: int
    x: int
    y: int

    @property
    def geometry(self) -> str:
        """Tk geometry string, e.g. ``1400x800+40+30``."""
        return f"{self.width}x{self.height}+{self.x}+{self.y}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WindowState":
        # A window saved while minimised reports a tiny size; never restore below the minimum.
        return cls(
            width=max(MIN_WIDTH, int(data["width"])),
            height=max(MIN_HEIGHT, int(data["height"])),
            x=int(data.get("x", 0)),
            y=int(data.get("y", 0)),
        )


def default_state_path() -> Path:
    return get_data_path() / "gui_state.json"


def load_window_state(path: Path | None = None) -> WindowState | None:
    """Return the stored geometry, or None when absent or unreadable."""
    target = path or default_state_path()
    if not target.exists():
        return None
    try:
        return WindowState.from_dict(json.loads(target.read_text(encoding="utf-8")))
    except (OSError, ValueError, KeyError, TypeError) as exc:
        logger.warning("Ignoring unreadable window state {}: {}", target, exc)
        return None


def save_window_state(state: WindowState, path: Path | None = None) -> None:
    target = path or default_state_path()
    if not ensure_dir(target.parent):
        return
    try:
        atomic_write_text(target, json.dumps(asdict(state), indent=2, sort_keys=True) + "\n")
    except OSError as exc:
        logger.error("Error saving window state {}: {}", target, exc)
