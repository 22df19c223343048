"""Persistent workspace and model-preset store.

Directory layout::

    ~/.agent-spaces/
        workspaces.json     # ordered list of workspaces
        models.json         # ordered list of model presets
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from agent_spaces.core.events import ChangeNotifier
from agent_spaces.utils.helpers import ensure_dir, get_data_path, last_path_component

_WORKSPACES_FILE = "workspaces.json"
_MODELS_FILE = "models.json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_time(value: Any) -> datetime:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return _now()


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class Project:
    """A single folder reference inside a workspace."""

    path: str
    name: str = ""
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if not self.name:
            self.name = last_path_component(self.path)

    @property
    def exists(self) -> bool:
        return Path(self.path).expanduser().exists()

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "path": self.path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        return cls(path=data["path"], name=data.get("name", ""), id=data.get("id") or _new_id())


@dataclass
class Workspace:
    """A root folder plus additional project folders."""

    root_path: str
    custom_name: str | None = None
    additional_projects: list[Project] = field(default_factory=list)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @property
    def name(self) -> str:
        return self.custom_name or last_path_component(self.root_path)

    @property
    def root_project(self) -> Project:
        # Shares the workspace id so it stays stable between calls.
        return Project(path=self.root_path, id=self.id)

    @property
    def projects(self) -> list[Project]:
        """All projects, root first."""
        return [self.root_project, *self.additional_projects]

    def project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def add_project(self, project: Project) -> bool:
        """Append *project* unless its path is the root or already present."""
        if project.path == self.root_path:
            return False
        if any(p.path == project.path for p in self.additional_projects):
            return False
        self.additional_projects.append(project)
        self.updated_at = _now()
        return True

    def remove_project(self, project_id: str) -> bool:
        """Remove an additional project. The root cannot be removed."""
        before = len(self.additional_projects)
        self.additional_projects = [p for p in self.additional_projects if p.id != project_id]
        if len(self.additional_projects) == before:
            return False
        self.updated_at = _now()
        return True

    def rename(self, new_name: str | None) -> None:
        cleaned = (new_name or "").strip()
        self.custom_name = cleaned or None
        self.updated_at = _now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "additional_projects": [p.to_dict() for p in self.additional_projects],
            "created_at": self.created_at.isoformat(),
            "custom_name": self.custom_name,
            "id": self.id,
            "root_path": self.root_path,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workspace":
        return cls(
            root_path=data["root_path"],
            custom_name=data.get("custom_name") or None,
            additional_projects=[Project.from_dict(p) for p in data.get("additional_projects", [])],
            id=data.get("id") or _new_id(),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
        )


@dataclass
class ModelConfig:
    """A launcher preset: new-session and resume commands for one CLI."""

    name: str
    new_command: str = ""
    resume_command: str = ""
    shortcut: str = ""
    color_hex: str = "808080"
    id: str = field(default_factory=_new_id)

    @property
    def is_shell_only(self) -> bool:
        return not self.new_command and not self.resume_command

    @property
    def can_resume(self) -> bool:
        return bool(self.resume_command)

    def to_dict(self) -> dict[str, Any]:
        return {
            "color_hex": self.color_hex,
            "id": self.id,
            "name": self.name,
            "new_command": self.new_command,
            "resume_command": self.resume_command,
            "shortcut": self.shortcut,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelConfig":
        return cls(
            name=data["name"],
            new_command=data.get("new_command", ""),
            resume_command=data.get("resume_command", ""),
            shortcut=data.get("shortcut", ""),
            color_hex=data.get("color_hex", "808080"),
            id=data.get("id") or _new_id(),
        )


def default_model_configs() -> list[ModelConfig]:
    """The preset list seeded on first run."""
    return [
        ModelConfig(name="Claude", new_command="claude", resume_command="claude --resume",
                    shortcut="1", color_hex="FF9500"),
        ModelConfig(name="Codex", new_command="codex", resume_command="codex --continue",
                    shortcut="2", color_hex="34C759"),
        ModelConfig(name="Gemini", new_command="gemini", resume_command="gemini --resume",
                    shortcut="3", color_hex="007AFF"),
        ModelConfig(name="Shell", new_command="", resume_command="",
                    shortcut="4", color_hex="8E8E93"),
    ]


def shortcut_for_position(index: int) -> str:
    """``"1".."9"`` for the first nine presets, ``"0"`` for the tenth."""
    if index < 9:
        return str(index + 1)
    if index == 9:
        return "0"
    return ""


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write *content* to a temp file beside *path*, then swap it in."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class WorkspaceStore:
    """Persistent store for workspaces and model presets.

    Every mutation rewrites the whole collection file. Collections are
    small, so there is no diffing. Read failures never propagate: a broken
    workspaces file loads as empty, a broken models file as the defaults.
    """

    def __init__(self, root: Path | None = None, *, autoload: bool = True) -> None:
        self._root = root or get_data_path()
        self._workspaces_path = self._root / _WORKSPACES_FILE
        self._models_path = self._root / _MODELS_FILE
        self.workspaces: list[Workspace] = []
        self.model_configs: list[ModelConfig] = []
        self.changes = ChangeNotifier()

        ensure_dir(self._root)
        if autoload:
            self.load_workspaces()
            self.load_model_configs()

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------ #
    # Workspaces                                                           #
    # ------------------------------------------------------------------ #

    def load_workspaces(self) -> list[Workspace]:
        """Reload workspaces from disk (empty list when unreadable)."""
        payload = self._read_list(self._workspaces_path)
        loaded: list[Workspace] = []
        if payload is not None:
            try:
                loaded = [Workspace.from_dict(item) for item in payload]
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Error decoding workspaces from {}: {}", self._workspaces_path, exc)
                loaded = []
        self.workspaces = loaded
        return list(self.workspaces)

    def save_workspaces(self) -> None:
        self._write_list(self._workspaces_path, [w.to_dict() for w in self.workspaces])

    def get_workspace(self, workspace_id: str) -> Workspace | None:
        return next((w for w in self.workspaces if w.id == workspace_id), None)

    def add_workspace(self, workspace: Workspace) -> None:
        self.workspaces.append(workspace)
        self.save_workspaces()
        self.changes.notify("workspaces")

    def update_workspace(self, workspace: Workspace) -> None:
        for index, existing in enumerate(self.workspaces):
            if existing.id == workspace.id:
                self.workspaces[index] = workspace
                self.save_workspaces()
                self.changes.notify("workspaces")
                return

    def delete_workspace(self, workspace_id: str) -> None:
        remaining = [w for w in self.workspaces if w.id != workspace_id]
        if len(remaining) == len(self.workspaces):
            return
        self.workspaces = remaining
        self.save_workspaces()
        self.changes.notify("workspaces")

    # ------------------------------------------------------------------ #
    # Model presets                                                        #
    # ------------------------------------------------------------------ #

    def load_model_configs(self) -> list[ModelConfig]:
        """Reload presets; seed and persist defaults on first run."""
        if not self._models_path.exists():
            self.model_configs = default_model_configs()
            self.save_model_configs()
            return list(self.model_configs)

        payload = self._read_list(self._models_path)
        configs: list[ModelConfig] | None = None
        if payload is not None:
            try:
                configs = [ModelConfig.from_dict(item) for item in payload]
            except (KeyError, TypeError, ValueError) as exc:
                logger.error("Error decoding model configs from {}: {}", self._models_path, exc)
        # The unreadable file stays on disk untouched until the next edit.
        self.model_configs = configs if configs is not None else default_model_configs()
        return list(self.model_configs)

    def save_model_configs(self) -> None:
        self._write_list(self._models_path, [m.to_dict() for m in self.model_configs])

    def get_model_config(self, config_id: str) -> ModelConfig | None:
        return next((m for m in self.model_configs if m.id == config_id), None)

    def add_model_config(self, config: ModelConfig) -> None:
        self.model_configs.append(config)
        self._reassign_shortcuts()
        self.save_model_configs()
        self.changes.notify("models")

    def update_model_config(self, config: ModelConfig) -> None:
        for index, existing in enumerate(self.model_configs):
            if existing.id == config.id:
                # Shortcuts are positional, never taken from the edited copy.
                self.model_configs[index] = replace(config, shortcut=existing.shortcut)
                self.save_model_configs()
                self.changes.notify("models")
                return

    def delete_model_config(self, config_id: str) -> None:
        remaining = [m for m in self.model_configs if m.id != config_id]
        if len(remaining) == len(self.model_configs):
            return
        self.model_configs = remaining
        self._reassign_shortcuts()
        self.save_model_configs()
        self.changes.notify("models")

    def move_model_config(self, source_indices: Iterable[int], destination: int) -> None:
        """Move the items at *source_indices* so they land before *destination*.

        *destination* is an offset in the list as it was before the move
        (``len(list)`` appends at the end).
        """
        count = len(self.model_configs)
        sources = sorted({i for i in source_indices if 0 <= i < count})
        if not sources:
            return
        destination = max(0, min(destination, count))
        moving = [self.model_configs[i] for i in sources]
        kept = [m for i, m in enumerate(self.model_configs) if i not in sources]
        insert_at = destination - sum(1 for i in sources if i < destination)
        self.model_configs = kept[:insert_at] + moving + kept[insert_at:]
        self._reassign_shortcuts()
        self.save_model_configs()
        self.changes.notify("models")

    def reset_model_configs(self) -> None:
        self.model_configs = default_model_configs()
        self.save_model_configs()
        self.changes.notify("models")

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _reassign_shortcuts(self) -> None:
        for index, config in enumerate(self.model_configs):
            config.shortcut = shortcut_for_position(index)

    def _read_list(self, path: Path) -> list[dict[str, Any]] | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Error loading {}: {}", path, exc)
            return None
        if not isinstance(data, list):
            logger.error("Error loading {}: expected a list, got {}", path, type(data).__name__)
            return None
        return data

    def _write_list(self, path: Path, payload: list[dict[str, Any]]) -> None:
        try:
            content = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
            atomic_write_text(path, content + "\n")
        except OSError as exc:
            logger.error("Error saving {}: {}", path, exc)
