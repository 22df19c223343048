"""Application state: active workspace/project plus the live session set.

The GUI and CLI call into this object; it owns no widgets.
"""

from __future__ import annotations

from typing import Callable, Iterable

from loguru import logger

from agent_spaces.config.schema import Config
from agent_spaces.core.agent_session import AgentSession
from agent_spaces.core.events import ChangeNotifier
from agent_spaces.core.focus import FocusMode
from agent_spaces.core.session_manager import SessionManager
from agent_spaces.session.workspace_store import ModelConfig, Project, Workspace, WorkspaceStore


class WorkspaceController:
    def __init__(
        self,
        store: WorkspaceStore,
        session_manager: SessionManager,
        config: Config | None = None,
        save_config: Callable[[Config], None] | None = None,
    ) -> None:
        self.store = store
        self.sessions = session_manager
        self.config = config or Config()
        self._save_config = save_config
        self.selected_workspace_id: str | None = None
        self.selected_project_id: str | None = None
        self.changes = ChangeNotifier()

    # ------------------------------------------------------------------ #
    # Derived state                                                        #
    # ------------------------------------------------------------------ #

    @property
    def workspaces(self) -> list[Workspace]:
        return list(self.store.workspaces)

    @property
    def selected_workspace(self) -> Workspace | None:
        if self.selected_workspace_id is None:
            return None
        return self.store.get_workspace(self.selected_workspace_id)

    @property
    def selected_project(self) -> Project | None:
        workspace = self.selected_workspace
        if workspace is None or self.selected_project_id is None:
            return None
        return workspace.project(self.selected_project_id)

    @property
    def current_directory(self) -> str | None:
        project = self.selected_project
        if project is not None:
            return project.path
        workspace = self.selected_workspace
        return workspace.root_path if workspace is not None else None

    @property
    def model_configs(self) -> list[ModelConfig]:
        return list(self.store.model_configs)

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def bootstrap(self) -> None:
        """Select the first stored workspace, if any."""
        workspaces = self.store.workspaces
        if workspaces:
            self._activate(workspaces[0])
        else:
            logger.info("[workspace] no stored workspaces")
            self.changes.notify("workspace")

    def shutdown(self) -> None:
        self.sessions.shutdown()

    # ------------------------------------------------------------------ #
    # Workspaces                                                           #
    # ------------------------------------------------------------------ #

    def create_workspace(self, root_path: str, custom_name: str | None = None) -> Workspace:
        workspace = Workspace(root_path=root_path)
        if custom_name:
            workspace.rename(custom_name)
        self.store.add_workspace(workspace)
        logger.info("[workspace] created {} at {}", workspace.name, root_path)
        self._activate(workspace)
        return workspace

    def select_workspace(self, workspace_id: str) -> None:
        if workspace_id == self.selected_workspace_id:
            return
        workspace = self.store.get_workspace(workspace_id)
        if workspace is None:
            return
        self._activate(workspace)

    def rename_workspace(self, workspace_id: str, name: str | None) -> None:
        workspace = self.store.get_workspace(workspace_id)
        if workspace is None:
            return
        workspace.rename(name)
        self.store.update_workspace(workspace)
        self.changes.notify("workspace")

    def delete_workspace(self, workspace_id: str) -> None:
        if self.store.get_workspace(workspace_id) is None:
            return
        was_selected = workspace_id == self.selected_workspace_id
        self.store.delete_workspace(workspace_id)
        logger.info("[workspace] deleted {}", workspace_id)
        if not was_selected:
            self.changes.notify("workspace")
            return
        remaining = self.store.workspaces
        if remaining:
            self._activate(remaining[0])
            return
        self.selected_workspace_id = None
        self.selected_project_id = None
        self.sessions.reset(None)
        self.changes.notify("workspace")

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def add_project(self, path: str) -> Project | None:
        workspace = self.selected_workspace
        if workspace is None:
            return None
        project = Project(path=path)
        if not workspace.add_project(project):
            logger.debug("[workspace] project {} already present", path)
            return None
        self.store.update_workspace(workspace)
        self.select_project(project.id)
        return project

    def remove_project(self, project_id: str) -> None:
        workspace = self.selected_workspace
        if workspace is None or project_id == workspace.root_project.id:
            return
        if not workspace.remove_project(project_id):
            return
        self.store.update_workspace(workspace)
        if self.selected_project_id == project_id:
            self.select_project(workspace.projects[0].id)
        else:
            self.changes.notify("project")

    def select_project(self, project_id: str) -> None:
        workspace = self.selected_workspace
        if workspace is None:
            return
        project = workspace.project(project_id)
        if project is None:
            return
        self.selected_project_id = project.id
        self.sessions.set_working_directory(project.path)
        self.changes.notify("project")

    # ------------------------------------------------------------------ #
    # Agent sessions                                                       #
    # ------------------------------------------------------------------ #

    def add_agent_session(self) -> AgentSession:
        return self.sessions.add_session(self.current_directory)

    def remove_agent_session(self, session_id: str) -> None:
        self.sessions.remove_session(session_id)

    def select_agent_session(self, session_id: str) -> None:
        self.sessions.select_session(session_id)

    def select_next_agent(self) -> None:
        self.sessions.select_next()

    def select_previous_agent(self) -> None:
        self.sessions.select_previous()

    def send_command(self, text: str) -> bool:
        """Type *text* plus Enter into the selected agent's shell."""
        session = self.sessions.selected
        if session is None or not session.is_started or session.terminal is None:
            return False
        session.terminal.send(text + "\n")
        return True

    # ------------------------------------------------------------------ #
    # Settings                                                             #
    # ------------------------------------------------------------------ #

    @property
    def focus_mode(self) -> FocusMode:
        return self.config.gui.focus_mode

    @focus_mode.setter
    def focus_mode(self, mode: FocusMode) -> None:
        mode = FocusMode(mode)
        if mode == self.config.gui.focus_mode:
            return
        self.config.gui.focus_mode = mode
        if self._save_config is not None:
            self._save_config(self.config)
        self.changes.notify("focus_mode")

    def add_model(self, config: ModelConfig) -> None:
        self.store.add_model_config(config)

    def update_model(self, config: ModelConfig) -> None:
        self.store.update_model_config(config)

    def delete_model(self, config_id: str) -> None:
        self.store.delete_model_config(config_id)

    def move_model(self, source_indices: Iterable[int], destination: int) -> None:
        self.store.move_model_config(source_indices, destination)

    def reset_models(self) -> None:
        self.store.reset_model_configs()

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _activate(self, workspace: Workspace) -> None:
        first = workspace.projects[0]
        self.selected_workspace_id = workspace.id
        self.selected_project_id = first.id
        logger.info("[workspace] switched to {}", workspace.name)
        self.sessions.reset(first.path)
        self.changes.notify("workspace")
