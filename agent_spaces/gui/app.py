"""Main customtkinter desktop application."""

from __future__ import annotations

import threading
from pathlib import Path
from tkinter import messagebox
from typing import Callable

import customtkinter as ctk
from loguru import logger

from agent_spaces.config.schema import Config
from agent_spaces.core.agent_session import SessionTimings
from agent_spaces.core.controller import WorkspaceController
from agent_spaces.core.focus import FocusCoordinator
from agent_spaces.core.launcher import Launcher
from agent_spaces.core.session_manager import LayoutMode, SessionManager
from agent_spaces.gui import theme
from agent_spaces.gui.session_pane import SessionPane
from agent_spaces.gui.settings_dialog import SettingsDialog
from agent_spaces.gui.sidebar import Sidebar, SidebarItem
from agent_spaces.gui.state_store import (
    MIN_HEIGHT,
    MIN_WIDTH,
    WindowState,
    load_window_state,
    save_window_state,
)
from agent_spaces.gui.tab_bar import AgentTab, TabBar
from agent_spaces.gui.widgets.status_bar import StatusBar
from agent_spaces.gui.workspace_dialog import WorkspaceDialog, ask_project_folder
from agent_spaces.runtime import make_terminal_factory
from agent_spaces.session.workspace_store import WorkspaceStore
from agent_spaces.utils.helpers import home_dir

SaveConfig = Callable[[Config], None]


class TkScheduler:
    """``Scheduler`` backed by ``root.after``; callbacks run on the Tk thread."""

    def __init__(self, root: ctk.CTk) -> None:
        self._root = root

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        self._root.after(max(0, int(delay_s * 1000)), fn)


class SpacesApp:
    """Desktop window: sidebar, agent tabs, single/split terminal area."""

    def __init__(
        self,
        config: Config,
        store: WorkspaceStore | None = None,
        save_config: SaveConfig | None = None,
        window_state_path: Path | None = None,
    ) -> None:
        self._config = config
        self._store = store or WorkspaceStore(config.storage_path)
        self._save_config = save_config
        self._window_state_path = window_state_path or config.storage_path / "gui_state.json"

        self._root: ctk.CTk | None = None
        self._ui_thread_id: int | None = None
        self._pending_calls: list[Callable[[], None]] = []

        self._controller: WorkspaceController | None = None
        self._coordinator: FocusCoordinator | None = None
        self._sidebar: Sidebar | None = None
        self._tab_bar: TabBar | None = None
        self._status_bar: StatusBar | None = None
        self._area: ctk.CTkFrame | None = None
        self._panes: dict[str, SessionPane] = {}
        self._launchers: dict[str, Launcher] = {}
        self._session_unsubs: dict[str, Callable[[], None]] = {}
        self._settings: SettingsDialog | None = None

    @property
    def controller(self) -> WorkspaceController:
        assert self._controller is not None
        return self._controller

    def run(self) -> None:
        """Build and run tkinter mainloop."""
        theme.setup_theme(self._config.gui.theme)
        if self._config.gui.font_size > 0:
            theme.FONT_SIZE = self._config.gui.font_size

        root = ctk.CTk()
        self._root = root
        self._ui_thread_id = threading.get_ident()

        root.title("Agent Spaces")
        root.minsize(MIN_WIDTH, MIN_HEIGHT)
        saved_state = load_window_state(path=self._window_state_path)
        if saved_state:
            root.geometry(saved_state.geometry)
        else:
            root.geometry(f"{self._config.gui.width}x{self._config.gui.height}")
        root.configure(fg_color=theme.COLOR_BG_APP)
        root.protocol("WM_DELETE_WINDOW", self._handle_close)

        scheduler = TkScheduler(root)
        manager = SessionManager(
            terminal_factory=make_terminal_factory(self._config.terminal, dispatch=self._run_on_ui),
            scheduler=scheduler,
            timings=SessionTimings.from_config(self._config.terminal),
            home_directory=home_dir(),
        )
        self._controller = WorkspaceController(self._store, manager, self._config, self._save_config)
        self._coordinator = FocusCoordinator(
            sink=manager.focus_sink,
            resolve=manager.get,
            mode=self._config.gui.focus_mode,
        )

        self._build_layout(root)
        self._bind_shortcuts(root)

        manager.changes.subscribe(self._on_sessions_changed)
        self.controller.changes.subscribe(self._on_controller_changed)
        self._store.changes.subscribe(lambda _reason: self._refresh_sidebar())

        self.controller.bootstrap()
        self._refresh_all()
        self._apply_pending_calls()
        root.mainloop()

    # ------------------------------------------------------------------ #
    # Layout                                                               #
    # ------------------------------------------------------------------ #

    def _build_layout(self, root: ctk.CTk) -> None:
        root.grid_columnconfigure(0, weight=0, minsize=self._config.gui.sidebar_width)
        root.grid_columnconfigure(1, weight=1)
        root.grid_rowconfigure(0, weight=1)

        self._sidebar = Sidebar(
            root,
            on_select_workspace=self.controller.select_workspace,
            on_new_workspace=self.open_new_workspace,
            on_delete_workspace=self._confirm_delete_workspace,
            on_rename_workspace=self._rename_workspace,
            on_select_project=self.controller.select_project,
            on_add_project=self.open_add_project,
            on_remove_project=self.controller.remove_project,
        )
        self._sidebar.grid(row=0, column=0, sticky="nsew", padx=(10, 6), pady=10)

        main = ctk.CTkFrame(root, fg_color="transparent")
        main.grid(row=0, column=1, sticky="nsew", padx=(0, 10), pady=10)
        main.grid_columnconfigure(0, weight=1)
        main.grid_rowconfigure(1, weight=1)

        self._tab_bar = TabBar(
            main,
            on_select=self.controller.select_agent_session,
            on_new=self.new_agent,
            on_send_command=self._send_command,
        )
        self._tab_bar.grid(row=0, column=0, sticky="ew", pady=(0, 6))

        self._area = ctk.CTkFrame(main, fg_color=theme.DIVIDER_COLOR, corner_radius=0)
        self._area.grid(row=1, column=0, sticky="nsew")
        self._area.bind("<Configure>", lambda _e: self._place_panes(), add=True)

        self._status_bar = StatusBar(root)
        self._status_bar.grid(row=1, column=0, columnspan=2, sticky="ew")

    def _bind_shortcuts(self, root: ctk.CTk) -> None:
        root.bind_all("<Control-Shift-N>", lambda _e: self._shortcut(self.open_new_workspace))
        root.bind_all("<Control-t>", lambda _e: self._shortcut(self.new_agent))
        root.bind_all("<Control-Alt-Left>", lambda _e: self._shortcut(self.controller.select_previous_agent))
        root.bind_all("<Control-Alt-Right>", lambda _e: self._shortcut(self.controller.select_next_agent))
        root.bind_all("<Control-comma>", lambda _e: self._shortcut(self.open_settings))

    @staticmethod
    def _shortcut(action: Callable[[], object]) -> str:
        action()
        return "break"

    def _place_panes(self) -> None:
        area = self._area
        if area is None:
            return
        manager = self.controller.sessions
        width = max(1, area.winfo_width())
        divider = self._config.gui.divider_width
        layout = manager.layout(width, divider)
        selected_id = manager.selected_id

        # customtkinter rejects absolute width/height in place(), so use fractions.
        if layout.mode is LayoutMode.SINGLE:
            for sid, pane in self._panes.items():
                if sid == selected_id:
                    pane.place(relx=0, rely=0, relwidth=1, relheight=1)
                else:
                    pane.place_forget()
            return

        x = 0.0
        for session, pane_width in zip(manager.sessions, layout.widths):
            pane = self._panes.get(session.id)
            if pane is None:
                continue
            pane.place(relx=x / width, rely=0, relwidth=pane_width / width, relheight=1)
            x += pane_width + divider

    # ------------------------------------------------------------------ #
    # Refresh                                                              #
    # ------------------------------------------------------------------ #

    def _refresh_all(self) -> None:
        self._sync_panes()
        self._refresh_sidebar()
        self._refresh_tabs()
        self._refresh_status()

    def _on_sessions_changed(self, reason: str) -> None:
        if reason == "sessions":
            self._sync_panes()
        self._refresh_tabs()
        self._refresh_status()
        if reason == "selection":
            self._place_panes()
            self._highlight_selected()
            self._focus_selected_launcher()

    def _on_controller_changed(self, reason: str) -> None:
        if reason == "focus_mode" and self._coordinator is not None:
            self._coordinator.mode = self.controller.focus_mode
        self._refresh_sidebar()
        self._refresh_status()

    def _sync_panes(self) -> None:
        """Create panes for new sessions and destroy panes of removed ones."""
        area = self._area
        if area is None or self._coordinator is None:
            return
        manager = self.controller.sessions
        live = {s.id for s in manager.sessions}

        for sid in [sid for sid in self._panes if sid not in live]:
            self._panes.pop(sid).destroy()
            self._launchers.pop(sid, None)
            unsubscribe = self._session_unsubs.pop(sid, None)
            if unsubscribe is not None:
                unsubscribe()

        for session in manager.sessions:
            if session.id in self._panes:
                continue
            launcher = Launcher(
                session,
                models_provider=lambda: self._store.model_configs,
                on_open_settings=self.open_settings,
            )
            self._launchers[session.id] = launcher
            self._panes[session.id] = SessionPane(
                area,
                session,
                launcher,
                self._coordinator,
                on_close=self.controller.remove_agent_session,
                font_size=self._config.gui.font_size,
            )
            self._session_unsubs[session.id] = session.changes.subscribe(lambda _r: self._refresh_tabs())

        self._place_panes()
        self._highlight_selected()
        self._focus_selected_launcher()

    def _highlight_selected(self) -> None:
        selected_id = self.controller.sessions.selected_id
        for sid, pane in self._panes.items():
            pane.set_selected(sid == selected_id and len(self._panes) > 1)

    def _focus_selected_launcher(self) -> None:
        session = self.controller.sessions.selected
        if session is None or session.has_launched:
            return
        pane = self._panes.get(session.id)
        if pane is not None:
            pane.focus_content()

    def _refresh_sidebar(self) -> None:
        if self._sidebar is None:
            return
        controller = self.controller
        workspaces = [
            SidebarItem(item_id=w.id, title=w.name, subtitle=w.root_path)
            for w in controller.workspaces
        ]
        self._sidebar.set_workspaces(workspaces, controller.selected_workspace_id)

        workspace = controller.selected_workspace
        projects: list[SidebarItem] = []
        if workspace is not None:
            root_id = workspace.root_project.id
            projects = [
                SidebarItem(
                    item_id=p.id,
                    title=p.name,
                    subtitle=p.path,
                    removable=p.id != root_id,
                    missing=not p.exists,
                )
                for p in workspace.projects
            ]
        self._sidebar.set_projects(projects, controller.selected_project_id)

    def _refresh_tabs(self) -> None:
        if self._tab_bar is None:
            return
        manager = self.controller.sessions
        tabs = [
            AgentTab(session_id=s.id, title=s.name, running=s.is_process_alive)
            for s in manager.sessions
        ]
        self._tab_bar.set_tabs(tabs, manager.selected_id)

    def _refresh_status(self) -> None:
        if self._status_bar is None:
            return
        controller = self.controller
        workspace = controller.selected_workspace
        count = len(controller.sessions)
        where = workspace.name if workspace is not None else "No workspace"
        directory = controller.current_directory or home_dir()
        self._status_bar.set_status(f"{where}  ·  {count} agent{'s' if count != 1 else ''}  ·  {directory}")
        self._status_bar.set_focus_mode(controller.focus_mode.title)

    # ------------------------------------------------------------------ #
    # Commands                                                             #
    # ------------------------------------------------------------------ #

    def new_agent(self) -> None:
        self.controller.add_agent_session()

    def open_new_workspace(self) -> None:
        if self._root is None:
            return
        WorkspaceDialog(self._root, on_save=self.controller.create_workspace)

    def open_add_project(self) -> None:
        if self._root is None or self.controller.selected_workspace is None:
            return
        initial = self.controller.selected_workspace.root_path
        path = ask_project_folder(self._root, initial_dir=initial)
        if path:
            self.controller.add_project(path)

    def open_settings(self) -> None:
        if self._root is None:
            return
        if self._settings is not None and self._settings.winfo_exists():
            self._settings.focus()
            return
        self._settings = SettingsDialog(self._root, self.controller)

    def _rename_workspace(self, workspace_id: str) -> None:
        workspace = self._store.get_workspace(workspace_id)
        if workspace is None:
            return
        dialog = ctk.CTkInputDialog(
            text=f"Rename '{workspace.name}' (empty resets to folder name):",
            title="Rename Workspace",
        )
        name = dialog.get_input()
        if name is not None:
            self.controller.rename_workspace(workspace_id, name)

    def _confirm_delete_workspace(self, workspace_id: str) -> None:
        workspace = self._store.get_workspace(workspace_id)
        if workspace is None:
            return
        prompt = f"Remove workspace '{workspace.name}'? Folders on disk are not touched."
        if messagebox.askyesno("Remove workspace", prompt, parent=self._root):
            self.controller.delete_workspace(workspace_id)

    def _send_command(self, text: str) -> bool:
        sent = self.controller.send_command(text)
        if not sent and self._status_bar is not None:
            self._status_bar.flash_error("Selected agent has no running shell")
        return sent

    # ------------------------------------------------------------------ #
    # Thread marshalling and shutdown                                      #
    # ------------------------------------------------------------------ #

    def _run_on_ui(self, fn: Callable[[], None]) -> None:
        if self._root is None:
            self._pending_calls.append(fn)
            return
        if threading.get_ident() == self._ui_thread_id:
            fn()
            return
        self._root.after(0, fn)

    def _apply_pending_calls(self) -> None:
        queued = list(self._pending_calls)
        self._pending_calls.clear()
        for fn in queued:
            fn()

    def _handle_close(self) -> None:
        root = self._root
        if root:
            self._persist_window_state(root)
        if self._controller is not None:
            self._controller.shutdown()
        if root:
            try:
                root.quit()
                root.destroy()
            except Exception as exc:
                logger.warning("Error during GUI shutdown: {}", exc)
            self._root = None

    def _persist_window_state(self, root: ctk.CTk) -> None:
        try:
            root.update_idletasks()
            state = WindowState(
                width=int(root.winfo_width()),
                height=int(root.winfo_height()),
                x=int(root.winfo_x()),
                y=int(root.winfo_y()),
            )
            save_window_state(state=state, path=self._window_state_path)
        except Exception as exc:
            logger.warning("Failed to persist window state: {}", exc)


def run_app(config: Config, save_config: SaveConfig | None = None) -> None:
    """Build the store and window for *config* and block until it closes."""
    store = WorkspaceStore(config.storage_path)
    SpacesApp(config, store=store, save_config=save_config).run()
