"""One agent pane: header strip plus launcher or live terminal."""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from agent_spaces.core.agent_session import AgentSession
from agent_spaces.core.focus import FocusCoordinator
from agent_spaces.core.launcher import Launcher
from agent_spaces.gui import theme
from agent_spaces.gui.launcher_view import LauncherView
from agent_spaces.gui.terminal_view import TerminalView


class SessionPane(ctk.CTkFrame):
    """Hosts one ``AgentSession`` and routes pointer events to focus policy."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        session: AgentSession,
        launcher: Launcher,
        coordinator: FocusCoordinator,
        on_close: Callable[[str], None],
        font_size: int = theme.FONT_SIZE,
    ) -> None:
        super().__init__(
            master,
            fg_color=theme.COLOR_BG_PANEL,
            border_width=1,
            border_color=theme.COLOR_BORDER,
            corner_radius=0,
        )
        self.session = session
        self._launcher = launcher
        self._coordinator = coordinator
        self._font_size = font_size
        self._launcher_view: LauncherView | None = None
        self._terminal_view: TerminalView | None = None

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        header = ctk.CTkFrame(self, fg_color=theme.COLOR_BG_SIDEBAR, corner_radius=0, height=28)
        header.grid(row=0, column=0, sticky="ew")
        header.grid_columnconfigure(1, weight=1)
        self._status_dot = ctk.CTkLabel(header, text="●", width=16, text_color=theme.COLOR_IDLE)
        self._status_dot.grid(row=0, column=0, padx=(8, 2))
        self._title = ctk.CTkLabel(
            header,
            text="",
            anchor="w",
            font=(theme.FONT_FAMILY, 12, "bold"),
            text_color=theme.COLOR_TEXT,
        )
        self._title.grid(row=0, column=1, sticky="ew")
        ctk.CTkButton(
            header,
            text="×",
            width=24,
            height=22,
            fg_color="transparent",
            hover_color=theme.COLOR_ROW_HOVER_BG,
            command=lambda: on_close(session.id),
        ).grid(row=0, column=2, padx=4, pady=2)
        self._bind_pointer(header)
        self._bind_pointer(self._title)

        self._content = ctk.CTkFrame(self, fg_color="transparent", corner_radius=0)
        self._content.grid(row=1, column=0, sticky="nsew", padx=1, pady=(0, 1))
        self._content.grid_columnconfigure(0, weight=1)
        self._content.grid_rowconfigure(0, weight=1)

        self._unsubscribe = session.changes.subscribe(self._on_session_changed)
        self._refresh_header()
        if session.has_launched:
            self._show_terminal()
        else:
            self._show_launcher()

    def destroy(self) -> None:
        self._unsubscribe()
        super().destroy()

    def set_selected(self, selected: bool) -> None:
        self.configure(border_color=theme.COLOR_ACCENT if selected else theme.COLOR_BORDER)

    def focus_content(self) -> None:
        """Give keyboard focus to the launcher (terminals focus via their session)."""
        if self._launcher_view is not None:
            self._launcher_view.focus_launcher()

    # ------------------------------------------------------------------ #
    # Content                                                              #
    # ------------------------------------------------------------------ #

    def _show_launcher(self) -> None:
        view = LauncherView(self._content, self._launcher)
        view.grid(row=0, column=0, sticky="nsew")
        self._bind_pointer(view)
        self._launcher_view = view

    def _show_terminal(self) -> None:
        if self._terminal_view is not None or self.session.is_destroyed:
            return
        if self._launcher_view is not None:
            self._launcher_view.destroy()
            self._launcher_view = None

        terminal = self.session.get_or_create_terminal()
        view = TerminalView(self._content, terminal, font_size=self._font_size)
        view.grid(row=0, column=0, sticky="nsew")
        self._bind_pointer(view.input_widget)
        self._terminal_view = view

        self.session.start_if_needed()
        if self.session.start_error:
            self._show_start_error(self.session.start_error)
        self.session.focus_request()

    def _show_start_error(self, message: str) -> None:
        ctk.CTkLabel(
            self._content,
            text=f"Could not start shell: {message}",
            anchor="w",
            text_color=theme.COLOR_DANGER,
            font=(theme.FONT_FAMILY, 12),
        ).grid(row=1, column=0, sticky="ew", padx=8, pady=4)

    def _refresh_header(self) -> None:
        session = self.session
        suffix = f"  ·  {session.launch_command}" if session.launch_command else ""
        self._title.configure(text=f"{session.name}{suffix}")
        self._status_dot.configure(text_color=theme.status_color(session.is_process_alive))

    def _on_session_changed(self, reason: str) -> None:
        if reason == "destroyed":
            return
        if reason == "launched":
            self._show_terminal()
        self._refresh_header()

    # ------------------------------------------------------------------ #
    # Pointer routing                                                      #
    # ------------------------------------------------------------------ #

    def _bind_pointer(self, widget: object) -> None:
        sid = self.session.id
        widget.bind("<Button-1>", lambda _e: self._coordinator.pointer_pressed(sid), add="+")
        widget.bind("<Enter>", lambda _e: self._coordinator.pointer_entered(sid), add="+")
        widget.bind("<Leave>", self._on_leave, add="+")

    def _on_leave(self, event: object) -> None:
        # Moving between widgets inside the pane is not a real leave.
        x = getattr(event, "x_root", None)
        y = getattr(event, "y_root", None)
        if x is not None and y is not None:
            inside = self.winfo_containing(x, y)
            if inside is not None and str(inside).startswith(str(self)):
                return
        self._coordinator.pointer_left(self.session.id)
