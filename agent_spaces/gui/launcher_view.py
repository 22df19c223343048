"""Keyboard-first launcher shown inside an unlaunched agent pane."""

from __future__ import annotations

import customtkinter as ctk

from agent_spaces.core.launcher import MODE_RESUME, CustomCommand, Launcher, SelectMode, SelectModel
from agent_spaces.gui import theme

_MODE_LABELS = {
    "new": ("n", "New session"),
    MODE_RESUME: ("r", "Resume"),
}


class LauncherView(ctk.CTkFrame):
    """Render a ``Launcher`` and feed it key presses."""

    def __init__(self, master: ctk.CTkBaseClass, launcher: Launcher) -> None:
        super().__init__(master, fg_color=theme.COLOR_BG_PANEL, corner_radius=0)
        self._launcher = launcher
        self._custom_entry: ctk.CTkEntry | None = None
        self.grid_columnconfigure(0, weight=1)

        self._title = ctk.CTkLabel(
            self,
            text="",
            anchor="w",
            font=(theme.FONT_FAMILY, 15, "bold"),
            text_color=theme.COLOR_TEXT,
        )
        self._title.grid(row=0, column=0, sticky="ew", padx=24, pady=(24, 4))

        self._hint = ctk.CTkLabel(
            self,
            text="",
            anchor="w",
            font=(theme.FONT_FAMILY, 11),
            text_color=theme.COLOR_TEXT_MUTED,
        )
        self._hint.grid(row=1, column=0, sticky="ew", padx=24, pady=(0, 12))

        self._body = ctk.CTkFrame(self, fg_color="transparent")
        self._body.grid(row=2, column=0, sticky="new", padx=16)
        self._body.grid_columnconfigure(0, weight=1)

        # CTkFrame routes bindings to its canvas, so the canvas is what takes focus.
        self.bind("<Key>", self._on_key, add=True)
        self._unsubscribe = launcher.changes.subscribe(lambda _reason: self.refresh())
        self.refresh()

    def destroy(self) -> None:
        self._unsubscribe()
        super().destroy()

    def focus_launcher(self) -> None:
        if self._custom_entry is not None:
            self._custom_entry.focus_set()
        else:
            getattr(self, "_canvas", self).focus_set()

    def refresh(self) -> None:
        for child in self._body.winfo_children():
            child.destroy()
        self._custom_entry = None
        if self._launcher.finished:
            return

        state = self._launcher.state
        if isinstance(state, SelectModel):
            self._render_models()
        elif isinstance(state, SelectMode):
            self._render_modes(state)
        elif isinstance(state, CustomCommand):
            self._render_custom()

    # ------------------------------------------------------------------ #
    # States                                                               #
    # ------------------------------------------------------------------ #

    def _render_models(self) -> None:
        self._title.configure(text="Start an agent")
        self._hint.configure(text="↑/↓ move · Enter select · 1-9 shortcut · c custom command · e edit models")
        models = self._launcher.models
        for index, model in enumerate(models):
            self._option_row(
                index,
                key=model.shortcut,
                label=model.name,
                detail=model.new_command or "plain shell",
                color=theme.preset_color(model.color_hex),
                command=lambda i=index: self._launcher.choose_model(i),
            )
        ctk.CTkButton(
            self._body,
            text="Custom command…",
            height=28,
            fg_color="transparent",
            border_width=1,
            border_color=theme.COLOR_BORDER,
            command=self._launcher.open_custom,
        ).grid(row=len(models), column=0, sticky="w", padx=8, pady=(12, 0))

    def _render_modes(self, state: SelectMode) -> None:
        model = state.model
        self._title.configure(text=model.name)
        self._hint.configure(text="n new · r resume · Enter select · Esc back")
        for index, option in enumerate(self._launcher.mode_options):
            key, label = _MODE_LABELS[option]
            command = model.resume_command if option == MODE_RESUME else model.new_command
            action = self._launcher.launch_resume if option == MODE_RESUME else self._launcher.launch_new
            self._option_row(
                index,
                key=key,
                label=label,
                detail=command,
                color=theme.preset_color(model.color_hex),
                command=action,
            )

    def _render_custom(self) -> None:
        self._title.configure(text="Custom command")
        self._hint.configure(text="Enter run · Esc back")
        entry = ctk.CTkEntry(
            self._body,
            height=32,
            font=(theme.MONO_FAMILY, 13),
            placeholder_text="e.g. aider --model sonnet",
        )
        entry.grid(row=0, column=0, sticky="ew", padx=8, pady=4)
        entry.bind("<KeyRelease>", lambda _e: self._launcher.set_custom_text(entry.get()), add=True)
        entry.bind("<Return>", self._submit_custom, add=True)
        entry.bind("<Escape>", self._cancel_custom, add=True)
        self._custom_entry = entry
        entry.focus_set()

    def _option_row(self, index: int, *, key: str, label: str, detail: str, color: str, command) -> None:
        selected = index == self._launcher.selected_index
        row = ctk.CTkFrame(
            self._body,
            fg_color=theme.COLOR_ROW_ACTIVE_BG if selected else theme.COLOR_ROW_NORMAL_BG,
            corner_radius=6,
        )
        row.grid(row=index, column=0, sticky="ew", padx=8, pady=2)
        row.grid_columnconfigure(2, weight=1)

        ctk.CTkLabel(row, text="●", width=16, text_color=color).grid(row=0, column=0, padx=(10, 4), pady=6)
        ctk.CTkLabel(
            row,
            text=f"{key}  {label}" if key else label,
            anchor="w",
            font=(theme.FONT_FAMILY, 13, "bold" if selected else "normal"),
            text_color=theme.COLOR_TEXT,
        ).grid(row=0, column=1, sticky="w")
        ctk.CTkLabel(
            row,
            text=detail,
            anchor="e",
            font=(theme.MONO_FAMILY, 11),
            text_color=theme.COLOR_TEXT_MUTED,
        ).grid(row=0, column=2, sticky="e", padx=10)

        for widget in (row, *row.winfo_children()):
            widget.bind("<Button-1>", lambda _e: command(), add=True)

    # ------------------------------------------------------------------ #
    # Input                                                                #
    # ------------------------------------------------------------------ #

    def _on_key(self, event: object) -> str | None:
        keysym = getattr(event, "keysym", "")
        key = keysym if len(keysym) > 1 else (getattr(event, "char", "") or keysym)
        if self._launcher.handle_key(key):
            return "break"
        return None

    def _cancel_custom(self, _event: object) -> str:
        self._launcher.back()
        return "break"

    def _submit_custom(self, _event: object) -> str:
        if self._custom_entry is not None:
            self._launcher.set_custom_text(self._custom_entry.get())
        self._launcher.submit_custom()
        return "break"
