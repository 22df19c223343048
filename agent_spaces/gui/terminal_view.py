"""Interactive terminal widget backed by a PtyTerminal screen."""

from __future__ import annotations

import tkinter as tk

import customtkinter as ctk

from agent_spaces.gui import theme
from agent_spaces.gui.keys import is_app_shortcut, translate_key
from agent_spaces.runtime.terminal import PtyTerminal

_RENDER_DELAY_MS = 16


class TerminalView(ctk.CTkFrame):
    """Render a ``PtyTerminal`` snapshot and forward keystrokes to it."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        terminal: PtyTerminal,
        font_size: int = theme.FONT_SIZE,
    ) -> None:
        super().__init__(master, fg_color=theme.COLOR_BG_TERMINAL, corner_radius=0)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._terminal = terminal
        self._render_pending = False
        self._font = ctk.CTkFont(family=theme.MONO_FAMILY, size=font_size)

        self._text = ctk.CTkTextbox(
            self,
            font=self._font,
            fg_color=theme.COLOR_BG_TERMINAL,
            border_width=0,
            text_color=theme.COLOR_TEXT,
            wrap="none",
            activate_scrollbars=True,
        )
        self._text.grid(row=0, column=0, sticky="nsew", padx=4, pady=4)

        self._widget = getattr(self._text, "_textbox", self._text)
        self._widget.bind("<Key>", self._on_key)
        self._widget.bind("<Control-Shift-C>", self._copy_selection)
        self._widget.bind("<Control-Shift-V>", self._paste)
        self._widget.bind("<<Paste>>", self._paste)
        self._widget.bind("<Configure>", self._on_resize, add=True)

        self._unsubscribe_output = terminal.subscribe_output(self._schedule_render)
        terminal.set_focus_handler(self.focus_terminal)
        self._schedule_render()

    @property
    def input_widget(self) -> object:
        """Inner Tk widget; panes bind pointer events on it."""
        return self._widget

    def focus_terminal(self) -> None:
        try:
            self._widget.focus_set()
        except tk.TclError:
            # Focus can race with widget teardown on session removal.
            pass

    def detach(self) -> None:
        self._unsubscribe_output()
        self._terminal.set_focus_handler(None)

    def destroy(self) -> None:
        self.detach()
        super().destroy()

    # ------------------------------------------------------------------ #
    # Rendering                                                            #
    # ------------------------------------------------------------------ #

    def _schedule_render(self) -> None:
        if self._render_pending:
            return
        self._render_pending = True
        self.after(_RENDER_DELAY_MS, self._render)

    def _render(self) -> None:
        self._render_pending = False
        if not self.winfo_exists():
            return
        snapshot = self._terminal.snapshot()
        self._text.delete("1.0", "end")
        if snapshot:
            self._text.insert("1.0", snapshot)
        self._text.see("end")

    def _on_resize(self, event: object) -> None:
        width = int(getattr(event, "width", 0) or 0)
        height = int(getattr(event, "height", 0) or 0)
        char_w = max(1, self._font.measure("M"))
        char_h = max(1, self._font.metrics("linespace"))
        cols = max(20, width // char_w)
        rows = max(5, height // char_h)
        self._terminal.resize(cols, rows)

    # ------------------------------------------------------------------ #
    # Input                                                                #
    # ------------------------------------------------------------------ #

    def _on_key(self, event: object) -> str | None:
        keysym = getattr(event, "keysym", "")
        state = int(getattr(event, "state", 0) or 0)
        if is_app_shortcut(keysym, state):
            return None
        data = translate_key(keysym, getattr(event, "char", ""), state)
        if data and self._terminal.is_running:
            self._terminal.send(data)
        return "break"

    def _copy_selection(self, _event: object) -> str:
        try:
            self._widget.event_generate("<<Copy>>")
        except tk.TclError:
            pass
        return "break"

    def _paste(self, _event: object) -> str:
        try:
            text = self._widget.clipboard_get()
        except tk.TclError:
            return "break"
        if text and self._terminal.is_running:
            self._terminal.send(text)
        return "break"
