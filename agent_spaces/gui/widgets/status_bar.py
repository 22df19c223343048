"""Status bar widget."""

from __future__ import annotations

import customtkinter as ctk

from agent_spaces.gui import theme


class StatusBar(ctk.CTkFrame):
    """Bottom status line: workspace summary (left) + focus mode (right)."""

    def __init__(self, master: ctk.CTkBaseClass) -> None:
        super().__init__(master, fg_color=theme.COLOR_STATUS_BG, corner_radius=0)
        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=0)

        self._label = ctk.CTkLabel(
            self,
            text="No workspace",
            anchor="w",
            text_color=theme.COLOR_TEXT_MUTED,
            font=(theme.FONT_FAMILY, 12),
        )
        self._label.grid(row=0, column=0, sticky="ew", padx=10, pady=4)

        self._mode_label = ctk.CTkLabel(
            self,
            text="",
            anchor="e",
            text_color=theme.COLOR_TEXT_MUTED,
            font=(theme.FONT_FAMILY, 12),
        )
        self._mode_label.grid(row=0, column=1, sticky="e", padx=10, pady=4)

    def set_status(self, text: str) -> None:
        self._label.configure(text=text)

    def set_focus_mode(self, text: str) -> None:
        self._mode_label.configure(text=text)

    def flash_error(self, text: str) -> None:
        """Show *text* in the danger color until the next ``set_status``."""
        self._label.configure(text=text, text_color=theme.COLOR_DANGER)
        self.after(4000, lambda: self._label.configure(text_color=theme.COLOR_TEXT_MUTED))
