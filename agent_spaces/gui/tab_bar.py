"""Agent tab strip plus the "send to agent" command entry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import customtkinter as ctk

from agent_spaces.gui import theme


@dataclass(frozen=True)
class AgentTab:
    session_id: str
    title: str
    running: bool = False


class TabBar(ctk.CTkFrame):
    def __init__(
        self,
        master: ctk.CTkBaseClass,
        on_select: Callable[[str], None],
        on_new: Callable[[], None],
        on_send_command: Callable[[str], bool],
    ) -> None:
        super().__init__(master, fg_color="transparent")
        self._on_select = on_select
        self._on_send_command = on_send_command
        self.grid_columnconfigure(0, weight=1)

        self._tabs = ctk.CTkFrame(self, fg_color="transparent")
        self._tabs.grid(row=0, column=0, sticky="w")

        ctk.CTkButton(
            self,
            text="+ Agent",
            width=80,
            height=28,
            fg_color=theme.COLOR_ACCENT,
            command=on_new,
        ).grid(row=0, column=1, sticky="e", padx=(8, 8))

        self._command = ctk.CTkEntry(
            self,
            width=260,
            height=28,
            font=(theme.MONO_FAMILY, 12),
            placeholder_text="Send command to selected agent",
        )
        self._command.grid(row=0, column=2, sticky="e")
        self._command.bind("<Return>", self._send, add=True)

    def set_tabs(self, tabs: list[AgentTab], active_id: str | None) -> None:
        for child in self._tabs.winfo_children():
            child.destroy()
        for index, tab in enumerate(tabs):
            active = tab.session_id == active_id
            dot = "●" if tab.running else "○"
            ctk.CTkButton(
                self._tabs,
                text=f"{dot} {tab.title}",
                width=110,
                height=28,
                fg_color=theme.COLOR_ROW_ACTIVE_BG if active else theme.COLOR_ROW_NORMAL_BG,
                border_width=1,
                border_color=theme.COLOR_ACCENT if active else theme.COLOR_BORDER,
                text_color=theme.COLOR_TEXT,
                hover_color=theme.COLOR_ROW_HOVER_BG,
                command=lambda sid=tab.session_id: self._on_select(sid),
            ).grid(row=0, column=index, padx=(0, 4))

    def _send(self, _event: object) -> str:
        text = self._command.get().strip()
        if text and self._on_send_command(text):
            self._command.delete(0, "end")
        return "break"
