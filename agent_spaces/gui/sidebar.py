"""Sidebar: workspace list on top, projects of the active workspace below."""

from __future__ import annotations

import tkinter as tk
from dataclasses import dataclass
from typing import Callable

import customtkinter as ctk

from agent_spaces.gui import theme


@dataclass(frozen=True)
class SidebarItem:
    """One clickable row."""

    item_id: str
    title: str
    subtitle: str = ""
    removable: bool = True
    missing: bool = False


class _Row(ctk.CTkFrame):
    def __init__(
        self,
        master: ctk.CTkBaseClass,
        item: SidebarItem,
        active: bool,
        on_click: Callable[[str], None],
        on_remove: Callable[[str], None] | None,
        on_double_click: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(
            master,
            fg_color=theme.COLOR_ROW_ACTIVE_BG if active else theme.COLOR_ROW_NORMAL_BG,
            corner_radius=6,
        )
        self.grid_columnconfigure(1, weight=1)
        ctk.CTkFrame(
            self,
            width=3,
            height=1,
            corner_radius=0,
            fg_color=theme.COLOR_ACCENT if active else "transparent",
        ).grid(row=0, column=0, rowspan=2, sticky="ns", padx=(0, 6))

        title = ctk.CTkLabel(
            self,
            text=item.title,
            anchor="w",
            font=(theme.FONT_FAMILY, 13, "bold" if active else "normal"),
            text_color=theme.COLOR_DANGER if item.missing else theme.COLOR_TEXT,
        )
        title.grid(row=0, column=1, sticky="ew", pady=(4, 0))
        subtitle = ctk.CTkLabel(
            self,
            text=item.subtitle,
            anchor="w",
            font=(theme.FONT_FAMILY, 10),
            text_color=theme.COLOR_TEXT_MUTED,
        )
        subtitle.grid(row=1, column=1, sticky="ew", pady=(0, 4))

        if on_remove is not None and item.removable:
            ctk.CTkButton(
                self,
                text="×",
                width=22,
                height=22,
                fg_color="transparent",
                hover_color=theme.COLOR_ROW_HOVER_BG,
                command=lambda: on_remove(item.item_id),
            ).grid(row=0, column=2, rowspan=2, padx=4)

        for widget in (self, title, subtitle):
            widget.bind("<Button-1>", lambda _e: on_click(item.item_id), add=True)
            if on_double_click is not None:
                widget.bind("<Double-Button-1>", lambda _e: on_double_click(item.item_id), add=True)


class _Section(ctk.CTkFrame):
    """Titled list with a "+" action."""

    def __init__(self, master: ctk.CTkBaseClass, title: str, on_add: Callable[[], None]) -> None:
        super().__init__(master, fg_color="transparent")
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        ctk.CTkLabel(
            self,
            text=title.upper(),
            anchor="w",
            font=(theme.FONT_FAMILY, 11, "bold"),
            text_color=theme.COLOR_TEXT_MUTED,
        ).grid(row=0, column=0, sticky="w", padx=4)
        ctk.CTkButton(self, text="+", width=24, height=22, command=on_add).grid(row=0, column=1, sticky="e")

        self._list = ctk.CTkScrollableFrame(
            self,
            fg_color="transparent",
            scrollbar_button_color=theme.COLOR_BORDER,
        )
        self._list.grid(row=1, column=0, columnspan=2, sticky="nsew", pady=(4, 0))
        self._list.grid_columnconfigure(0, weight=1)

    def set_rows(
        self,
        items: list[SidebarItem],
        active_id: str | None,
        on_click: Callable[[str], None],
        on_remove: Callable[[str], None] | None,
        on_double_click: Callable[[str], None] | None = None,
    ) -> None:
        for child in self._list.winfo_children():
            _unbind_configure_recursive(child)
            child.destroy()
        for index, item in enumerate(items):
            _Row(
                self._list,
                item,
                active=item.item_id == active_id,
                on_click=on_click,
                on_remove=on_remove,
                on_double_click=on_double_click,
            ).grid(row=index, column=0, sticky="ew", pady=2)


def _unbind_configure_recursive(widget: tk.Misc) -> None:
    """Drop <Configure> bindings before destroy.

    customtkinter repaints on Configure; a final Configure during teardown
    otherwise hits an already-deleted canvas.
    """
    try:
        widget.unbind("<Configure>")
        for child in widget.winfo_children():
            _unbind_configure_recursive(child)
    except tk.TclError:
        pass


class Sidebar(ctk.CTkFrame):
    """Left panel with workspaces and the projects of the selected one."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        on_select_workspace: Callable[[str], None],
        on_new_workspace: Callable[[], None],
        on_delete_workspace: Callable[[str], None],
        on_rename_workspace: Callable[[str], None],
        on_select_project: Callable[[str], None],
        on_add_project: Callable[[], None],
        on_remove_project: Callable[[str], None],
    ) -> None:
        super().__init__(
            master,
            fg_color=theme.COLOR_BG_SIDEBAR,
            border_width=1,
            border_color=theme.COLOR_BORDER,
            corner_radius=10,
        )
        self._on_select_workspace = on_select_workspace
        self._on_delete_workspace = on_delete_workspace
        self._on_rename_workspace = on_rename_workspace
        self._on_select_project = on_select_project
        self._on_remove_project = on_remove_project

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._workspaces = _Section(self, "Workspaces", on_new_workspace)
        self._workspaces.grid(row=0, column=0, sticky="nsew", padx=8, pady=(8, 4))
        self._projects = _Section(self, "Projects", on_add_project)
        self._projects.grid(row=1, column=0, sticky="nsew", padx=8, pady=(4, 8))

    def set_workspaces(self, items: list[SidebarItem], active_id: str | None) -> None:
        self._workspaces.set_rows(
            items,
            active_id,
            on_click=self._on_select_workspace,
            on_remove=self._on_delete_workspace,
            on_double_click=self._on_rename_workspace,
        )

    def set_projects(self, items: list[SidebarItem], active_id: str | None) -> None:
        self._projects.set_rows(
            items,
            active_id,
            on_click=self._on_select_project,
            on_remove=self._on_remove_project,
        )
