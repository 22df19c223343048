"""New workspace dialog."""

from __future__ import annotations

from pathlib import Path
from tkinter import filedialog
from typing import Callable

import customtkinter as ctk

from agent_spaces.gui import theme


class WorkspaceDialog(ctk.CTkToplevel):
    """Pick a root folder and an optional display name.

    Usage::

        WorkspaceDialog(root, on_save=lambda path, name: ...)
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        on_save: Callable[[str, str | None], None] | None = None,
    ) -> None:
        super().__init__(master)
        self._on_save = on_save

        self.title("New Workspace")
        self.geometry("460x220")
        self.resizable(False, False)
        self.transient(master)
        self.grab_set()
        self.configure(fg_color=theme.COLOR_BG_APP)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self,
            text="New Workspace",
            font=(theme.FONT_FAMILY, 15, "bold"),
            text_color=theme.COLOR_TEXT,
        ).grid(row=0, column=0, sticky="ew", padx=20, pady=(20, 12))

        form = ctk.CTkFrame(self, fg_color="transparent")
        form.grid(row=1, column=0, sticky="ew", padx=20)
        form.grid_columnconfigure(1, weight=1)

        # Root folder
        ctk.CTkLabel(form, text="Folder *", anchor="w", font=(theme.FONT_FAMILY, 12),
                     text_color=theme.COLOR_TEXT).grid(row=0, column=0, sticky="w", pady=(0, 4))
        folder_row = ctk.CTkFrame(form, fg_color="transparent")
        folder_row.grid(row=0, column=1, sticky="ew", padx=(8, 0), pady=(0, 8))
        folder_row.grid_columnconfigure(0, weight=1)
        self._path_entry = ctk.CTkEntry(folder_row, height=30, font=(theme.FONT_FAMILY, 12))
        self._path_entry.grid(row=0, column=0, sticky="ew")
        ctk.CTkButton(
            folder_row, text="Browse", width=70, height=30,
            command=self._browse,
        ).grid(row=0, column=1, sticky="e", padx=(4, 0))

        # Name
        ctk.CTkLabel(form, text="Name", anchor="w", font=(theme.FONT_FAMILY, 12),
                     text_color=theme.COLOR_TEXT).grid(row=1, column=0, sticky="w", pady=(0, 4))
        self._name_entry = ctk.CTkEntry(form, height=30, font=(theme.FONT_FAMILY, 12),
                                        placeholder_text="defaults to the folder name")
        self._name_entry.grid(row=1, column=1, sticky="ew", padx=(8, 0), pady=(0, 8))

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=2, column=0, sticky="ew", padx=20, pady=(12, 20))
        actions.grid_columnconfigure(0, weight=1)
        ctk.CTkButton(actions, text="Cancel", width=90, command=self.destroy).grid(
            row=0, column=1, sticky="e", padx=(0, 8)
        )
        ctk.CTkButton(
            actions, text="Create", width=100,
            fg_color=theme.COLOR_ACCENT,
            command=self._save,
        ).grid(row=0, column=2, sticky="e")

        self.bind("<Escape>", lambda _: self.destroy())
        self.bind("<Return>", lambda _: self._save())
        self._path_entry.focus_set()

    def _browse(self) -> None:
        current = self._path_entry.get().strip()
        selected = filedialog.askdirectory(initialdir=current or str(Path.home()), parent=self)
        if selected:
            self._path_entry.delete(0, "end")
            self._path_entry.insert(0, selected)

    def _save(self) -> None:
        raw = self._path_entry.get().strip()
        path = Path(raw).expanduser() if raw else None
        if path is None or not path.is_dir():
            self._path_entry.configure(border_color=theme.COLOR_DANGER)
            return
        name = self._name_entry.get().strip() or None
        if self._on_save:
            self._on_save(str(path.resolve()), name)
        self.destroy()


def ask_project_folder(master: ctk.CTkBaseClass, initial_dir: str | None = None) -> str | None:
    """Folder picker used by "add project"."""
    selected = filedialog.askdirectory(
        title="Add project folder",
        initialdir=initial_dir or str(Path.home()),
        parent=master,
    )
    return selected or None
