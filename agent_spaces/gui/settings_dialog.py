"""Settings window: focus policy and launcher model presets."""

from __future__ import annotations

import re
from dataclasses import replace
from tkinter import messagebox
from typing import TYPE_CHECKING, Callable

import customtkinter as ctk

from agent_spaces.core.focus import FocusMode
from agent_spaces.gui import theme
from agent_spaces.session.workspace_store import ModelConfig

if TYPE_CHECKING:
    from agent_spaces.core.controller import WorkspaceController

_HEX_RE = re.compile(r"[0-9A-F]{6}")


class ModelEditorDialog(ctk.CTkToplevel):
    """Create or edit one model preset."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        model: ModelConfig | None = None,
        on_save: Callable[[ModelConfig], None] | None = None,
    ) -> None:
        super().__init__(master)
        self._model = model
        self._on_save = on_save
        editing = model is not None

        title_text = "Edit Model" if editing else "New Model"
        self.title(title_text)
        self.geometry("440x300")
        self.resizable(False, False)
        self.transient(master)
        self.grab_set()
        self.configure(fg_color=theme.COLOR_BG_APP)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self,
            text=title_text,
            font=(theme.FONT_FAMILY, 15, "bold"),
            text_color=theme.COLOR_TEXT,
        ).grid(row=0, column=0, sticky="ew", padx=20, pady=(20, 12))

        form = ctk.CTkFrame(self, fg_color="transparent")
        form.grid(row=1, column=0, sticky="ew", padx=20)
        form.grid_columnconfigure(1, weight=1)

        self._name = self._field(form, 0, "Name *", model.name if model else "")
        self._new = self._field(form, 1, "New command", model.new_command if model else "")
        self._resume = self._field(form, 2, "Resume command", model.resume_command if model else "")
        self._color = self._field(form, 3, "Color (RRGGBB)", model.color_hex if model else "808080")

        ctk.CTkLabel(
            self,
            text="Leave both commands empty for a plain shell preset.",
            anchor="w",
            font=(theme.FONT_FAMILY, 11),
            text_color=theme.COLOR_TEXT_MUTED,
        ).grid(row=2, column=0, sticky="ew", padx=20, pady=(4, 0))

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=3, column=0, sticky="ew", padx=20, pady=(12, 20))
        actions.grid_columnconfigure(0, weight=1)
        ctk.CTkButton(actions, text="Cancel", width=90, command=self.destroy).grid(
            row=0, column=1, sticky="e", padx=(0, 8)
        )
        ctk.CTkButton(
            actions, text="Save" if editing else "Add", width=100,
            fg_color=theme.COLOR_ACCENT,
            command=self._save,
        ).grid(row=0, column=2, sticky="e")

        self.bind("<Escape>", lambda _: self.destroy())
        self.bind("<Return>", lambda _: self._save())
        self._name.focus_set()

    @staticmethod
    def _field(form: ctk.CTkFrame, row: int, label: str, value: str) -> ctk.CTkEntry:
        ctk.CTkLabel(form, text=label, anchor="w", font=(theme.FONT_FAMILY, 12),
                     text_color=theme.COLOR_TEXT).grid(row=row, column=0, sticky="w", pady=(0, 4))
        entry = ctk.CTkEntry(form, height=30, font=(theme.FONT_FAMILY, 12))
        entry.grid(row=row, column=1, sticky="ew", padx=(8, 0), pady=(0, 8))
        if value:
            entry.insert(0, value)
        return entry

    def _save(self) -> None:
        name = self._name.get().strip()
        if not name:
            self._name.configure(border_color=theme.COLOR_DANGER)
            return
        color = self._color.get().strip().lstrip("#").upper() or "808080"
        if not _HEX_RE.fullmatch(color):
            self._color.configure(border_color=theme.COLOR_DANGER)
            return
        fields = {
            "name": name,
            "new_command": self._new.get().strip(),
            "resume_command": self._resume.get().strip(),
            "color_hex": color,
        }
        model = replace(self._model, **fields) if self._model else ModelConfig(**fields)
        if self._on_save:
            self._on_save(model)
        self.destroy()


class SettingsDialog(ctk.CTkToplevel):
    """Focus mode switch plus the ordered model preset list."""

    def __init__(self, master: ctk.CTkBaseClass, controller: "WorkspaceController") -> None:
        super().__init__(master)
        self._controller = controller

        self.title("Settings")
        self.geometry("620x520")
        self.transient(master)
        self.configure(fg_color=theme.COLOR_BG_APP)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        ctk.CTkLabel(
            self,
            text="Settings",
            anchor="w",
            font=ctk.CTkFont(size=15, weight="bold"),
            text_color=theme.COLOR_TEXT,
        ).grid(row=0, column=0, sticky="w", padx=20, pady=(16, 8))

        # --- Focus mode ---
        focus_row = ctk.CTkFrame(self, fg_color="transparent")
        focus_row.grid(row=1, column=0, sticky="ew", padx=20, pady=(0, 12))
        ctk.CTkLabel(focus_row, text="Agent focus", font=(theme.FONT_FAMILY, 13),
                     text_color=theme.COLOR_TEXT).grid(row=0, column=0, sticky="w", padx=(0, 12))
        self._titles = {mode.title: mode for mode in FocusMode}
        self._focus_switch = ctk.CTkSegmentedButton(
            focus_row,
            values=list(self._titles),
            command=self._on_focus_mode,
        )
        self._focus_switch.set(controller.focus_mode.title)
        self._focus_switch.grid(row=0, column=1, sticky="w")

        # --- Model header ---
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.grid(row=2, column=0, sticky="ew", padx=20)
        header.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(header, text="Launcher models", anchor="w",
                     font=(theme.FONT_FAMILY, 13, "bold"),
                     text_color=theme.COLOR_TEXT).grid(row=0, column=0, sticky="w")
        ctk.CTkButton(header, text="Reset", width=70, height=26, fg_color="transparent",
                      border_width=1, border_color=theme.COLOR_BORDER,
                      command=self._reset_models).grid(row=0, column=1, padx=(0, 6))
        ctk.CTkButton(header, text="+ Add", width=70, height=26, fg_color=theme.COLOR_ACCENT,
                      command=self._add_model).grid(row=0, column=2)

        self._list = ctk.CTkScrollableFrame(
            self,
            fg_color=theme.COLOR_BG_PANEL,
            scrollbar_button_color=theme.COLOR_BORDER,
        )
        self._list.grid(row=3, column=0, sticky="nsew", padx=20, pady=(8, 20))
        self._list.grid_columnconfigure(1, weight=1)

        self._unsubscribe = controller.store.changes.subscribe(self._on_store_changed)
        self.bind("<Escape>", lambda _: self.destroy())
        self._render_models()

    def destroy(self) -> None:
        self._unsubscribe()
        super().destroy()

    def _on_store_changed(self, reason: str) -> None:
        if reason == "models":
            self._render_models()

    def _render_models(self) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        models = self._controller.model_configs
        last = len(models) - 1
        for row, model in enumerate(models):
            ctk.CTkLabel(self._list, text=model.shortcut or "-", width=20,
                         text_color=theme.COLOR_TEXT_MUTED).grid(row=row, column=0, padx=(8, 4), pady=3)
            commands = " / ".join(c for c in (model.new_command, model.resume_command) if c) or "shell"
            ctk.CTkLabel(
                self._list,
                text=f"●  {model.name}   {commands}",
                anchor="w",
                text_color=theme.preset_color(model.color_hex),
            ).grid(row=row, column=1, sticky="ew")

            buttons = ctk.CTkFrame(self._list, fg_color="transparent")
            buttons.grid(row=row, column=2, sticky="e", padx=4)
            up = ctk.CTkButton(buttons, text="↑", width=26, height=24,
                               command=lambda i=row: self._controller.move_model([i], i - 1))
            up.grid(row=0, column=0, padx=1)
            down = ctk.CTkButton(buttons, text="↓", width=26, height=24,
                                 command=lambda i=row: self._controller.move_model([i], i + 2))
            down.grid(row=0, column=1, padx=1)
            if row == 0:
                up.configure(state="disabled")
            if row == last:
                down.configure(state="disabled")
            ctk.CTkButton(buttons, text="Edit", width=44, height=24,
                          command=lambda m=model: self._edit_model(m)).grid(row=0, column=2, padx=1)
            ctk.CTkButton(buttons, text="×", width=26, height=24, fg_color=theme.COLOR_DANGER,
                          command=lambda m=model: self._delete_model(m)).grid(row=0, column=3, padx=1)

    def _on_focus_mode(self, value: str) -> None:
        mode = self._titles.get(value)
        if mode is not None:
            self._controller.focus_mode = mode

    def _add_model(self) -> None:
        ModelEditorDialog(self, on_save=self._controller.add_model)

    def _edit_model(self, model: ModelConfig) -> None:
        ModelEditorDialog(self, model=model, on_save=self._controller.update_model)

    def _delete_model(self, model: ModelConfig) -> None:
        if messagebox.askyesno("Delete model", f"Delete preset '{model.name}'?", parent=self):
            self._controller.delete_model(model.id)

    def _reset_models(self) -> None:
        if messagebox.askyesno("Reset models", "Replace all presets with the defaults?", parent=self):
            self._controller.reset_models()
