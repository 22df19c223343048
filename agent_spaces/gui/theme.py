"""Shared GUI theme defaults."""

from __future__ import annotations

import customtkinter as ctk

FONT_SIZE = 13
FONT_FAMILY = "Segoe UI"
MONO_FAMILY = "Menlo"

COLOR_BG_APP = "#0E1116"
COLOR_BG_PANEL = "#131A22"
COLOR_BG_TERMINAL = "#0B0F14"
COLOR_BG_SIDEBAR = "#10161F"
COLOR_BORDER = "#223247"
COLOR_TEXT = "#D9E2EF"
COLOR_TEXT_MUTED = "#93A3B8"
COLOR_ACCENT = "#2E9BFF"
COLOR_STATUS_BG = "#0B1119"
COLOR_SUCCESS = "#39C172"
COLOR_DANGER = "#EA5F5F"
COLOR_IDLE = "#4A5568"

# Sidebar rows and agent tabs
COLOR_ROW_ACTIVE_BG = "#192B3E"
COLOR_ROW_NORMAL_BG = "#111927"
COLOR_ROW_HOVER_BG = "#141E2C"

DIVIDER_COLOR = COLOR_BORDER


def preset_color(color_hex: str) -> str:
    """Normalize a stored ``RRGGBB`` preset color for Tk."""
    value = (color_hex or "").strip().lstrip("#")
    if len(value) != 6:
        return COLOR_IDLE
    try:
        int(value, 16)
    except ValueError:
        return COLOR_IDLE
    return f"#{value.upper()}"


def status_color(running: bool) -> str:
    return COLOR_SUCCESS if running else COLOR_IDLE


def setup_theme(mode: str = "dark") -> None:
    """Apply global appearance settings."""
    ctk.set_appearance_mode(mode)
    ctk.set_default_color_theme("blue")
