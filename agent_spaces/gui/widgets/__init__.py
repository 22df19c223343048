"""Reusable GUI widgets."""

from agent_spaces.gui.widgets.status_bar import StatusBar

__all__ = ["StatusBar"]
