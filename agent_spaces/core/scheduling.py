"""Deferred callbacks on the control thread."""

from __future__ import annotations

from typing import Callable, Protocol


class Scheduler(Protocol):
    """Runs a callback later on the thread that owns core state.

    The GUI implementation is ``agent_spaces.gui.app.TkScheduler``.
    """

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        """Schedule *fn* to run after *delay_s* seconds."""
