"""Pointer-driven focus policies for agent panes."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from loguru import logger

if TYPE_CHECKING:
    from agent_spaces.core.agent_session import AgentSession


class FocusMode(str, Enum):
    CLICK = "click"
    HOVER = "hover"

    @property
    def title(self) -> str:
        return "Click to focus" if self is FocusMode.CLICK else "Hover to focus"


FocusSink = Callable[[str], None]
SessionResolver = Callable[[str], Optional["AgentSession"]]


class FocusCoordinator:
    """Turn pane pointer events into selection plus keyboard focus.

    ``sink`` is normally ``SessionManager.select_session``; ``resolve``
    maps an id back to its session so the pane can grab the keyboard.
    """

    def __init__(
        self,
        sink: FocusSink,
        resolve: SessionResolver,
        mode: FocusMode = FocusMode.CLICK,
    ) -> None:
        self._sink = sink
        self._resolve = resolve
        self._mode = FocusMode(mode)
        self._hovered: str | None = None

    @property
    def mode(self) -> FocusMode:
        return self._mode

    @mode.setter
    def mode(self, value: FocusMode) -> None:
        self._mode = FocusMode(value)
        self._hovered = None

    def pointer_pressed(self, session_id: str) -> None:
        self._claim(session_id)

    def pointer_entered(self, session_id: str) -> None:
        if self._mode is not FocusMode.HOVER:
            return
        if self._hovered == session_id:
            return
        self._hovered = session_id
        self._claim(session_id)

    def pointer_left(self, session_id: str) -> None:
        if self._hovered == session_id:
            self._hovered = None

    def _claim(self, session_id: str) -> None:
        self._sink(session_id)
        session = self._resolve(session_id)
        if session is None:
            logger.debug("[focus] no session for {}", session_id)
            return
        session.focus_request()
