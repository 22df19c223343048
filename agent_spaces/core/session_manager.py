"""Session management: the ordered set of live agents for one workspace.

Pure Python, no tkinter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from loguru import logger

from agent_spaces.core.agent_session import AgentSession, SessionTimings
from agent_spaces.core.events import ChangeNotifier
from agent_spaces.core.scheduling import Scheduler
from agent_spaces.core.terminal import TerminalFactory
from agent_spaces.utils.helpers import home_dir


class LayoutMode(str, Enum):
    SINGLE = "single"
    SPLIT = "split"


@dataclass(frozen=True)
class Layout:
    """How the terminal area is divided. ``widths`` is empty in SINGLE mode."""

    mode: LayoutMode
    widths: tuple[float, ...] = ()


class SessionManager:
    """Create, remove, select and lay out agent sessions."""

    def __init__(
        self,
        terminal_factory: TerminalFactory,
        scheduler: Scheduler,
        timings: SessionTimings | None = None,
        home_directory: str | None = None,
    ) -> None:
        self._terminal_factory = terminal_factory
        self._scheduler = scheduler
        self._timings = timings or SessionTimings()
        self._home = home_directory
        self._sessions: list[AgentSession] = []
        self._selected: AgentSession | None = None
        self.counter = 1
        self.selection_changes = 0
        self.changes = ChangeNotifier()

    @property
    def sessions(self) -> tuple[AgentSession, ...]:
        return tuple(self._sessions)

    @property
    def selected(self) -> AgentSession | None:
        return self._selected

    @property
    def selected_id(self) -> str | None:
        return self._selected.id if self._selected is not None else None

    @property
    def focus_sink(self) -> Callable[[str], None]:
        """Callable handed to panes so a pane can request selection."""
        return self.select_session

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> AgentSession | None:
        return next((s for s in self._sessions if s.id == session_id), None)

    def index_of(self, session_id: str) -> int:
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                return index
        return -1

    # ------------------------------------------------------------------ #
    # Collection                                                           #
    # ------------------------------------------------------------------ #

    def add_session(self, working_directory: str | None = None) -> AgentSession:
        """Append a new unlaunched session and select it."""
        session = AgentSession(
            name=f"Agent {self.counter}",
            working_directory=working_directory or self._home_directory(),
            terminal_factory=self._terminal_factory,
            scheduler=self._scheduler,
            timings=self._timings,
        )
        self.counter += 1
        self._sessions.append(session)
        logger.debug("[sessions] added {} in {}", session.name, session.working_directory)
        self._set_selected(session)
        self.changes.notify("sessions")
        return session

    def remove_session(self, session_id: str) -> None:
        session = self.get(session_id)
        if session is None:
            return
        was_selected = session is self._selected
        session.destroy()
        self._sessions.remove(session)
        logger.debug("[sessions] removed {}", session.name)
        if was_selected:
            replacement = self._sessions[-1] if self._sessions else None
            self._set_selected(replacement)
            if replacement is not None and replacement.has_launched:
                replacement.focus_request()
        self.changes.notify("sessions")

    def reset(self, working_directory: str | None = None) -> AgentSession:
        """Tear everything down and start over with one fresh session."""
        self._destroy_all()
        self.counter = 1
        return self.add_session(working_directory)

    def shutdown(self) -> None:
        """Destroy every session without creating a replacement."""
        if not self._sessions and self._selected is None:
            return
        self._destroy_all()
        self.changes.notify("sessions")

    def set_working_directory(self, path: str) -> None:
        for session in self._sessions:
            session.working_directory = path

    # ------------------------------------------------------------------ #
    # Selection                                                            #
    # ------------------------------------------------------------------ #

    def select_session(self, session_id: str) -> None:
        session = self.get(session_id)
        if session is None:
            return
        if session is self._selected:
            session.focus_request()
            return
        self._set_selected(session)
        if session.has_launched:
            session.focus_request()

    def select_next(self) -> None:
        self._step(1)

    def select_previous(self) -> None:
        self._step(-1)

    def _step(self, delta: int) -> None:
        if not self._sessions:
            return
        if self._selected is None:
            target = self._sessions[0]
        else:
            index = self._sessions.index(self._selected)
            target = self._sessions[(index + delta) % len(self._sessions)]
        self.select_session(target.id)

    # ------------------------------------------------------------------ #
    # Layout                                                               #
    # ------------------------------------------------------------------ #

    def layout(self, available_width: float, divider_width: float = 1.0) -> Layout:
        count = len(self._sessions)
        if count <= 1:
            return Layout(LayoutMode.SINGLE)
        usable = available_width - divider_width * (count - 1)
        width = max(0.0, usable / count)
        return Layout(LayoutMode.SPLIT, tuple(width for _ in range(count)))

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _home_directory(self) -> str:
        return self._home or home_dir()

    def _set_selected(self, session: AgentSession | None) -> None:
        if session is self._selected:
            return
        self._selected = session
        self.selection_changes += 1
        self.changes.notify("selection")

    def _destroy_all(self) -> None:
        for session in self._sessions:
            session.destroy()
        self._sessions.clear()
        self._set_selected(None)
