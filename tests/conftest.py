"""Shared test fixtures for agent-spaces."""

from __future__ import annotations

from typing import Callable

import pytest

from agent_spaces.core.agent_session import SessionTimings
from agent_spaces.core.session_manager import SessionManager
from agent_spaces.session.workspace_store import WorkspaceStore


class FakeTerminal:
    """Records every call the core makes on a terminal handle."""

    def __init__(self, fail_start: Exception | None = None) -> None:
        self.start_calls: list[tuple[str, str]] = []
        self.sent: list[str] = []
        self.focus_requests = 0
        self.closed = False
        self._running = False
        self._fail_start = fail_start
        self._handlers: list[Callable[[bool], None]] = []

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, executable: str, argv0: str) -> None:
        self.start_calls.append((executable, argv0))
        if self._fail_start is not None:
            raise self._fail_start
        self.set_running(True)

    def send(self, text: str) -> None:
        self.sent.append(text)

    def request_focus(self) -> None:
        self.focus_requests += 1

    def subscribe_running(self, handler: Callable[[bool], None]) -> Callable[[], None]:
        self._handlers.append(handler)
        return lambda: self._handlers.remove(handler) if handler in self._handlers else None

    def close(self) -> None:
        self.closed = True
        self._running = False

    def set_running(self, running: bool) -> None:
        self._running = running
        for handler in list(self._handlers):
            handler(running)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)


class FakeTerminalFactory:
    def __init__(self) -> None:
        self.created: list[FakeTerminal] = []
        self.fail_start: Exception | None = None

    def __call__(self) -> FakeTerminal:
        terminal = FakeTerminal(fail_start=self.fail_start)
        self.created.append(terminal)
        return terminal


class ManualScheduler:
    """Queues deferred callbacks; tests drive time explicitly."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = 0

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> None:
        self._seq += 1
        self._queue.append((self.now + delay_s, self._seq, fn))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, seconds: float) -> None:
        """Run every callback due within *seconds*, including ones scheduled meanwhile."""
        target = self.now + seconds
        while True:
            due = sorted(item for item in self._queue if item[0] <= target)
            if not due:
                break
            item = due[0]
            self._queue.remove(item)
            self.now = item[0]
            item[2]()
        self.now = target

    def run_all(self) -> None:
        while self._queue:
            self.advance(max(when for when, _, _ in self._queue) - self.now)


@pytest.fixture
def timings() -> SessionTimings:
    return SessionTimings(settle_delay_s=0.3, launch_delay_s=0.3, focus_delay_s=0.0, default_shell="/bin/zsh")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def terminal_factory() -> FakeTerminalFactory:
    return FakeTerminalFactory()


@pytest.fixture
def manager(terminal_factory, scheduler, timings, tmp_path) -> SessionManager:
    home = tmp_path / "home"
    home.mkdir()
    return SessionManager(terminal_factory, scheduler, timings, home_directory=str(home))


@pytest.fixture
def store(tmp_path) -> WorkspaceStore:
    return WorkspaceStore(tmp_path / "data")


@pytest.fixture
def project_dirs(tmp_path):
    """Three existing folders usable as workspace roots and projects."""
    paths = []
    for name in ("alpha", "beta", "gamma"):
        path = tmp_path / "src" / name
        path.mkdir(parents=True)
        paths.append(str(path))
    return paths
