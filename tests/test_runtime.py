"""PtyTerminal against scripted backends, plus real shell runs."""

from __future__ import annotations

import errno
import os
import queue
import threading
import time

import pytest

from agent_spaces.config.schema import TerminalConfig
from agent_spaces.runtime import PtyTerminal, login_args, make_terminal_factory


class _ScriptedBackend:
    def __init__(self) -> None:
        self.output: "queue.Queue[str]" = queue.Queue()
        self.written: list[str] = []
        self.resizes: list[tuple[int, int]] = []
        self.alive = True
        self.closed = threading.Event()

    def read(self) -> str:
        try:
            return self.output.get(timeout=0.01)
        except queue.Empty:
            return ""

    def write(self, data: str) -> None:
        self.written.append(data)

    def resize(self, cols: int, rows: int) -> None:
        self.resizes.append((cols, rows))

    def is_alive(self) -> bool:
        return self.alive

    def close(self) -> None:
        self.alive = False
        self.closed.set()


@pytest.fixture
def backend() -> _ScriptedBackend:
    return _ScriptedBackend()


@pytest.fixture
def spawned() -> list[tuple]:
    return []


@pytest.fixture
def terminal(backend, spawned):
    def factory(executable, args, cols, rows):
        spawned.append((executable, list(args), cols, rows))
        return backend

    term = PtyTerminal(cols=40, rows=10, scrollback=100, backend_factory=factory)
    yield term
    term.close()


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_login_args():
    expected = [] if os.name == "nt" else ["-l"]
    assert login_args("/bin/zsh", "-zsh") == expected
    assert login_args("/bin/zsh", "zsh") == []


def test_start_spawns_with_configured_size(terminal, spawned):
    terminal.start("/bin/zsh", "-zsh")

    assert terminal.is_running
    executable, args, cols, rows = spawned[0]
    assert (executable, cols, rows) == ("/bin/zsh", 40, 10)
    assert args == login_args("/bin/zsh", "-zsh")


def test_start_twice_raises(terminal):
    terminal.start("/bin/sh", "sh")
    with pytest.raises(RuntimeError):
        terminal.start("/bin/sh", "sh")


def test_send_before_start_raises(terminal):
    with pytest.raises(RuntimeError):
        terminal.send("ls\n")


def test_send_writes_to_backend(terminal, backend):
    terminal.start("/bin/sh", "sh")
    terminal.send("echo hi\n")
    assert backend.written == ["echo hi\n"]


def test_output_reaches_screen_and_listeners(terminal, backend):
    changed = threading.Event()
    terminal.subscribe_output(changed.set)
    terminal.start("/bin/sh", "sh")

    backend.output.put("hello\nworld\n")

    assert changed.wait(5)
    assert _wait_for(lambda: terminal.snapshot() == "hello\nworld")


def test_process_exit_reports_not_running(terminal, backend):
    states: list[bool] = []
    exited = threading.Event()

    def on_running(running: bool) -> None:
        states.append(running)
        if not running:
            exited.set()

    terminal.subscribe_running(on_running)
    terminal.start("/bin/sh", "sh")
    backend.alive = False

    assert exited.wait(5)
    assert states == [True, False]
    assert not terminal.is_running

    terminal.send("ignored\n")
    assert backend.written == []


def test_close_kills_backend_and_emits_once(terminal, backend):
    states: list[bool] = []
    terminal.subscribe_running(states.append)
    terminal.start("/bin/sh", "sh")

    terminal.close()
    terminal.close()

    assert backend.closed.wait(5)
    assert terminal.is_closed
    assert states == [True, False]
    with pytest.raises(RuntimeError):
        terminal.start("/bin/sh", "sh")


def test_resize_forwards_to_running_backend(terminal, backend):
    terminal.resize(40, 10)
    terminal.start("/bin/sh", "sh")

    terminal.resize(100, 30)
    terminal.resize(100, 30)

    assert backend.resizes == [(100, 30)]
    assert (terminal.cols, terminal.rows) == (100, 30)


def test_request_focus_calls_handler(terminal):
    calls = []
    terminal.request_focus()
    terminal.set_focus_handler(lambda: calls.append(1))
    terminal.request_focus()
    assert calls == [1]


def test_dispatch_wraps_listener_calls(backend):
    dispatched = []

    def dispatch(fn):
        dispatched.append(fn)
        fn()

    term = PtyTerminal(dispatch=dispatch, backend_factory=lambda *a, **kw: backend)
    changed = threading.Event()
    term.subscribe_output(changed.set)
    term.start("/bin/sh", "sh")
    backend.output.put("x")

    assert changed.wait(5)
    assert dispatched
    term.close()


def test_factory_uses_terminal_config():
    cfg = TerminalConfig(cols=90, rows=20, scrollback=10)
    term = make_terminal_factory(cfg)()
    assert (term.cols, term.rows) == (90, 20)
    assert not term.is_running


@pytest.mark.skipif(os.name != "posix" or not os.path.exists("/bin/sh"), reason="needs a POSIX shell")
def test_real_shell_round_trip():
    pytest.importorskip("pexpect")
    term = PtyTerminal(cols=80, rows=24)
    try:
        term.start("/bin/sh", "sh")
        term.send("echo agent-spaces-$((40+2))\n")
        assert _wait_for(lambda: "agent-spaces-42" in term.snapshot(), timeout=10)
    finally:
        term.close()


class _StreamingBackend:
    """Emits output until closed; a pending read then fails like a closed pty fd."""

    def __init__(self) -> None:
        self.closed = threading.Event()
        self.fail_while_open: OSError | None = None

    def read(self) -> str:
        if self.fail_while_open is not None:
            raise self.fail_while_open
        if self.closed.wait(0.005):
            raise OSError(errno.EBADF, "Bad file descriptor")
        return "tick\n"

    def write(self, data: str) -> None:
        pass

    def resize(self, cols: int, rows: int) -> None:
        pass

    def is_alive(self) -> bool:
        return not self.closed.is_set()

    def close(self) -> None:
        self.closed.set()


@pytest.fixture
def thread_errors(monkeypatch) -> list[BaseException]:
    errors: list[BaseException] = []
    monkeypatch.setattr(threading, "excepthook", lambda args: errors.append(args.exc_value))
    return errors


def test_close_while_output_is_streaming(thread_errors):
    backend = _StreamingBackend()
    term = PtyTerminal(cols=40, rows=10, backend_factory=lambda *a, **kw: backend)
    changed = threading.Event()
    term.subscribe_output(changed.set)
    term.start("/bin/sh", "sh")
    assert changed.wait(5)
    reader = term._reader_thread

    term.close()

    assert backend.closed.wait(5)
    reader.join(5)
    assert not reader.is_alive()
    assert thread_errors == []


def test_read_error_on_open_terminal_reports_exit(thread_errors):
    backend = _StreamingBackend()
    backend.fail_while_open = OSError(errno.EIO, "Input/output error")
    term = PtyTerminal(backend_factory=lambda *a, **kw: backend)
    exited = threading.Event()
    term.subscribe_running(lambda running: exited.set() if not running else None)

    term.start("/bin/sh", "sh")

    assert exited.wait(5)
    assert not term.is_running
    assert thread_errors == []
    term.close()


@pytest.mark.skipif(os.name != "posix" or not os.path.exists("/bin/sh"), reason="needs a POSIX shell")
def test_real_shell_close_mid_stream(thread_errors):
    pytest.importorskip("pexpect")
    for _ in range(5):
        term = PtyTerminal(cols=80, rows=24)
        term.start("/bin/sh", "sh")
        term.send("yes agent-spaces-output\n")
        time.sleep(0.2)
        reader = term._reader_thread
        term.close()
        reader.join(5)
    assert thread_errors == []
