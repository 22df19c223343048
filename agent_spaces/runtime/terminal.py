"""PTY-backed terminal instance rendered through a pyte screen."""

from __future__ import annotations

import os
import threading
from typing import Callable, Optional

import pyte
from loguru import logger

from agent_spaces.core.terminal import RunningHandler
from agent_spaces.runtime.backend import BackendFactory, PTYBackend, build_backend

OutputHandler = Callable[[], None]
Dispatch = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


def login_args(executable: str, argv0: str) -> list[str]:
    """Arguments that reproduce a ``-name`` argv0 (login shell) request.

    pexpect and pywinpty always pass the executable path as argv0, so the
    login-shell convention is expressed through ``-l`` instead.
    """
    if os.name == "nt" or not argv0.startswith("-"):
        return []
    return ["-l"]


class PtyTerminal:
    """One interactive process plus its emulated screen.

    Output is read on a daemon thread and fed into a ``pyte.HistoryScreen``.
    Listener callbacks go through ``dispatch`` so the GUI can marshal them
    onto the Tk thread.
    """

    def __init__(
        self,
        cols: int = 120,
        rows: int = 36,
        scrollback: int = 5000,
        dispatch: Dispatch | None = None,
        backend_factory: BackendFactory = build_backend,
    ) -> None:
        self.cols = cols
        self.rows = rows
        self._dispatch = dispatch or _call_now
        self._backend_factory = backend_factory

        self._backend: Optional[PTYBackend] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._running = False
        self._closed = False
        self._render_lock = threading.Lock()
        self._screen = pyte.HistoryScreen(cols, rows, history=scrollback)
        self._screen.set_mode(pyte.modes.LNM)
        self._stream = pyte.Stream(self._screen)

        self._running_handlers: list[RunningHandler] = []
        self._output_handlers: list[OutputHandler] = []
        self._focus_handler: Callable[[], None] | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_closed(self) -> bool:
        return self._closed

    def start(self, executable: str, argv0: str) -> None:
        """Spawn *executable* and begin streaming its output."""
        if self._closed:
            raise RuntimeError("Terminal has been closed")
        if self._backend is not None:
            raise RuntimeError("Terminal already started")
        self._backend = self._backend_factory(
            executable,
            login_args(executable, argv0),
            cols=self.cols,
            rows=self.rows,
        )
        self._set_running(True)
        self._reader_thread = threading.Thread(target=self._read_loop, daemon=True)
        self._reader_thread.start()

    def send(self, text: str) -> None:
        backend = self._backend
        if backend is None:
            raise RuntimeError("Terminal is not started")
        if not self._running:
            logger.debug("[pty] dropping input for exited process")
            return
        try:
            backend.write(text)
        except OSError as exc:
            logger.warning(f"[pty] write failed: {exc}")

    def request_focus(self) -> None:
        handler = self._focus_handler
        if handler is not None:
            handler()

    def set_focus_handler(self, handler: Callable[[], None] | None) -> None:
        self._focus_handler = handler

    def subscribe_running(self, handler: RunningHandler) -> Callable[[], None]:
        self._running_handlers.append(handler)
        return lambda: self._discard(self._running_handlers, handler)

    def subscribe_output(self, handler: OutputHandler) -> Callable[[], None]:
        """Call *handler* (via dispatch) whenever the screen changes."""
        self._output_handlers.append(handler)
        return lambda: self._discard(self._output_handlers, handler)

    def snapshot(self) -> str:
        """Scrollback plus visible screen as plain text."""
        with self._render_lock:
            history = [self._history_line_to_text(line) for line in self._screen.history.top]
            display = [line.rstrip() for line in self._screen.display]
        lines = history + display
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines)

    def resize(self, cols: int, rows: int) -> None:
        if (cols, rows) == (self.cols, self.rows):
            return
        self.cols = cols
        self.rows = rows
        with self._render_lock:
            self._screen.resize(rows, cols)
        backend = self._backend
        if backend is not None and self._running:
            try:
                backend.resize(cols, rows)
            except OSError as exc:
                logger.debug(f"[pty] resize failed: {exc}")

    def close(self) -> None:
        """Stop reading and kill the process on a helper thread."""
        if self._closed:
            return
        self._closed = True
        self._output_handlers.clear()
        self._focus_handler = None
        backend = self._backend
        self._backend = None
        was_running = self._running
        self._running = False
        if backend is not None:
            threading.Thread(target=self._close_backend, args=(backend,), daemon=True).start()
        if was_running:
            self._emit_running(False)
        self._running_handlers.clear()

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _read_loop(self) -> None:
        while not self._closed:
            backend = self._backend
            if backend is None:
                break
            try:
                data = backend.read()
            except (OSError, ValueError) as exc:
                # close() shuts the fd from another thread while a read is pending.
                if not self._closed:
                    logger.warning(f"[pty] read failed: {exc}")
                break
            if data:
                self._feed(data)
                continue
            if not backend.is_alive():
                break
        if not self._closed:
            logger.info("[pty] process exited")
            self._dispatch(lambda: self._set_running(False))

    def _feed(self, data: str) -> None:
        with self._render_lock:
            try:
                self._stream.feed(data)
            except (KeyError, ValueError, IndexError) as exc:
                logger.debug(f"[pty] ignoring malformed control sequence: {exc}")
        for handler in list(self._output_handlers):
            self._dispatch(handler)

    def _set_running(self, running: bool) -> None:
        if self._running == running:
            return
        self._running = running
        self._emit_running(running)

    def _emit_running(self, running: bool) -> None:
        for handler in list(self._running_handlers):
            handler(running)

    def _history_line_to_text(self, line: object) -> str:
        if isinstance(line, dict):
            cols = self._screen.columns
            return "".join(line[x].data if x in line else " " for x in range(cols)).rstrip()
        return str(line).rstrip()

    @staticmethod
    def _close_backend(backend: PTYBackend) -> None:
        try:
            backend.close()
        except Exception as exc:
            logger.warning(f"[pty] close failed: {exc}")

    @staticmethod
    def _discard(handlers: list, handler: object) -> None:
        if handler in handlers:
            handlers.remove(handler)
