"""One agent session: a terminal handle plus the command that starts it."""

from __future__ import annotations

import os
import shlex
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from loguru import logger

from agent_spaces.core.events import ChangeNotifier
from agent_spaces.core.scheduling import Scheduler
from agent_spaces.core.terminal import TerminalFactory, TerminalHandle
from agent_spaces.utils.helpers import home_dir

if TYPE_CHECKING:
    from agent_spaces.config.schema import TerminalConfig

DEFAULT_SHELL = "/bin/zsh"


@dataclass(frozen=True)
class SessionTimings:
    """Delays used when driving a freshly spawned shell.

    The shell gets ``settle_delay_s`` before the ``cd`` line is typed and a
    further ``launch_delay_s`` before the launch command.
    """

    settle_delay_s: float = 0.3
    launch_delay_s: float = 0.3
    focus_delay_s: float = 0.0
    default_shell: str = DEFAULT_SHELL

    @classmethod
    def from_config(cls, cfg: "TerminalConfig") -> "SessionTimings":
        return cls(
            settle_delay_s=cfg.settle_delay_s,
            launch_delay_s=cfg.launch_delay_s,
            focus_delay_s=cfg.focus_delay_s,
            default_shell=cfg.default_shell or DEFAULT_SHELL,
        )


def resolve_shell(default_shell: str = DEFAULT_SHELL) -> tuple[str, str]:
    """Return ``(executable, argv0)`` for the user's login shell."""
    shell = os.environ.get("SHELL", "").strip() or default_shell
    return shell, "-" + os.path.basename(shell)


class AgentSession:
    """Manage one interactive process and its launch metadata.

    All attributes are mutated from the control thread only. The process
    runs concurrently and streams output into the terminal handle.
    """

    def __init__(
        self,
        name: str,
        working_directory: str,
        *,
        terminal_factory: TerminalFactory,
        scheduler: Scheduler,
        timings: SessionTimings | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid.uuid4().hex
        self._name = name
        self._working_directory = working_directory
        self.is_running = False
        self.has_launched = False
        self.launch_command = ""
        self.start_error: str | None = None
        self.changes = ChangeNotifier()

        self._terminal_factory = terminal_factory
        self._scheduler = scheduler
        self._timings = timings or SessionTimings()
        self._terminal: Optional[TerminalHandle] = None
        self._unsubscribe_running: Callable[[], None] | None = None
        self._started = False
        self._destroyed = False

    def __repr__(self) -> str:
        return f"AgentSession(id={self.id!r}, name={self._name!r}, launched={self.has_launched})"

    # ------------------------------------------------------------------ #
    # Metadata                                                             #
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if value == self._name:
            return
        self._name = value
        self.changes.notify("name")

    @property
    def working_directory(self) -> str:
        return self._working_directory

    @working_directory.setter
    def working_directory(self, value: str) -> None:
        # After start this only changes what the UI shows; the live shell is not re-cd'd.
        if value == self._working_directory:
            return
        self._working_directory = value
        self.changes.notify("working_directory")

    @property
    def terminal(self) -> TerminalHandle | None:
        return self._terminal

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def is_process_alive(self) -> bool:
        """Running state reported by the terminal itself (status dots)."""
        terminal = self._terminal
        return bool(terminal is not None and terminal.is_running)

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    def launch(self, command: str) -> None:
        """Record the chosen command. The process is started separately."""
        if self.has_launched or self._destroyed:
            return
        self.launch_command = command
        self.has_launched = True
        self.is_running = True
        logger.info("[session] {} launched with {!r}", self._name, command or "<shell>")
        self.changes.notify("launched")

    def get_or_create_terminal(self) -> TerminalHandle:
        """Return this session's terminal handle, creating it on first use."""
        if self._destroyed:
            raise RuntimeError(f"Agent session {self.id} has been destroyed")
        if self._terminal is None:
            terminal = self._terminal_factory()
            self._terminal = terminal
            self._unsubscribe_running = terminal.subscribe_running(self._on_running_changed)
        return self._terminal

    def start_if_needed(self) -> bool:
        """Start the shell process once. Returns True only on the starting call."""
        if self._started or self._destroyed:
            return False
        terminal = self.get_or_create_terminal()
        self._started = True

        shell, argv0 = resolve_shell(self._timings.default_shell)
        start_dir = self._resolve_start_dir()
        try:
            terminal.start(shell, argv0)
        except Exception as exc:
            # One attempt per session; the status indicator stays "not running".
            self.start_error = str(exc)
            logger.error("[session] {} failed to start {}: {}", self._name, shell, exc)
            self.changes.notify("start_failed")
            return True

        logger.info("[session] {} started {} in {}", self._name, shell, start_dir)
        self._scheduler.call_later(
            self._timings.settle_delay_s,
            lambda: self._inject_cd(start_dir),
        )
        return True

    def focus_request(self) -> None:
        """Ask the terminal to take keyboard focus on the next loop turn."""
        if self._terminal is None:
            return
        self._scheduler.call_later(self._timings.focus_delay_s, self._deliver_focus)

    def destroy(self) -> None:
        """Detach and close the terminal handle. Safe to call repeatedly."""
        if self._destroyed:
            return
        self._destroyed = True
        terminal = self._terminal
        self._terminal = None
        if self._unsubscribe_running is not None:
            self._unsubscribe_running()
            self._unsubscribe_running = None
        if terminal is not None:
            try:
                terminal.close()
            except Exception as exc:
                logger.warning("[session] {} terminal close failed: {}", self._name, exc)
        logger.debug("[session] {} destroyed", self._name)
        self.changes.notify("destroyed")

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _resolve_start_dir(self) -> str:
        candidate = self._working_directory
        if candidate and Path(candidate).expanduser().exists():
            return str(Path(candidate).expanduser())
        return home_dir()

    def _inject_cd(self, start_dir: str) -> None:
        terminal = self._terminal
        if terminal is None:
            return
        terminal.send(f"cd {shlex.quote(start_dir)} && clear\n")
        if self.launch_command:
            self._scheduler.call_later(self._timings.launch_delay_s, self._inject_launch_command)

    def _inject_launch_command(self) -> None:
        terminal = self._terminal
        if terminal is None or not self.launch_command:
            return
        terminal.send(self.launch_command + "\n")

    def _deliver_focus(self) -> None:
        terminal = self._terminal
        if terminal is not None:
            terminal.request_focus()

    def _on_running_changed(self, running: bool) -> None:
        logger.debug("[session] {} process running={}", self._name, running)
        self.changes.notify("process")
