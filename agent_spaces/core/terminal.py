"""Contract between the core and a terminal-emulation instance."""

from __future__ import annotations

from typing import Callable, Protocol

RunningHandler = Callable[[bool], None]


class TerminalHandle(Protocol):
    """One terminal-emulation instance hosting one interactive process.

    ``start`` is called at most once per instance; ``AgentSession`` owns that
    guarantee, not the implementation.
    """

    @property
    def is_running(self) -> bool:
        """True while the spawned process is alive."""

    def start(self, executable: str, argv0: str) -> None:
        """Spawn the interactive process."""

    def send(self, text: str) -> None:
        """Inject input as if typed (include a trailing newline for Enter)."""

    def request_focus(self) -> None:
        """Ask the host to route keyboard input to this instance."""

    def subscribe_running(self, handler: RunningHandler) -> Callable[[], None]:
        """Observe ``is_running`` transitions; returns an unsubscribe callable."""

    def close(self) -> None:
        """Release the instance and terminate its process without blocking."""


TerminalFactory = Callable[[], TerminalHandle]
