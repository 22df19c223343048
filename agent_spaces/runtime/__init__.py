"""PTY-level runtime for agent sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .backend import PTYBackend, build_backend
from .terminal import Dispatch, PtyTerminal, login_args

if TYPE_CHECKING:
    from agent_spaces.config.schema import TerminalConfig
    from agent_spaces.core.terminal import TerminalFactory


def make_terminal_factory(cfg: "TerminalConfig", dispatch: Dispatch | None = None) -> "TerminalFactory":
    """Return a factory building ``PtyTerminal`` instances sized from *cfg*."""

    def _factory() -> PtyTerminal:
        return PtyTerminal(cols=cfg.cols, rows=cfg.rows, scrollback=cfg.scrollback, dispatch=dispatch)

    return _factory


__all__ = [
    "Dispatch",
    "PTYBackend",
    "PtyTerminal",
    "build_backend",
    "login_args",
    "make_terminal_factory",
]
