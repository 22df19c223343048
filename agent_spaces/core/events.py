"""State-change notification for core objects.

Each observable object owns one ``ChangeNotifier``. The rendering layer
either subscribes a handler or polls ``version``.
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

ChangeHandler = Callable[[str], None]


class ChangeNotifier:
    """Observer list plus a monotonically increasing version counter."""

    def __init__(self) -> None:
        self._handlers: list[ChangeHandler] = []
        self.version = 0

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """Register *handler*; returns a callable that unsubscribes it."""
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    def notify(self, reason: str = "") -> None:
        self.version += 1
        for handler in list(self._handlers):
            try:
                handler(reason)
            except Exception:
                # One broken view must not stop the others from refreshing.
                logger.exception("Change handler failed ({})", reason or "change")

    def clear(self) -> None:
        self._handlers.clear()
