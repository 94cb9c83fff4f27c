"""Minimal publish/subscribe primitive for change notification."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class Signal(Generic[T]):
    """Deliver values to subscribed listeners in subscription order.

    Listener failures are logged and never propagate to the emitter.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, value: T) -> None:
        """Deliver a value to every listener."""
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                _logger.exception("Listener failed for signal %s", self.name)

    def __len__(self) -> int:
        return len(self._listeners)
