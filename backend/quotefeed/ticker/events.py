"""In-process publish/subscribe channel for engine events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from threading import Lock
from typing import Any

from .interface import EventSink

logger = logging.getLogger(__name__)

TICK = "tick"
ERROR = "error"

Handler = Callable[[Any], None]


class EventHub(EventSink):
    """EventSink that fans events out to registered handlers.

    Each engine owns its own hub, so two engines never see each other's
    events. Handlers run synchronously in registration order. A handler that
    raises is logged and the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._lock = Lock()

    def on(self, event_name: str, handler: Handler) -> None:
        """Register ``handler`` for ``event_name``."""
        with self._lock:
            self._handlers.setdefault(event_name, []).append(handler)

    def off(self, event_name: str, handler: Handler) -> None:
        """Unregister ``handler``. No-op if it was never registered."""
        with self._lock:
            handlers = self._handlers.get(event_name)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._handlers[event_name]

    def emit(self, event_name: str, payload: Any) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event_name, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %r event failed", event_name)

    def listener_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_name, ()))
