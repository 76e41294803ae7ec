"""Synchronous listener list for reasoning bank events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

EventListener = Callable[[dict[str, Any]], None]

TRAJECTORY_COMPLETED = "trajectory_completed"
MEMORY_CONSOLIDATED = "memory_consolidated"
PATTERN_EVOLVED = "pattern_evolved"

logger = logging.getLogger("rb.events")


class EventBus:
    """Dispatches events to every listener in registration order.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the event.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    def subscribe(self, listener: EventListener) -> None:
        """Register a callback for all events."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Remove a callback; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event_type: str, **payload: Any) -> None:
        """Emit an event to all listeners."""
        event = {"type": event_type, **payload}
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener failed for %s", event_type)

    def __len__(self) -> int:
        return len(self._listeners)
