"""
In-process publish/subscribe fan-out of connection status events.

Delivery is synchronous and follows registration order. A failing listener is
logged and skipped; it never stops delivery to the others and never reaches
the publisher.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .async_helpers import safely_schedule_coroutine
from .connection_state import EventKind

logger = logging.getLogger(__name__)

StatusCallback = Callable[[Any], Any]


@dataclass(frozen=True)
class ListenerRegistration:
    """A (kind, callback) pair. Matching is by equality of both fields."""

    event_kind: EventKind
    callback: StatusCallback


class StatusBroadcaster:
    """Typed registry that fans events out to the listeners of each kind."""

    def __init__(self) -> None:
        # dict keeps insertion order and rejects duplicate registrations
        self._registrations: Dict[ListenerRegistration, None] = {}

    def subscribe(self, event_kind: EventKind, callback: StatusCallback) -> ListenerRegistration:
        """Register ``callback`` for ``event_kind``. Registering the same pair twice is a no-op."""
        registration = ListenerRegistration(EventKind(event_kind), callback)
        self._registrations.setdefault(registration, None)
        return registration

    def unsubscribe(self, event_kind: EventKind, callback: StatusCallback) -> bool:
        """Remove the registration matching both fields. Returns False when none matched."""
        registration = ListenerRegistration(EventKind(event_kind), callback)
        if registration not in self._registrations:
            return False
        del self._registrations[registration]
        return True

    def publish(self, event_kind: EventKind, payload: Any = None) -> int:
        """
        Invoke every listener registered for ``event_kind`` at call time.

        Listeners that return a coroutine have it scheduled on the running loop.

        Returns:
            Number of listeners that completed without raising
        """
        kind = EventKind(event_kind)
        listeners = [reg.callback for reg in self._registrations if reg.event_kind is kind]
        delivered = 0
        for callback in listeners:
            try:
                result = callback(payload)
                if asyncio.iscoroutine(result):
                    safely_schedule_coroutine(result)
            except Exception:
                logger.exception("Error in %s listener %r", kind.value, callback)
                continue
            delivered += 1
        return delivered

    def listener_count(self, event_kind: Optional[EventKind] = None) -> int:
        if event_kind is None:
            return len(self._registrations)
        kind = EventKind(event_kind)
        return sum(1 for reg in self._registrations if reg.event_kind is kind)

    def registrations(self) -> List[ListenerRegistration]:
        return list(self._registrations)

    def clear(self) -> None:
        """Drop every registration."""
        self._registrations.clear()


__all__ = ["ListenerRegistration", "StatusBroadcaster", "StatusCallback"]
