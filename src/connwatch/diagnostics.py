"""
Bounded in-memory diagnostics log for connection troubleshooting.

Every notable connectivity step (probe start/finish, retry attempts, network
transitions) is recorded as a DiagnosticEntry. Only the most recent entries
are kept; nothing is persisted.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_DIAGNOSTICS_CAPACITY = 100


@dataclass(frozen=True)
class DiagnosticEntry:
    """One recorded connectivity step."""

    timestamp: float
    kind: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "kind": self.kind, "details": dict(self.details)}


class ConnectionDiagnostics:
    """Ring buffer of the most recent diagnostic entries."""

    def __init__(self, capacity: int = DEFAULT_DIAGNOSTICS_CAPACITY, clock: Callable[[], float] = time.time):
        if capacity < 1:
            raise ValueError(f"capacity must be positive (got {capacity})")
        self.capacity = capacity
        self._clock = clock
        self._entries: Deque[DiagnosticEntry] = deque(maxlen=capacity)

    def record(self, kind: str, **details: Any) -> DiagnosticEntry:
        """Append an entry, evicting the oldest one when full."""
        entry = DiagnosticEntry(timestamp=self._clock(), kind=kind, details=details)
        self._entries.append(entry)
        logger.debug("[%s] %s", kind, details)
        return entry

    def entries(self, kind: Optional[str] = None) -> List[DiagnosticEntry]:
        """Return recorded entries oldest first, optionally filtered by kind."""
        if kind is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.kind == kind]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["ConnectionDiagnostics", "DiagnosticEntry", "DEFAULT_DIAGNOSTICS_CAPACITY"]
