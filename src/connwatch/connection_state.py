"""
Canonical connection state definitions.

This module provides the single source of truth for health states, event
kinds and the immutable records handed out to observers, so every other
module imports them from here and no circular imports appear.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class HealthStatus(Enum):
    """
    Reachability of the remote API as seen by one ConnectionService.

    UNKNOWN is the only initial state. OFFLINE is entered whenever the
    platform reports loss of connectivity and is left only when it reports
    connectivity again.
    """

    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    OFFLINE = "offline"


class EventKind(Enum):
    """Event kinds delivered to subscribers."""

    ONLINE = "online"
    OFFLINE = "offline"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    CONNECTION_CHANGE = "connectionChange"


@dataclass(frozen=True)
class ConnectionQuality:
    """Connection-quality hints. Not every platform exposes every field."""

    effective_type: Optional[str] = None
    downlink_mbps: Optional[float] = None
    rtt_ms: Optional[int] = None
    save_data: Optional[bool] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ConnectionQuality":
        """Build from a platform mapping using either snake_case or the browser's camelCase keys."""
        downlink = raw.get("downlink_mbps", raw.get("downlink"))
        rtt = raw.get("rtt_ms", raw.get("rtt"))
        save_data = raw.get("save_data", raw.get("saveData"))
        return cls(
            effective_type=raw.get("effective_type", raw.get("effectiveType")),
            downlink_mbps=float(downlink) if downlink is not None else None,
            rtt_ms=int(rtt) if rtt is not None else None,
            save_data=bool(save_data) if save_data is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NetworkTransition:
    """Payload of ``online`` and ``offline`` events."""

    is_online: bool
    timestamp: float


@dataclass(frozen=True)
class ConnectionSnapshot:
    """
    Point-in-time copy of a service's connection state.

    A snapshot never changes after it is produced; ask the service for a new
    one to observe later state.
    """

    is_online: bool
    health_status: HealthStatus
    last_health_check_at: Optional[float]
    retry_attempts: int
    connection_quality: Optional[ConnectionQuality]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_online": self.is_online,
            "health_status": self.health_status.value,
            "last_health_check_at": self.last_health_check_at,
            "retry_attempts": self.retry_attempts,
            "connection_quality": self.connection_quality.to_dict() if self.connection_quality else None,
        }


__all__ = [
    "ConnectionQuality",
    "ConnectionSnapshot",
    "EventKind",
    "HealthStatus",
    "NetworkTransition",
]
