"""Type definitions for health probe results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..connection_state import HealthStatus

PROBE_SOURCE = "probe"
OPERATION_SOURCE = "operation"


@dataclass(frozen=True)
class ProbeResult:
    """Classified outcome of one liveness check."""

    status: HealthStatus
    timestamp: float
    duration_ms: Optional[float] = None
    payload: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    source: str = PROBE_SOURCE

    @property
    def healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY

    @classmethod
    def healthy_result(cls, timestamp: float, duration_ms: float, payload: Optional[Dict[str, Any]]) -> "ProbeResult":
        return cls(HealthStatus.HEALTHY, timestamp, duration_ms=duration_ms, payload=payload)

    @classmethod
    def unhealthy_result(cls, timestamp: float, duration_ms: float, error_message: str) -> "ProbeResult":
        return cls(HealthStatus.UNHEALTHY, timestamp, duration_ms=duration_ms, error_message=error_message)

    @classmethod
    def offline_result(cls, timestamp: float) -> "ProbeResult":
        return cls(HealthStatus.OFFLINE, timestamp, error_message="No internet connection")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp,
            "duration_ms": self.duration_ms,
            "payload": self.payload,
            "error_message": self.error_message,
            "source": self.source,
        }
