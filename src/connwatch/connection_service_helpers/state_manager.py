"""Health status state machine and broadcasting."""

import logging
import time
from typing import Any, Callable, Optional

from ..connection_state import ConnectionQuality, ConnectionSnapshot, EventKind, HealthStatus, NetworkTransition
from ..health_probe_helpers import OPERATION_SOURCE, ProbeResult
from ..retry_executor_helpers.retry_counter import RetryCounter
from ..status_broadcaster import StatusBroadcaster


class StatusStateManager:
    """
    Owns the HealthStatus of one service and publishes its transitions.

    OFFLINE reported by the platform is left only through ``mark_online``.
    OFFLINE detected by a probe is also left by the next probe that finds the
    platform online again. Other results arriving while offline are ignored.
    After ``freeze`` every mutator is a no-op and the snapshot stays put.
    """

    def __init__(
        self,
        service_name: str,
        broadcaster: StatusBroadcaster,
        retry_counter: RetryCounter,
        *,
        is_online: bool = True,
        quality: Optional[ConnectionQuality] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.service_name = service_name
        self.broadcaster = broadcaster
        self.retry_counter = retry_counter
        self.status = HealthStatus.UNKNOWN
        self.is_online = is_online
        self.quality = quality
        self.last_health_check_at: Optional[float] = None
        self.offline_detected_by_probe = False
        self._clock = clock
        self.state_change_time = clock()
        self.frozen = False
        self._resting_snapshot: Optional[ConnectionSnapshot] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    def transition(self, new_status: HealthStatus, event_kind: Optional[EventKind] = None, payload: Any = None) -> bool:
        """
        Move to ``new_status``, publishing ``event_kind`` only if the status changed.

        Returns:
            True when a transition happened
        """
        if self.frozen or self.status is new_status:
            return False
        previous_status = self.status
        self.status = new_status
        self.state_change_time = self._clock()
        self.logger.info("State transition: %s -> %s", previous_status.value, new_status.value)
        if event_kind is not None:
            self.broadcaster.publish(event_kind, payload)
        return True

    def apply_probe_result(self, result: ProbeResult) -> bool:
        """Fold one probe result into the state machine."""
        if self.frozen:
            return False

        if result.status is HealthStatus.OFFLINE:
            # Platform went offline without a signal reaching us yet.
            if self.status is HealthStatus.OFFLINE:
                return False
            self.is_online = False
            self.offline_detected_by_probe = True
            return self.transition(
                HealthStatus.OFFLINE,
                EventKind.OFFLINE,
                NetworkTransition(is_online=False, timestamp=result.timestamp),
            )

        if self.status is HealthStatus.OFFLINE:
            if not self.offline_detected_by_probe:
                self.logger.debug("Ignoring %s probe result while offline", result.status.value)
                return False
            self._recover_from_probe_offline(result.timestamp)

        self.last_health_check_at = result.timestamp
        if result.healthy:
            self.retry_counter.reset()
            return self.transition(HealthStatus.HEALTHY, EventKind.HEALTHY, result)
        return self.transition(HealthStatus.UNHEALTHY, EventKind.UNHEALTHY, result)

    def _recover_from_probe_offline(self, timestamp: float) -> None:
        self.is_online = True
        self.offline_detected_by_probe = False
        self.retry_counter.reset()
        self.transition(HealthStatus.UNKNOWN)
        self.broadcaster.publish(EventKind.ONLINE, NetworkTransition(is_online=True, timestamp=timestamp))

    def apply_operation_success(self) -> bool:
        """Treat a successful operation as evidence of health."""
        if self.frozen or self.status is HealthStatus.OFFLINE:
            return False
        self.retry_counter.reset()
        result = ProbeResult(HealthStatus.HEALTHY, self._clock(), source=OPERATION_SOURCE)
        return self.transition(HealthStatus.HEALTHY, EventKind.HEALTHY, result)

    def mark_offline(self) -> bool:
        """The platform reported offline. The ``offline`` event was already published."""
        if self.frozen:
            return False
        self.is_online = False
        self.offline_detected_by_probe = False
        return self.transition(HealthStatus.OFFLINE)

    def mark_online(self) -> bool:
        """The platform reported online. Status returns to UNKNOWN until the next probe."""
        if self.frozen:
            return False
        self.is_online = True
        self.offline_detected_by_probe = False
        self.retry_counter.reset()
        if self.status is not HealthStatus.OFFLINE:
            return False
        return self.transition(HealthStatus.UNKNOWN)

    def update_quality(self, quality: Optional[ConnectionQuality]) -> None:
        if not self.frozen:
            self.quality = quality

    def freeze(self) -> None:
        """Pin the current snapshot and stop the shared retry counter."""
        if self.frozen:
            return
        self._resting_snapshot = self.build_snapshot()
        self.retry_counter.freeze()
        self.frozen = True

    def build_snapshot(self) -> ConnectionSnapshot:
        if self._resting_snapshot is not None:
            return self._resting_snapshot
        return ConnectionSnapshot(
            is_online=self.is_online,
            health_status=self.status,
            last_health_check_at=self.last_health_check_at,
            retry_attempts=self.retry_counter.value,
            connection_quality=self.quality,
        )

    def get_state_duration(self) -> float:
        """Seconds spent in the current status."""
        return self._clock() - self.state_change_time
