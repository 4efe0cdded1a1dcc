"""Normalize platform connectivity notifications into broadcaster events."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .connection_state import ConnectionQuality, EventKind, NetworkTransition
from .diagnostics import ConnectionDiagnostics
from .platform_capabilities import NetworkCapabilities, PlatformSignal, SignalKind
from .status_broadcaster import StatusBroadcaster

logger = logging.getLogger(__name__)


class NetworkSignal:
    """
    Event-driven view of platform connectivity.

    Captures the platform's connectivity at construction, then republishes
    every platform notification as an ``online``, ``offline`` or
    ``connectionChange`` event. There is no polling, batching or debouncing:
    one platform signal produces exactly one event.
    """

    def __init__(
        self,
        capabilities: NetworkCapabilities,
        broadcaster: StatusBroadcaster,
        *,
        diagnostics: Optional[ConnectionDiagnostics] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._capabilities = capabilities
        self._broadcaster = broadcaster
        self._diagnostics = diagnostics
        self._clock = clock
        self._online = bool(capabilities.is_online())
        self._quality = capabilities.connection_quality()
        self._attached = True
        capabilities.add_signal_listener(self._handle_signal)

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def quality(self) -> Optional[ConnectionQuality]:
        return self._quality

    def refresh(self) -> bool:
        """Re-read connectivity from the platform without emitting an event."""
        self._online = bool(self._capabilities.is_online())
        self._quality = self._capabilities.connection_quality()
        return self._online

    def close(self) -> None:
        """Stop listening to the platform. Safe to call more than once."""
        if not self._attached:
            return
        self._capabilities.remove_signal_listener(self._handle_signal)
        self._attached = False

    def _handle_signal(self, signal: PlatformSignal) -> None:
        if signal.kind is SignalKind.CHANGE:
            self._handle_quality_change(signal.quality)
            return

        online = signal.kind is SignalKind.ONLINE
        self._online = online
        transition = NetworkTransition(is_online=online, timestamp=self._clock())
        if online:
            logger.info("Network connection restored")
            self._record("NETWORK_ONLINE", timestamp=transition.timestamp)
            self._broadcaster.publish(EventKind.ONLINE, transition)
        else:
            logger.info("Network connection lost")
            self._record("NETWORK_OFFLINE", timestamp=transition.timestamp)
            self._broadcaster.publish(EventKind.OFFLINE, transition)

    def _handle_quality_change(self, quality: Optional[ConnectionQuality]) -> None:
        if quality is None:
            quality = self._capabilities.connection_quality()
        self._quality = quality
        self._record("CONNECTION_CHANGE", **(quality.to_dict() if quality else {}))
        self._broadcaster.publish(EventKind.CONNECTION_CHANGE, quality)

    def _record(self, kind: str, **details) -> None:
        if self._diagnostics is not None:
            self._diagnostics.record(kind, **details)


__all__ = ["NetworkSignal"]
