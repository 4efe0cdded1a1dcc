"""
Platform capability interface for connectivity information.

The resilience layer never reads platform globals directly. Whatever runtime
hosts it supplies a NetworkCapabilities implementation that reports the
current connectivity, optional connection-quality hints, and pushes
PlatformSignal notifications when either changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from .connection_state import ConnectionQuality

logger = logging.getLogger(__name__)


class SignalKind(Enum):
    """Raw notification kinds a platform can emit."""

    ONLINE = "online"
    OFFLINE = "offline"
    CHANGE = "change"


@dataclass(frozen=True)
class PlatformSignal:
    """One platform notification."""

    kind: SignalKind
    quality: Optional[ConnectionQuality] = None


SignalListener = Callable[[PlatformSignal], None]


class NetworkCapabilities(Protocol):
    """What the resilience layer needs from its host platform."""

    def is_online(self) -> bool: ...

    def connection_quality(self) -> Optional[ConnectionQuality]: ...

    def add_signal_listener(self, listener: SignalListener) -> None: ...

    def remove_signal_listener(self, listener: SignalListener) -> None: ...


class ManualNetworkCapabilities:
    """
    Capabilities driven explicitly by the host application.

    Suitable for runtimes without native connectivity events and for tests:
    the host calls set_online/update_quality and every call emits exactly one
    signal, even when the value did not change.
    """

    def __init__(self, online: bool = True, quality: Optional[ConnectionQuality] = None):
        self._online = online
        self._quality = quality
        self._listeners: List[SignalListener] = []

    def is_online(self) -> bool:
        return self._online

    def connection_quality(self) -> Optional[ConnectionQuality]:
        return self._quality

    def add_signal_listener(self, listener: SignalListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_signal_listener(self, listener: SignalListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def set_online(self, online: bool) -> None:
        self._online = online
        self._emit(PlatformSignal(SignalKind.ONLINE if online else SignalKind.OFFLINE))

    def update_quality(self, quality: ConnectionQuality) -> None:
        self._quality = quality
        self._emit(PlatformSignal(SignalKind.CHANGE, quality))

    def _emit(self, signal: PlatformSignal) -> None:
        for listener in list(self._listeners):
            listener(signal)


__all__ = [
    "ManualNetworkCapabilities",
    "NetworkCapabilities",
    "PlatformSignal",
    "SignalKind",
    "SignalListener",
]
