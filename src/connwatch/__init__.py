"""Connection resilience for asyncio API clients."""

from .api_client import ResilientApiClient
from .connection_config import ConnectionServiceConfig
from .connection_service import ConnectionService, DiagnosticsReport
from .connection_state import ConnectionQuality, ConnectionSnapshot, EventKind, HealthStatus, NetworkTransition
from .diagnostics import ConnectionDiagnostics, DiagnosticEntry
from .exceptions import (
    ApplicationError,
    ConfigurationError,
    NonRetryableError,
    OfflineError,
    RequestRejectedError,
    RetryAbortedError,
    RetryExhaustedError,
    TransientNetworkError,
)
from .health_probe import HealthProbe
from .health_probe_helpers import ProbeResult
from .http_session import HttpSessionManager
from .network_signal import NetworkSignal
from .platform_capabilities import ManualNetworkCapabilities, NetworkCapabilities, PlatformSignal, SignalKind
from .retry_executor import RetryCounter, RetryExecutor, RetryPolicy
from .status_broadcaster import ListenerRegistration, StatusBroadcaster

__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "ConnectionDiagnostics",
    "ConnectionQuality",
    "ConnectionService",
    "ConnectionServiceConfig",
    "ConnectionSnapshot",
    "DiagnosticEntry",
    "DiagnosticsReport",
    "EventKind",
    "HealthProbe",
    "HealthStatus",
    "HttpSessionManager",
    "ListenerRegistration",
    "ManualNetworkCapabilities",
    "NetworkCapabilities",
    "NetworkSignal",
    "NetworkTransition",
    "NonRetryableError",
    "OfflineError",
    "PlatformSignal",
    "ProbeResult",
    "RequestRejectedError",
    "ResilientApiClient",
    "RetryAbortedError",
    "RetryCounter",
    "RetryExecutor",
    "RetryExhaustedError",
    "RetryPolicy",
    "SignalKind",
    "StatusBroadcaster",
    "TransientNetworkError",
]
