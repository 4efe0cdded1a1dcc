"""Construction options for ConnectionService."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import env_bool, env_float, env_int, env_str
from .diagnostics import DEFAULT_DIAGNOSTICS_CAPACITY
from .exceptions import ConfigurationError
from .health_probe import DEFAULT_PROBE_TIMEOUT_SECONDS
from .http_session import DEFAULT_USER_AGENT
from .retry_executor_helpers import (
    DEFAULT_BASE_DELAY_SECONDS,
    DEFAULT_JITTER_FRACTION,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_DELAY_SECONDS,
    RetryPolicy,
)

DEFAULT_HEALTH_ENDPOINT = "/health"
DEFAULT_PROBE_INTERVAL_SECONDS = 30.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ConnectionServiceConfig:
    """
    Plain options record for one ConnectionService.

    Attributes:
        base_url: API root; the health endpoint and API client paths are joined to it
        health_endpoint: Path of the liveness endpoint
        probe_interval_seconds: Pause between the end of one periodic probe and the next
        probe_timeout_seconds: Bound on a single probe, after which it is cancelled
        request_timeout_seconds: Total timeout of the shared HTTP session
        retry_policy: Backoff policy for ``execute``
        precheck_health: Run a health check before every ``execute``
        ok_marker_field: JSON field of the health body that carries the marker
        ok_marker_value: Marker value that means healthy
        diagnostics_capacity: Number of diagnostic entries kept in memory
        user_agent: User-Agent header of the shared HTTP session
    """

    base_url: str = ""
    health_endpoint: str = DEFAULT_HEALTH_ENDPOINT
    probe_interval_seconds: float = DEFAULT_PROBE_INTERVAL_SECONDS
    probe_timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    precheck_health: bool = False
    ok_marker_field: str = "status"
    ok_marker_value: str = "ok"
    diagnostics_capacity: int = DEFAULT_DIAGNOSTICS_CAPACITY
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.probe_interval_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "probe_interval_seconds", self.probe_interval_seconds, "Must be positive"
            )
        if self.probe_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value("probe_timeout_seconds", self.probe_timeout_seconds, "Must be positive")
        if self.request_timeout_seconds <= 0:
            raise ConfigurationError.invalid_value(
                "request_timeout_seconds", self.request_timeout_seconds, "Must be positive"
            )
        if self.diagnostics_capacity < 1:
            raise ConfigurationError.invalid_value("diagnostics_capacity", self.diagnostics_capacity, "Must be at least 1")
        if not self.health_endpoint:
            raise ConfigurationError.invalid_value("health_endpoint", self.health_endpoint, "Must not be empty")

    @property
    def health_url(self) -> str:
        return join_url(self.base_url, self.health_endpoint)

    @classmethod
    def from_env(cls, prefix: str = "CONNWATCH") -> "ConnectionServiceConfig":
        """Build a config from ``<prefix>_*`` environment variables, falling back to defaults."""

        def name(suffix: str) -> str:
            return f"{prefix}_{suffix}"

        policy = RetryPolicy(
            max_attempts=env_int(name("MAX_ATTEMPTS"), DEFAULT_MAX_ATTEMPTS),
            base_delay_seconds=env_float(name("BASE_DELAY_SECONDS"), DEFAULT_BASE_DELAY_SECONDS),
            max_delay_seconds=env_float(name("MAX_DELAY_SECONDS"), DEFAULT_MAX_DELAY_SECONDS),
            jitter_fraction=env_float(name("JITTER_FRACTION"), DEFAULT_JITTER_FRACTION),
        )
        return cls(
            base_url=env_str(name("BASE_URL"), ""),
            health_endpoint=env_str(name("HEALTH_ENDPOINT"), DEFAULT_HEALTH_ENDPOINT),
            probe_interval_seconds=env_float(name("PROBE_INTERVAL_SECONDS"), DEFAULT_PROBE_INTERVAL_SECONDS),
            probe_timeout_seconds=env_float(name("PROBE_TIMEOUT_SECONDS"), DEFAULT_PROBE_TIMEOUT_SECONDS),
            request_timeout_seconds=env_float(name("REQUEST_TIMEOUT_SECONDS"), DEFAULT_REQUEST_TIMEOUT_SECONDS),
            retry_policy=policy,
            precheck_health=env_bool(name("PRECHECK_HEALTH"), False),
            diagnostics_capacity=env_int(name("DIAGNOSTICS_CAPACITY"), DEFAULT_DIAGNOSTICS_CAPACITY),
        )


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them."""
    if not base_url:
        return path
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


__all__ = [
    "ConnectionServiceConfig",
    "DEFAULT_HEALTH_ENDPOINT",
    "DEFAULT_PROBE_INTERVAL_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "join_url",
]
