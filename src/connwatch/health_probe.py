"""Single bounded-timeout liveness check against the health endpoint."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import aiohttp

from .diagnostics import ConnectionDiagnostics
from .exceptions import ProbeError
from .health_probe_helpers import ProbeResult, has_ok_marker
from .http_session import HttpSessionManager
from .network_errors import describe_network_error
from .platform_capabilities import NetworkCapabilities

DEFAULT_PROBE_TIMEOUT_SECONDS = 10.0

_HTTP_OK_MIN = 200
_HTTP_OK_MAX = 300

_PROBE_HEADERS = {"Cache-Control": "no-cache", "X-Health-Check": "true"}


class HealthProbe:
    """
    Issues one GET against the health endpoint and classifies the outcome.

    ``probe()`` never raises: every failure becomes an UNHEALTHY result, and
    a platform that already reports offline short-circuits to OFFLINE
    without touching the network.
    """

    def __init__(
        self,
        url: str,
        session_manager: HttpSessionManager,
        capabilities: NetworkCapabilities,
        *,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        ok_marker_field: str = "status",
        ok_marker_value: str = "ok",
        clock: Callable[[], float] = time.time,
        diagnostics: Optional[ConnectionDiagnostics] = None,
    ):
        self.url = url
        self.session_manager = session_manager
        self.capabilities = capabilities
        self.timeout_seconds = timeout_seconds
        self.ok_marker_field = ok_marker_field
        self.ok_marker_value = ok_marker_value
        self._clock = clock
        self._diagnostics = diagnostics
        self.logger = logging.getLogger(f"{__name__}.{session_manager.name}")

    async def probe(self) -> ProbeResult:
        """Perform one liveness check."""
        if not self.capabilities.is_online():
            self.logger.debug("Skipping health check, platform reports offline")
            self._record("HEALTH_CHECK_SKIPPED", reason="offline")
            return ProbeResult.offline_result(self._clock())

        self._record("HEALTH_CHECK_START", url=self.url)
        started = time.monotonic()
        try:
            payload = await asyncio.wait_for(self._fetch(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            return self._failure(started, f"Health check timed out after {self.timeout_seconds}s")
        except ProbeError as exc:
            return self._failure(started, str(exc), status=exc.status)
        except (aiohttp.ClientError, OSError) as exc:
            return self._failure(started, describe_network_error(exc))
        except Exception as exc:
            self.logger.exception("Unexpected error in health check")
            return self._failure(started, f"Unexpected error: {exc}")

        duration_ms = _elapsed_ms(started)
        self.logger.debug("Health check passed in %.1fms", duration_ms)
        self._record("HEALTH_CHECK_SUCCESS", duration_ms=duration_ms, payload=payload)
        return ProbeResult.healthy_result(self._clock(), duration_ms, payload)

    async def _fetch(self) -> Dict[str, Any]:
        session = await self.session_manager.ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with session.get(self.url, timeout=timeout, headers=dict(_PROBE_HEADERS)) as response:
            if not _HTTP_OK_MIN <= response.status < _HTTP_OK_MAX:
                raise ProbeError(f"HTTP {response.status}", status=response.status)
            try:
                body = await response.json(content_type=None)
            except ValueError as exc:
                raise ProbeError(f"Malformed health response: {exc}", status=response.status) from exc
            if not has_ok_marker(body, self.ok_marker_field, self.ok_marker_value):
                raise ProbeError(
                    f"Health response missing {self.ok_marker_field}={self.ok_marker_value!r}",
                    status=response.status,
                )
            return body

    def _failure(self, started: float, message: str, *, status: Optional[int] = None) -> ProbeResult:
        duration_ms = _elapsed_ms(started)
        self.logger.warning("Health check failed: %s", message)
        self._record("HEALTH_CHECK_FAILED", duration_ms=duration_ms, error=message, status=status)
        return ProbeResult.unhealthy_result(self._clock(), duration_ms, message)

    def _record(self, kind: str, **details: Any) -> None:
        if self._diagnostics is not None:
            self._diagnostics.record(kind, **details)


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000.0


__all__ = ["DEFAULT_PROBE_TIMEOUT_SECONDS", "HealthProbe"]
