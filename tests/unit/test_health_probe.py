"""Tests for the health probe."""

import asyncio
import json

import aiohttp
import pytest

from connwatch.connection_state import HealthStatus
from connwatch.diagnostics import ConnectionDiagnostics
from connwatch.health_probe import HealthProbe
from connwatch.platform_capabilities import ManualNetworkCapabilities
from tests.helpers.http_fakes import DummyResponse, DummySession, DummySessionManager


def make_probe(session, *, online=True, clock=None, diagnostics=None, **overrides):
    kwargs = {"timeout_seconds": overrides.pop("timeout_seconds", 10.0)}
    if clock is not None:
        kwargs["clock"] = clock
    return HealthProbe(
        "http://api.test/health",
        DummySessionManager(session),
        ManualNetworkCapabilities(online=online),
        diagnostics=diagnostics,
        **kwargs,
        **overrides,
    )


@pytest.mark.asyncio
async def test_probe_success_returns_healthy_with_payload(fake_clock):
    session = DummySession(DummyResponse(200, {"status": "ok", "uptime": 12}))
    probe = make_probe(session, clock=fake_clock)

    result = await probe.probe()

    assert result.status is HealthStatus.HEALTHY
    assert result.healthy
    assert result.payload == {"status": "ok", "uptime": 12}
    assert result.timestamp == fake_clock.now
    assert result.duration_ms >= 0
    assert result.error_message is None

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://api.test/health")
    assert kwargs["headers"]["Cache-Control"] == "no-cache"
    assert kwargs["timeout"].total == 10.0


@pytest.mark.asyncio
async def test_probe_http_503_is_unhealthy():
    probe = make_probe(DummySession(DummyResponse(503, {"status": "down"})))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert result.error_message == "HTTP 503"
    assert result.payload is None


@pytest.mark.asyncio
async def test_probe_missing_ok_marker_is_unhealthy():
    probe = make_probe(DummySession(DummyResponse(200, {"status": "degraded"})))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert "missing status='ok'" in result.error_message


@pytest.mark.asyncio
async def test_probe_malformed_body_is_unhealthy():
    error = json.JSONDecodeError("Expecting value", "<html>", 0)
    probe = make_probe(DummySession(DummyResponse(200, json_error=error)))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert result.error_message.startswith("Malformed health response")


@pytest.mark.asyncio
async def test_probe_custom_marker():
    session = DummySession(DummyResponse(200, {"state": "UP"}))
    probe = make_probe(session, ok_marker_field="state", ok_marker_value="up")

    result = await probe.probe()

    assert result.healthy


@pytest.mark.asyncio
async def test_probe_timeout_cancels_call():
    probe = make_probe(DummySession(DummyResponse(200, {"status": "ok"}, delay=5)), timeout_seconds=0.01)

    result = await asyncio.wait_for(probe.probe(), timeout=1.0)

    assert result.status is HealthStatus.UNHEALTHY
    assert "timed out" in result.error_message


@pytest.mark.asyncio
async def test_probe_transport_error_is_unhealthy():
    probe = make_probe(DummySession(ConnectionRefusedError("Connection refused")))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert result.error_message == "Network unreachable: Connection refused"


@pytest.mark.asyncio
async def test_probe_unexpected_error_never_escapes(caplog):
    probe = make_probe(DummySession(KeyError("surprise")))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert "Unexpected error" in result.error_message
    assert "Unexpected error in health check" in caplog.text


@pytest.mark.asyncio
async def test_probe_short_circuits_when_offline(fake_clock):
    session = DummySession()
    diagnostics = ConnectionDiagnostics(clock=fake_clock)
    probe = make_probe(session, online=False, clock=fake_clock, diagnostics=diagnostics)

    result = await probe.probe()

    assert result.status is HealthStatus.OFFLINE
    assert session.calls == []
    assert [entry.kind for entry in diagnostics.entries()] == ["HEALTH_CHECK_SKIPPED"]


@pytest.mark.asyncio
async def test_probe_records_start_and_outcome(fake_clock):
    diagnostics = ConnectionDiagnostics(clock=fake_clock)
    probe = make_probe(DummySession(DummyResponse(500)), diagnostics=diagnostics)

    await probe.probe()

    kinds = [entry.kind for entry in diagnostics.entries()]
    assert kinds == ["HEALTH_CHECK_START", "HEALTH_CHECK_FAILED"]
    assert diagnostics.entries("HEALTH_CHECK_FAILED")[0].details["status"] == 500


@pytest.mark.asyncio
async def test_probe_client_error_is_unhealthy():
    probe = make_probe(DummySession(aiohttp.ClientPayloadError("Response payload is not completed")))

    result = await probe.probe()

    assert result.status is HealthStatus.UNHEALTHY
    assert result.error_message == "Response payload is not completed"
