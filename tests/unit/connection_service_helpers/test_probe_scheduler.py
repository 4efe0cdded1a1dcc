"""Tests for periodic probe scheduling."""

import asyncio

import pytest

from connwatch.connection_service_helpers import ProbeScheduler


@pytest.mark.asyncio
async def test_probes_immediately_then_every_interval(recording_sleep):
    calls = []

    async def run_probe():
        calls.append(len(recording_sleep.delays))
        if len(calls) == 3:
            scheduler.stop()

    scheduler = ProbeScheduler("testservice", run_probe, 30.0, sleep=recording_sleep)
    scheduler.start()
    await scheduler.wait_stopped()

    assert calls == [0, 1, 2]
    assert recording_sleep.delays == [30.0, 30.0]
    assert not scheduler.is_running


@pytest.mark.asyncio
async def test_probe_failure_does_not_stop_loop(recording_sleep, caplog):
    calls = 0

    async def run_probe():
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("probe bug")
        scheduler.stop()

    scheduler = ProbeScheduler("testservice", run_probe, 1.0, sleep=recording_sleep)
    scheduler.start()
    await scheduler.wait_stopped()

    assert calls == 2
    assert "Periodic health check failed" in caplog.text


@pytest.mark.asyncio
async def test_stop_cancels_pending_sleep():
    ticks = 0

    async def run_probe():
        nonlocal ticks
        ticks += 1

    scheduler = ProbeScheduler("testservice", run_probe, 3600.0)
    scheduler.start()
    await asyncio.sleep(0.01)

    scheduler.stop()
    scheduler.stop()
    await scheduler.wait_stopped()

    assert ticks == 1
    assert scheduler.stopped
    with pytest.raises(RuntimeError):
        scheduler.start()
