"""Tests for the status broadcaster."""

import asyncio

import pytest

from connwatch.connection_state import EventKind
from connwatch.status_broadcaster import ListenerRegistration, StatusBroadcaster


def test_publish_delivers_in_registration_order():
    broadcaster = StatusBroadcaster()
    received = []
    broadcaster.subscribe(EventKind.HEALTHY, lambda payload: received.append(("first", payload)))
    broadcaster.subscribe(EventKind.HEALTHY, lambda payload: received.append(("second", payload)))
    broadcaster.subscribe(EventKind.UNHEALTHY, lambda payload: received.append(("other", payload)))

    delivered = broadcaster.publish(EventKind.HEALTHY, "payload")

    assert delivered == 2
    assert received == [("first", "payload"), ("second", "payload")]


def test_failing_listener_does_not_block_others(caplog):
    broadcaster = StatusBroadcaster()
    received = []

    def explode(payload):
        raise RuntimeError("listener bug")

    broadcaster.subscribe(EventKind.OFFLINE, explode)
    broadcaster.subscribe(EventKind.OFFLINE, received.append)

    delivered = broadcaster.publish(EventKind.OFFLINE, 1)

    assert delivered == 1
    assert received == [1]
    assert "Error in offline listener" in caplog.text


def test_duplicate_subscription_is_single_registration():
    broadcaster = StatusBroadcaster()
    received = []

    first = broadcaster.subscribe(EventKind.ONLINE, received.append)
    second = broadcaster.subscribe("online", received.append)
    broadcaster.publish(EventKind.ONLINE, True)

    assert first == second == ListenerRegistration(EventKind.ONLINE, received.append)
    assert received == [True]
    assert broadcaster.listener_count(EventKind.ONLINE) == 1


def test_unsubscribe_matches_kind_and_callback():
    broadcaster = StatusBroadcaster()
    received = []
    broadcaster.subscribe(EventKind.ONLINE, received.append)
    broadcaster.subscribe(EventKind.OFFLINE, received.append)

    assert broadcaster.unsubscribe(EventKind.ONLINE, received.append) is True
    assert broadcaster.unsubscribe(EventKind.ONLINE, received.append) is False

    broadcaster.publish(EventKind.ONLINE, "on")
    broadcaster.publish(EventKind.OFFLINE, "off")
    assert received == ["off"]


def test_listener_added_during_publish_waits_for_next_event():
    broadcaster = StatusBroadcaster()
    late = []

    def register_late(payload):
        broadcaster.subscribe(EventKind.HEALTHY, late.append)

    broadcaster.subscribe(EventKind.HEALTHY, register_late)
    broadcaster.publish(EventKind.HEALTHY, 1)
    broadcaster.publish(EventKind.HEALTHY, 2)

    assert late == [2]


def test_clear_drops_every_registration():
    broadcaster = StatusBroadcaster()
    broadcaster.subscribe(EventKind.HEALTHY, print)
    broadcaster.subscribe(EventKind.UNHEALTHY, print)

    broadcaster.clear()

    assert broadcaster.listener_count() == 0
    assert broadcaster.registrations() == []
    assert broadcaster.publish(EventKind.HEALTHY, None) == 0


def test_unknown_event_kind_is_rejected():
    broadcaster = StatusBroadcaster()
    with pytest.raises(ValueError):
        broadcaster.subscribe("reconnecting", print)


@pytest.mark.asyncio
async def test_coroutine_listener_is_scheduled():
    broadcaster = StatusBroadcaster()
    received = []

    async def on_event(payload):
        received.append(payload)

    broadcaster.subscribe(EventKind.CONNECTION_CHANGE, on_event)
    broadcaster.publish(EventKind.CONNECTION_CHANGE, "4g")
    await asyncio.sleep(0)

    assert received == ["4g"]
