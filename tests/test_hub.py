from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from sentinel_rover.hub import BroadcastHub
from sentinel_rover.models import RoverStatus, Threat
from sentinel_rover.state.events import EventName
from sentinel_rover.state.store import RoverStore


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


def _store_with_threats(count: int) -> RoverStore:
    store = RoverStore(RoverStatus(battery=77.0))
    for i in range(count):
        store.add_threat(Threat(latitude=10.0, longitude=20.0, distance=float(i)))
    return store


@pytest.mark.asyncio
async def test_new_observer_gets_status_then_last_ten_threats(make_observer: Callable[..., Any]) -> None:
    store = _store_with_threats(12)
    hub = BroadcastHub(store)
    observer = make_observer("a")

    hub.on_connect(observer)
    await hub.drain()

    assert observer.events() == ["rover_status", "recent_threats"]
    assert observer.messages[0]["data"]["battery"] == 77.0
    recent = observer.messages[1]["data"]
    assert [threat["distance"] for threat in recent] == [float(i) for i in range(2, 12)]
    await hub.close()


@pytest.mark.asyncio
async def test_new_observer_with_no_threats_gets_empty_list(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    observer = make_observer("a")

    hub.on_connect(observer)
    await hub.drain()

    assert observer.payloads("recent_threats") == [[]]
    await hub.close()


@pytest.mark.asyncio
async def test_publish_reaches_every_observer_once(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    observers = [make_observer(name) for name in ("a", "b", "c")]
    for observer in observers:
        hub.on_connect(observer)

    hub.publish(EventName.THREAT_NEUTRALIZED, {"id": "t-1"})
    await hub.drain()

    for observer in observers:
        assert observer.payloads("threat_neutralized") == [{"id": "t-1"}]
    await hub.close()


@pytest.mark.asyncio
async def test_blocked_observer_does_not_delay_others(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    slow = make_observer("slow", "blocked")
    fast = make_observer("fast")
    hub.on_connect(slow)
    hub.on_connect(fast)

    hub.publish(EventName.ROVER_STATUS, RoverStatus(battery=12.0))

    await _wait_until(lambda: len(fast.messages) == 3)
    assert slow.messages == []
    assert fast.payloads("rover_status")[-1]["battery"] == 12.0

    slow.release.set()
    await hub.drain()
    assert slow.events() == ["rover_status", "recent_threats", "rover_status"]
    await hub.close()


@pytest.mark.asyncio
async def test_broken_observer_is_dropped_without_affecting_others(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    broken = make_observer("broken", "broken")
    healthy = make_observer("healthy")
    hub.on_connect(broken)
    hub.on_connect(healthy)

    await _wait_until(lambda: hub.connection_count == 1)
    hub.publish(EventName.THREAT_NEUTRALIZED, {"id": "t-9"})
    await hub.drain()

    assert hub.session_ids() == ["healthy"]
    assert healthy.payloads("threat_neutralized") == [{"id": "t-9"}]
    await _wait_until(lambda: broken.closed)
    await hub.close()


@pytest.mark.asyncio
async def test_overflowing_observer_is_dropped(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore(), queue_size=4)
    slow = make_observer("slow", "blocked")
    fast = make_observer("fast")
    hub.on_connect(slow)
    hub.on_connect(fast)
    await _wait_until(lambda: len(fast.messages) == 2)

    for i in range(8):
        hub.publish(EventName.THREAT_NEUTRALIZED, {"id": f"t-{i}"})
        await asyncio.sleep(0.001)

    assert hub.session_ids() == ["fast"]
    await hub.drain()
    assert len(fast.payloads("threat_neutralized")) == 8
    await hub.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("queue_size", [1, 2])
async def test_connect_snapshot_does_not_count_against_queue_size(
    make_observer: Callable[..., Any], queue_size: int
) -> None:
    hub = BroadcastHub(RoverStore(), queue_size=queue_size)
    observer = make_observer("a")

    hub.on_connect(observer)
    hub.publish(EventName.ROVER_STATUS, {"battery": 50.0})
    await hub.drain()

    assert hub.session_ids() == ["a"]
    assert observer.events() == ["rover_status", "recent_threats", "rover_status"]
    await hub.close()


@pytest.mark.asyncio
async def test_send_to_targets_single_observer(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    requester = make_observer("requester")
    bystander = make_observer("bystander")
    hub.on_connect(requester)
    hub.on_connect(bystander)

    assert hub.send_to("requester", EventName.LASER_RESULT, {"success": True}) is True
    assert hub.send_to("ghost", EventName.LASER_RESULT, {"success": True}) is False
    await hub.drain()

    assert requester.payloads("laser_result") == [{"success": True}]
    assert bystander.payloads("laser_result") == []
    await hub.close()


@pytest.mark.asyncio
async def test_disconnected_observer_receives_nothing_more(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    observer = make_observer("a")
    hub.on_connect(observer)
    await hub.drain()

    hub.on_disconnect("a")
    hub.on_disconnect("a")
    hub.publish(EventName.THREAT_NEUTRALIZED, {"id": "late"})
    await asyncio.sleep(0.01)

    assert observer.events() == ["rover_status", "recent_threats"]
    assert hub.connection_count == 0


@pytest.mark.asyncio
async def test_close_closes_every_observer(make_observer: Callable[..., Any]) -> None:
    hub = BroadcastHub(RoverStore())
    observers = [make_observer(name) for name in ("a", "b")]
    for observer in observers:
        hub.on_connect(observer)

    await hub.close()

    assert hub.connection_count == 0
    assert all(observer.closed for observer in observers)
