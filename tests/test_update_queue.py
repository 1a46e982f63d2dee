from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from trackdash.ingestion.queue import LabelUpdateQueue
from trackdash.models.realtime import RealTimeLabel
from trackdash.models.trace import TracePoint
from trackdash.state.events import LabelUpdateEvent, UpdateSource
from trackdash.state.store import LabelStore

T0 = datetime(2025, 4, 1, 10, 0, tzinfo=UTC)


def _event(label_id: str, lat: float) -> LabelUpdateEvent:
    return LabelUpdateEvent(label_id=label_id, position=TracePoint(lat=lat, lng=0.0, timestamp=T0), observed_at=T0)


def test_drain_applies_in_arrival_order() -> None:
    queue = LabelUpdateQueue(LabelStore())
    for lat in (1.0, 2.0, 3.0):
        queue.put_nowait(_event("L1", lat))
    assert queue.pending == 3

    applied = queue.drain()

    assert [label.position.lat for label in applied] == [1.0, 2.0, 3.0]
    assert queue.pending == 0
    label = queue.store.get("L1")
    assert label is not None and label.position.lat == 3.0


def test_drain_on_empty_queue() -> None:
    queue = LabelUpdateQueue(LabelStore())
    assert queue.drain() == []


def test_listeners_and_unsubscribe() -> None:
    queue = LabelUpdateQueue(LabelStore())
    seen: list[tuple[str, float]] = []

    def listener(label: RealTimeLabel, event: LabelUpdateEvent) -> None:
        seen.append((label.id, event.position.lat))

    unsubscribe = queue.add_listener(listener)
    queue.put_nowait(_event("L1", 1.0))
    queue.drain()
    unsubscribe()
    unsubscribe()
    queue.put_nowait(_event("L1", 2.0))
    queue.drain()

    assert seen == [("L1", 1.0)]


def test_failing_listener_does_not_block_update() -> None:
    queue = LabelUpdateQueue(LabelStore())

    def boom(label: RealTimeLabel, event: LabelUpdateEvent) -> None:
        raise RuntimeError("listener failed")

    queue.add_listener(boom)
    queue.put_nowait(_event("L1", 1.0))
    queue.drain()

    assert "L1" in queue.store


def test_bounded_queue_rejects_overflow() -> None:
    queue = LabelUpdateQueue(LabelStore(), maxsize=1)
    queue.put_nowait(_event("L1", 1.0))
    with pytest.raises(asyncio.QueueFull):
        queue.put_nowait(_event("L1", 2.0))


@pytest.mark.asyncio
async def test_background_consumer_applies_updates() -> None:
    queue = LabelUpdateQueue(LabelStore())
    queue.start()
    assert queue.is_running

    await queue.put(_event("L1", 1.0))
    await queue.put(_event("L2", 5.0))
    await queue.put(_event("L1", 2.0))
    await asyncio.wait_for(queue.join(), timeout=1.0)

    l1 = queue.store.get("L1")
    l2 = queue.store.get("L2")
    assert l1 is not None and l1.position.lat == 2.0
    assert l2 is not None and l2.position.lat == 5.0

    await queue.stop()
    assert not queue.is_running


@pytest.mark.asyncio
async def test_stop_leaves_unconsumed_events_pending() -> None:
    queue = LabelUpdateQueue(LabelStore())
    queue.start()
    await queue.stop()
    queue.put_nowait(_event("L1", 1.0))
    assert queue.pending == 1


def test_drain_skips_dropped_updates() -> None:
    queue = LabelUpdateQueue(LabelStore())
    seen: list[str] = []
    queue.add_listener(lambda label, event: seen.append(label.id))
    queue.put_nowait(
        LabelUpdateEvent(
            label_id="ghost",
            position=TracePoint(lat=1.0, lng=0.0, timestamp=T0),
            source=UpdateSource.MANUAL,
            observed_at=T0,
        )
    )
    queue.put_nowait(_event("L1", 1.0))

    applied = queue.drain()

    assert [label.id for label in applied] == ["L1"]
    assert seen == ["L1"]
    assert "ghost" not in queue.store
    assert queue.pending == 0
