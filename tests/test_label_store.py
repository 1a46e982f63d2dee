from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from trackdash.models.realtime import LabelMetadata
from trackdash.models.trace import TracePoint
from trackdash.state.events import LabelUpdateEvent, UpdateSource
from trackdash.state.store import LabelStore


def _dt(minutes: int = 0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=minutes)


def _event(label_id: str, lat: float, lng: float, *, minutes: int = 0, **kwargs: object) -> LabelUpdateEvent:
    return LabelUpdateEvent(
        label_id=label_id,
        position=TracePoint(lat=lat, lng=lng, timestamp=_dt(minutes)),
        observed_at=_dt(minutes),
        **kwargs,  # type: ignore[arg-type]
    )


def test_register_places_label_at_default_position() -> None:
    store = LabelStore(clock=lambda: _dt())
    label = store.register("AA:BB:CC")

    assert label.id == "rt-AA:BB:CC"
    assert label.display_name == "Label-AA:BB:CC"
    assert (label.position.lat, label.position.lng) == (34.0522, -118.2437)
    assert label.created_at == _dt()
    assert "rt-AA:BB:CC" in store


def test_register_same_device_returns_existing_label() -> None:
    store = LabelStore(clock=lambda: _dt())
    first = store.register("AA:BB:CC", "Crate 7")
    second = store.register("AA:BB:CC", "Another name")

    assert second is first
    assert len(store) == 1
    assert store.get_by_device("AA:BB:CC") is first


def test_apply_replaces_position_and_never_appends() -> None:
    store = LabelStore()
    store.apply(_event("L1", 1.0, 1.0, device_id="dev-1"))
    label = store.apply(_event("L1", 2.0, 2.0, minutes=1))

    assert (label.position.lat, label.position.lng) == (2.0, 2.0)
    assert label.device_id == "dev-1"
    assert label.last_updated == _dt(1)
    assert label.created_at == _dt(0)
    assert store.labels() == [label]


def test_latest_arrival_wins_even_with_older_payload_timestamp() -> None:
    store = LabelStore()
    store.apply(_event("L1", 1.0, 1.0, minutes=10))
    store.apply(_event("L1", 5.0, 5.0, minutes=1))

    label = store.get("L1")
    assert label is not None
    assert (label.position.lat, label.position.lng) == (5.0, 5.0)


def test_updates_to_one_label_leave_others_untouched() -> None:
    store = LabelStore()
    other = store.apply(_event("L2", 9.0, 9.0))
    store.apply(_event("L1", 1.0, 1.0))
    store.apply(_event("L1", 2.0, 2.0))

    assert store.get("L2") is other


def test_metadata_is_merged_not_replaced() -> None:
    store = LabelStore()
    store.apply(_event("L1", 1.0, 1.0, metadata=LabelMetadata(status="IN_TRANSIT", battery=90)))
    label = store.apply(_event("L1", 2.0, 2.0, metadata=LabelMetadata(temperature=3.5)))

    assert label.metadata.status == "IN_TRANSIT"
    assert label.metadata.battery == 90
    assert label.metadata.temperature == 3.5


def test_first_report_uses_label_id_when_device_unknown() -> None:
    store = LabelStore()
    label = store.apply(_event("L9", 1.0, 1.0))
    assert label is not None
    assert label.device_id == "L9"
    assert label.display_name == "Label-L9"
    assert label.is_active is True


def test_remove() -> None:
    store = LabelStore()
    store.apply(_event("L1", 1.0, 1.0))
    assert store.remove("L1") is True
    assert store.remove("L1") is False
    assert len(store) == 0


def test_iteration_is_a_snapshot() -> None:
    store = LabelStore()
    store.apply(_event("L1", 1.0, 1.0))
    for _label in store:
        store.apply(_event("L2", 2.0, 2.0))
    assert len(store) == 2


def test_event_label_id_is_stripped_and_required() -> None:
    event = _event("  L1 ", 1.0, 1.0)
    assert event.label_id == "L1"
    with pytest.raises(ValidationError):
        _event("   ", 1.0, 1.0)


def test_event_naive_observed_at_becomes_utc() -> None:
    event = LabelUpdateEvent(
        label_id="L1",
        position=TracePoint(lat=1.0, lng=1.0, timestamp=_dt()),
        observed_at=datetime(2026, 1, 1, 12, 0),
    )
    assert event.observed_at.tzinfo is UTC


def test_position_message_for_unknown_label_is_dropped() -> None:
    store = LabelStore()
    assert store.apply(_event("L9", 1.0, 1.0, source=UpdateSource.MANUAL)) is None
    assert "L9" not in store


def test_position_message_moves_existing_label() -> None:
    store = LabelStore(clock=lambda: _dt())
    registered = store.register("AA:BB")
    moved = store.apply(_event(registered.id, 3.0, 4.0, minutes=2, source=UpdateSource.MANUAL))

    assert moved is not None
    assert (moved.position.lat, moved.position.lng) == (3.0, 4.0)
    assert moved.created_at == _dt()
