"""Tests for Pydantic model parsing with TrackBaseModel."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from trackdash.models import (
    Coordinate,
    LabelMetadata,
    RealTimeLabel,
    TracePoint,
    TrackedAsset,
)

T0 = datetime(2025, 4, 1, 10, 0, tzinfo=UTC)

# ------------------------------------------------------------------
# TracePoint / Coordinate
# ------------------------------------------------------------------


class TestTracePoint:
    def test_from_camel_payload(self) -> None:
        point = TracePoint.model_validate({"lat": 34.0522, "lng": -118.2437, "timestamp": "2025-04-01T10:00:00Z"})
        assert point.timestamp == T0

    def test_alternate_coordinate_keys(self) -> None:
        point = TracePoint.model_validate({"latitude": 1.5, "long": 2.5, "ts": 1_743_501_600_000})
        assert (point.lat, point.lng) == (1.5, 2.5)
        assert point.timestamp == T0

    @pytest.mark.parametrize(("lat", "lng"), [(90.5, 0.0), (-91.0, 0.0), (0.0, 180.5), (0.0, -181.0)])
    def test_out_of_range_coordinates_rejected(self, lat: float, lng: float) -> None:
        with pytest.raises(ValidationError):
            Coordinate(lat=lat, lng=lng)

    def test_missing_timestamp_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TracePoint.model_validate({"lat": 1.0, "lng": 2.0, "timestamp": "soon"})

    def test_points_are_frozen(self) -> None:
        point = TracePoint(lat=1.0, lng=2.0, timestamp=T0)
        with pytest.raises(ValidationError):
            point.lat = 3.0  # type: ignore[misc]


# ------------------------------------------------------------------
# TrackedAsset
# ------------------------------------------------------------------


class TestTrackedAsset:
    def test_from_camel_payload(self) -> None:
        asset = TrackedAsset.model_validate(
            {
                "id": "label001",
                "displayName": "Package A",
                "targetReached": True,
                "trace": [
                    {"lat": 34.0522, "lng": -118.2437, "timestamp": "2025-04-01T10:00:00Z"},
                    {"lat": 34.0530, "lng": -118.2450, "timestamp": "2025-04-01T10:01:00Z"},
                ],
                "somethingElse": 1,
            }
        )
        assert asset.display_name == "Package A"
        assert asset.target_reached is True
        assert isinstance(asset.trace, tuple)
        assert len(asset.trace) == 2

    def test_target_reached_defaults_false(self) -> None:
        asset = TrackedAsset(id="a", display_name="A")
        assert asset.target_reached is False
        assert asset.trace == ()

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TrackedAsset(id="", display_name="A")


# ------------------------------------------------------------------
# Real-time labels
# ------------------------------------------------------------------


class TestLabelMetadata:
    def test_known_and_extra_fields(self) -> None:
        meta = LabelMetadata.model_validate(
            {"status": " IN_TRANSIT ", "batteryLevel": "87", "temp": "--", "packageId": "P-1", "note": ""}
        )
        assert meta.status == "IN_TRANSIT"
        assert meta.battery == 87.0
        assert meta.temperature is None
        assert meta.extra == {"packageId": "P-1"}

    def test_merged_keeps_unset_fields(self) -> None:
        base = LabelMetadata(status="IN_TRANSIT", battery=80.0, extra={"a": 1})
        merged = base.merged(LabelMetadata(temperature=4.5, extra={"b": 2}))
        assert merged.status == "IN_TRANSIT"
        assert merged.battery == 80.0
        assert merged.temperature == 4.5
        assert merged.extra == {"a": 1, "b": 2}


class TestRealTimeLabel:
    def test_display_name_defaults_from_device(self) -> None:
        label = RealTimeLabel(id="rt-1", device_id="AA:BB", position=TracePoint(lat=1, lng=2, timestamp=T0))
        assert label.display_name == "Label-AA:BB"

    def test_mac_id_alias(self) -> None:
        label = RealTimeLabel.model_validate(
            {
                "id": "rt-1",
                "macId": "AA:BB",
                "name": "Crate",
                "position": {"lat": 1, "lng": 2, "timestamp": "2025-04-01T10:00:00Z"},
                "isActive": False,
            }
        )
        assert label.device_id == "AA:BB"
        assert label.display_name == "Crate"
        assert label.is_active is False

    def test_moved_to_replaces_position_only(self) -> None:
        label = RealTimeLabel(
            id="rt-1",
            device_id="AA:BB",
            position=TracePoint(lat=1, lng=2, timestamp=T0),
            metadata=LabelMetadata(status="IN_TRANSIT"),
        )
        new_position = TracePoint(lat=3, lng=4, timestamp=T0)
        moved = label.moved_to(new_position, received_at=T0)

        assert moved.position == new_position
        assert moved.last_updated == T0
        assert moved.metadata.status == "IN_TRANSIT"
        assert moved.display_name == "Label-AA:BB"
        assert label.position.lat == 1
