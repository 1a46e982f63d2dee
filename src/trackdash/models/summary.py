"""Derived views over traces: checkpoints, journey summaries, asset views."""

from __future__ import annotations

from datetime import datetime

from trackdash.models._base import TrackBaseModel
from trackdash.models.trace import AssetStatus, TracePoint


class Checkpoint(TrackBaseModel):
    """A recorded trace point as listed in an asset's history."""

    index: int
    """1-based position in the trace."""
    point: TracePoint
    distance_from_previous_km: float | None = None
    """``None`` for the first checkpoint."""


class TraceSummary(TrackBaseModel):
    """Journey statistics computed from recorded timestamps."""

    asset_id: str
    start_time: datetime | None
    end_time: datetime | None
    total_distance_km: float
    average_speed_kmh: float
    duration_minutes: int
    checkpoint_count: int
    last_position: TracePoint | None
    journey_state: str
    """``"Delivered"`` when the target was reached, otherwise ``"In Transit"``."""


class AssetView(TrackBaseModel):
    """What the dashboard shows for one demo asset at a given virtual time."""

    asset_id: str
    display_name: str
    position: TracePoint | None
    status: AssetStatus
    duration_minutes: int
    at: datetime
