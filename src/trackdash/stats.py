"""Journey statistics for history and detail views."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta

from trackdash.geo import average_speed, segment_distances, total_distance
from trackdash.models.summary import Checkpoint, TraceSummary
from trackdash.models.trace import TracePoint


def trace_duration(trace: Sequence[TracePoint]) -> timedelta:
    """Time between the first and last recorded point."""
    if len(trace) < 2:
        return timedelta(0)
    return trace[-1].timestamp - trace[0].timestamp


def duration_minutes(trace: Sequence[TracePoint]) -> int:
    """Whole minutes between the first and last recorded point."""
    return int(trace_duration(trace).total_seconds() // 60)


def format_duration(minutes: int) -> str:
    """``"45 min"`` below an hour, ``"1h 26m"`` from an hour on."""
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m"


def checkpoints(trace: Sequence[TracePoint]) -> list[Checkpoint]:
    """List every recorded point with its distance from the previous one."""
    legs = segment_distances(trace)
    return [
        Checkpoint(
            index=i + 1,
            point=point,
            distance_from_previous_km=legs[i] if i > 0 else None,
        )
        for i, point in enumerate(trace)
    ]


def summarize(trace: Sequence[TracePoint], *, target_reached: bool, asset_id: str = "") -> TraceSummary:
    """Build the journey summary shown in an asset's detail view."""
    return TraceSummary(
        asset_id=asset_id,
        start_time=trace[0].timestamp if trace else None,
        end_time=trace[-1].timestamp if trace else None,
        total_distance_km=total_distance(trace),
        average_speed_kmh=average_speed(trace),
        duration_minutes=duration_minutes(trace),
        checkpoint_count=len(trace),
        last_position=trace[-1] if trace else None,
        journey_state="Delivered" if target_reached else "In Transit",
    )
