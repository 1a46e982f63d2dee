"""Trace interpolation and status classification.

Given a trace and a virtual time, :func:`position_at` yields where the
asset is and :func:`classify_status` whether it is still moving. Both are
pure: the same trace and time always give the same answer, so they are
re-evaluated on every clock tick.

Traces are trusted to be ordered by non-decreasing timestamp. Nothing
here sorts or validates them; :func:`check_trace_order` exists for
ingestion code that wants to reject bad input up front.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from trackdash.exceptions import TraceOrderError
from trackdash.models.trace import AssetStatus, TracePoint


def _as_aware(t: datetime) -> datetime:
    # Naive query times are read as UTC, like every payload timestamp.
    return t.replace(tzinfo=UTC) if t.tzinfo is None else t


def _lerp(start: float, end: float, ratio: float) -> float:
    return start + ratio * (end - start)


def position_at(trace: Sequence[TracePoint], t: datetime) -> TracePoint | None:
    """Return the asset's position at virtual time *t*.

    * Empty trace: ``None``.
    * *t* before the first point: the first point itself.
    * *t* at or after the last point: the last point itself.
    * Otherwise the first pair ``(p[i], p[i+1])`` bracketing *t* is
      interpolated linearly and a new point stamped with *t* is returned.
      A zero-length segment yields ``p[i]``'s coordinates.
    """

    if not trace:
        return None

    t = _as_aware(t)
    first = trace[0]
    last = trace[-1]
    if t < first.timestamp:
        return first
    if t >= last.timestamp:
        return last

    for a, b in zip(trace, trace[1:]):
        if not a.timestamp <= t <= b.timestamp:
            continue

        span = b.timestamp - a.timestamp
        ratio = (t - a.timestamp) / span if span else 0.0

        # Exact endpoint coordinates at the segment boundaries.
        if ratio <= 0.0:
            lat, lng = a.lat, a.lng
        elif ratio >= 1.0:
            lat, lng = b.lat, b.lng
        else:
            lat, lng = _lerp(a.lat, b.lat, ratio), _lerp(a.lng, b.lng, ratio)
        return TracePoint(lat=lat, lng=lng, timestamp=t)

    # Only reachable with an unordered trace.
    return last


def classify_status(trace: Sequence[TracePoint], target_reached: bool, t: datetime) -> AssetStatus:
    """Classify an asset as Moving, Idle or Delivered at virtual time *t*.

    ``Moving`` while *t* is before the last recorded point. Past it the
    asset is ``Delivered`` when its journey reached the target and
    ``Idle`` otherwise. An empty trace is ``Idle``.
    """

    if not trace:
        return AssetStatus.IDLE

    t = _as_aware(t)
    last_time = trace[-1].timestamp
    if t >= last_time and target_reached:
        return AssetStatus.DELIVERED
    if t < last_time:
        return AssetStatus.MOVING
    return AssetStatus.IDLE


def travelled_trace(trace: Sequence[TracePoint], t: datetime) -> list[TracePoint]:
    """Recorded points at or before virtual time *t*: the part already covered."""

    t = _as_aware(t)
    return [point for point in trace if point.timestamp <= t]


def first_out_of_order(trace: Sequence[TracePoint]) -> int | None:
    """Index of the first point whose timestamp precedes its predecessor's."""

    for i in range(1, len(trace)):
        if trace[i].timestamp < trace[i - 1].timestamp:
            return i
    return None


def is_time_ordered(trace: Sequence[TracePoint]) -> bool:
    return first_out_of_order(trace) is None


def check_trace_order(trace: Sequence[TracePoint], *, asset_id: str = "") -> None:
    """Raise :class:`TraceOrderError` if *trace* goes back in time."""

    index = first_out_of_order(trace)
    if index is None:
        return
    label = f" for asset {asset_id!r}" if asset_id else ""
    raise TraceOrderError(
        f"trace{label} is not time-ordered: point {index} at {trace[index].timestamp.isoformat()} "
        f"precedes point {index - 1} at {trace[index - 1].timestamp.isoformat()}",
        index=index,
        asset_id=asset_id,
    )
