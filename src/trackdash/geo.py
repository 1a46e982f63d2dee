"""Geospatial primitives.

Great-circle distances on a spherical Earth and aggregate distance/speed
over traces. All functions are pure and never raise for well-formed
points.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Protocol

from trackdash._constants import EARTH_RADIUS_KM
from trackdash.models.trace import TracePoint


class HasCoordinates(Protocol):
    @property
    def lat(self) -> float: ...

    @property
    def lng(self) -> float: ...


def distance(a: HasCoordinates, b: HasCoordinates) -> float:
    """Haversine distance in kilometres between two coordinates.

    Args:
        a: First coordinate (degrees).
        b: Second coordinate (degrees).

    Returns:
        Distance in km. ``0.0`` when both coordinates are equal.
    """

    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    d_phi = math.radians(b.lat - a.lat)
    d_lambda = math.radians(b.lng - a.lng)

    h = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    h = min(1.0, h)
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_KM * c


def segment_distances(trace: Sequence[HasCoordinates]) -> list[float]:
    """Distance from each point to its predecessor, in trace order.

    The first entry is ``0.0``. An empty trace yields an empty list.
    """

    if not trace:
        return []
    return [0.0] + [distance(trace[i - 1], trace[i]) for i in range(1, len(trace))]


def total_distance(trace: Sequence[HasCoordinates]) -> float:
    """Sum of consecutive distances in km; ``0.0`` below two points."""

    return math.fsum(distance(trace[i], trace[i + 1]) for i in range(len(trace) - 1))


def average_speed(trace: Sequence[TracePoint]) -> float:
    """Average speed in km/h over the recorded timestamps.

    Independent of any playback rate. Returns ``0.0`` for fewer than two
    points or when the first and last timestamps are equal.
    """

    if len(trace) < 2:
        return 0.0
    duration_hours = (trace[-1].timestamp - trace[0].timestamp).total_seconds() / 3600.0
    if duration_hours == 0:
        return 0.0
    return total_distance(trace) / duration_hours
