"""Trace models: recorded points and demo assets."""

from __future__ import annotations

import enum

from pydantic import AliasChoices, Field

from trackdash.models._base import Timestamp, TrackBaseModel


class AssetStatus(enum.StrEnum):
    """Status of a demo asset relative to the simulated clock."""

    MOVING = "Moving"
    IDLE = "Idle"
    DELIVERED = "Delivered"


class Coordinate(TrackBaseModel):
    """A bare latitude/longitude pair in degrees."""

    lat: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("lng", "lon", "long", "longitude"))


class TracePoint(Coordinate):
    """A single recorded or interpolated observation.

    Parameters
    ----------
    lat : float
        Latitude in degrees, within ``[-90, 90]``.
    lng : float
        Longitude in degrees, within ``[-180, 180]``.
    timestamp : datetime
        Absolute point in time (UTC).
    """

    timestamp: Timestamp = Field(validation_alias=AliasChoices("timestamp", "time", "ts"))


Trace = tuple[TracePoint, ...]
"""Points ordered by non-decreasing timestamp. The engine never re-sorts."""


class TrackedAsset(TrackBaseModel):
    """A demo asset replayed from a recorded trace.

    Demo data is static: the record and its trace never change after
    creation.
    """

    id: str = Field(min_length=1)
    display_name: str = Field(validation_alias=AliasChoices("displayName", "display_name", "asset", "name"))
    trace: Trace = ()
    target_reached: bool = Field(default=False, validation_alias=AliasChoices("targetReached", "target_reached"))
    """Whether the journey counts as complete once the last point is passed."""
    description: str | None = None
