"""Data models for traces, demo assets and real-time labels."""

from trackdash.models._base import OptionalTimestamp, Timestamp, TrackBaseModel
from trackdash.models.realtime import LabelMetadata, RealTimeLabel
from trackdash.models.summary import AssetView, Checkpoint, TraceSummary
from trackdash.models.trace import AssetStatus, Coordinate, Trace, TracePoint, TrackedAsset

__all__ = [
    "AssetStatus",
    "AssetView",
    "Checkpoint",
    "Coordinate",
    "LabelMetadata",
    "OptionalTimestamp",
    "RealTimeLabel",
    "Timestamp",
    "Trace",
    "TracePoint",
    "TrackBaseModel",
    "TraceSummary",
    "TrackedAsset",
]
