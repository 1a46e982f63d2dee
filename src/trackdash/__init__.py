"""trackdash - Trace interpolation and simulated-clock core for asset tracking dashboards."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trackdash")
except PackageNotFoundError:
    __version__ = "0+local"
from trackdash.clock import ClockDriver, ClockMode, ClockState, SimulatedClock, allowed_rates
from trackdash.config import DashboardConfig
from trackdash.engine import check_trace_order, classify_status, is_time_ordered, position_at, travelled_trace
from trackdash.exceptions import (
    DashboardConfigError,
    TrackDashError,
    TrackingPayloadError,
    TraceOrderError,
    UnknownAssetError,
)
from trackdash.geo import average_speed, distance, segment_distances, total_distance
from trackdash.models import (
    AssetStatus,
    AssetView,
    Checkpoint,
    Coordinate,
    LabelMetadata,
    RealTimeLabel,
    Trace,
    TracePoint,
    TraceSummary,
    TrackedAsset,
)
from trackdash.session import SimulationSession
from trackdash.state.events import LabelUpdateEvent, UpdateSource
from trackdash.state.store import LabelStore
from trackdash.stats import checkpoints, duration_minutes, format_duration, summarize, trace_duration

__all__ = [
    "__version__",
    "AssetStatus",
    "AssetView",
    "Checkpoint",
    "ClockDriver",
    "ClockMode",
    "ClockState",
    "Coordinate",
    "DashboardConfig",
    "DashboardConfigError",
    "LabelMetadata",
    "LabelStore",
    "LabelUpdateEvent",
    "RealTimeLabel",
    "SimulatedClock",
    "SimulationSession",
    "Trace",
    "TraceOrderError",
    "TracePoint",
    "TraceSummary",
    "TrackDashError",
    "TrackedAsset",
    "TrackingPayloadError",
    "UnknownAssetError",
    "UpdateSource",
    "allowed_rates",
    "average_speed",
    "check_trace_order",
    "checkpoints",
    "classify_status",
    "distance",
    "duration_minutes",
    "format_duration",
    "is_time_ordered",
    "position_at",
    "segment_distances",
    "summarize",
    "total_distance",
    "trace_duration",
    "travelled_trace",
]
