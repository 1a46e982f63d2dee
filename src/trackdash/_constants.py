"""Internal constants shared across the library."""

from datetime import UTC, datetime

#: Mean Earth radius used by the haversine distance.
EARTH_RADIUS_KM = 6371.0

#: Virtual time the simulated clock starts from and returns to on restart.
SIMULATION_EPOCH = datetime(2025, 4, 1, 10, 0, 0, tzinfo=UTC)

TICKS_PER_SECOND = 10
DEFAULT_RATE = 1.0

# ------------------------------------------------------------------
# Playback rates (virtual milliseconds per real second at 1x)
# ------------------------------------------------------------------

DEMO_MS_PER_SECOND = 60_000.0
REALTIME_MS_PER_SECOND = 1_000.0

DEMO_RATES: tuple[float, ...] = (0.1, 0.25, 0.5, 1.0, 1.5, 2.0, 3.0)
REALTIME_RATES: tuple[float, ...] = (0.5, 1.0, 2.0, 4.0, 8.0)

# Los Angeles City Hall; where newly registered devices appear until they report.
DEFAULT_LABEL_LAT = 34.0522
DEFAULT_LABEL_LNG = -118.2437

DELIVERED_PACKAGE_STATUS = "DELIVERED"
