"""Dashboard configuration for trackdash."""

from __future__ import annotations

import dataclasses
import os
from datetime import datetime
from typing import Any

from trackdash._constants import DEFAULT_RATE, SIMULATION_EPOCH, TICKS_PER_SECOND
from trackdash.clock import ClockMode
from trackdash.exceptions import DashboardConfigError
from trackdash.ingestion.normalize import parse_timestamp


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    """Session configuration.

    Parameters
    ----------
    mode : ClockMode
        Initial display mode. ``demo`` replays recorded traces at one
        virtual minute per real second, ``realtime`` follows live devices
        at one virtual second per real second.
    start_time : datetime
        Virtual time the clock starts from and returns to on restart.
        Must be timezone-aware.
    ticks_per_second : int
        Clock tick cadence. Defaults to 10 for smooth motion.
    default_rate : float
        Initial playback multiplier. Values outside the mode's allowed
        set fall back to ``1``.
    strict_trace_order : bool
        Reject demo traces whose timestamps go backwards when loading
        them. The engine itself never validates or re-sorts.
    auto_switch_realtime : bool
        Switch the clock to realtime mode when a live label update is
        applied while the session is in demo mode.
    fleet_file : str or None
        Optional JSON file with demo assets. When unset the built-in
        demo fleet is used.
    queue_maxsize : int
        Bound for the inbound label update queue (``0`` = unbounded).
    """

    mode: ClockMode = ClockMode.DEMO
    start_time: datetime = SIMULATION_EPOCH
    ticks_per_second: int = TICKS_PER_SECOND
    default_rate: float = DEFAULT_RATE
    strict_trace_order: bool = False
    auto_switch_realtime: bool = True
    fleet_file: str | None = None
    queue_maxsize: int = 0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", ClockMode(self.mode))
        except ValueError as exc:
            raise DashboardConfigError(f"mode must be 'demo' or 'realtime', got {self.mode!r}") from exc
        if self.start_time.tzinfo is None:
            raise DashboardConfigError("start_time must be timezone-aware")
        if self.ticks_per_second <= 0:
            raise DashboardConfigError(f"ticks_per_second must be positive, got {self.ticks_per_second}")
        if self.queue_maxsize < 0:
            raise DashboardConfigError(f"queue_maxsize must not be negative, got {self.queue_maxsize}")

    @classmethod
    def from_env(cls, **overrides: Any) -> DashboardConfig:
        """Create configuration from ``TRACKDASH_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        mode_env = env.get("TRACKDASH_MODE")
        if mode_env is not None:
            config_kwargs["mode"] = mode_env.strip().lower()

        start_env = env.get("TRACKDASH_START_TIME")
        if start_env is not None:
            start_time = parse_timestamp(start_env)
            if start_time is None:
                raise DashboardConfigError(f"TRACKDASH_START_TIME is not a timestamp: {start_env!r}")
            config_kwargs["start_time"] = start_time

        try:
            ticks_env = env.get("TRACKDASH_TICKS_PER_SECOND")
            if ticks_env is not None:
                config_kwargs["ticks_per_second"] = int(ticks_env)

            rate_env = env.get("TRACKDASH_DEFAULT_RATE")
            if rate_env is not None:
                config_kwargs["default_rate"] = float(rate_env)

            maxsize_env = env.get("TRACKDASH_QUEUE_MAXSIZE")
            if maxsize_env is not None:
                config_kwargs["queue_maxsize"] = int(maxsize_env)
        except ValueError as exc:
            raise DashboardConfigError(f"invalid numeric TRACKDASH_* setting: {exc}") from exc

        config_kwargs["strict_trace_order"] = _env_bool(env.get("TRACKDASH_STRICT_TRACE_ORDER"), False)
        config_kwargs["auto_switch_realtime"] = _env_bool(env.get("TRACKDASH_AUTO_SWITCH_REALTIME"), True)

        fleet_env = env.get("TRACKDASH_FLEET_FILE")
        if fleet_env:
            config_kwargs["fleet_file"] = fleet_env

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
