"""Simulated clock driving the dashboard's virtual time.

The clock is a single timeline advanced in fixed increments: ten ticks
per real second, each worth a tenth of the mode's per-second rate. Demo
mode plays one virtual minute per real second at 1x, realtime mode one
virtual second per real second.

:class:`SimulatedClock` is plain state and arithmetic so it can be
driven deterministically in tests. :class:`ClockDriver` runs it on an
asyncio loop using wall-clock deltas, which keeps scheduling jitter from
turning into drift.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import math
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from trackdash._constants import (
    DEFAULT_RATE,
    DEMO_MS_PER_SECOND,
    DEMO_RATES,
    REALTIME_MS_PER_SECOND,
    REALTIME_RATES,
    SIMULATION_EPOCH,
    TICKS_PER_SECOND,
)

_logger = logging.getLogger(__name__)

# Absorbs float error when converting real seconds to whole ticks.
_TICK_EPSILON = 1e-9


class ClockMode(enum.StrEnum):
    DEMO = "demo"
    REALTIME = "realtime"


class ClockState(enum.StrEnum):
    RUNNING = "running"
    STOPPED = "stopped"


_BASE_MS_PER_SECOND: dict[ClockMode, float] = {
    ClockMode.DEMO: DEMO_MS_PER_SECOND,
    ClockMode.REALTIME: REALTIME_MS_PER_SECOND,
}

_ALLOWED_RATES: dict[ClockMode, tuple[float, ...]] = {
    ClockMode.DEMO: DEMO_RATES,
    ClockMode.REALTIME: REALTIME_RATES,
}


def allowed_rates(mode: ClockMode | str) -> tuple[float, ...]:
    """Playback multipliers offered for *mode*, slowest first."""
    return _ALLOWED_RATES[ClockMode(mode)]


class SimulatedClock:
    """Virtual time with a playback rate, a mode and a running flag.

    None of the operations raise for ordinary input. An unsupported rate
    falls back to ``1``.
    """

    def __init__(
        self,
        *,
        mode: ClockMode | str = ClockMode.DEMO,
        epoch: datetime = SIMULATION_EPOCH,
        rate: float = DEFAULT_RATE,
        ticks_per_second: int = TICKS_PER_SECOND,
        running: bool = True,
    ) -> None:
        self._mode = ClockMode(mode)
        self._epoch = epoch
        self._now = epoch
        self._ticks_per_second = ticks_per_second
        self._rate = self._resolve_rate(rate)
        self._running = running
        self._carry_seconds = 0.0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def current_time(self) -> datetime:
        """Snapshot of the current virtual time."""
        return self._now

    @property
    def epoch(self) -> datetime:
        return self._epoch

    @property
    def mode(self) -> ClockMode:
        return self._mode

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def ticks_per_second(self) -> int:
        return self._ticks_per_second

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> ClockState:
        return ClockState.RUNNING if self._running else ClockState.STOPPED

    @property
    def tick_increment(self) -> timedelta:
        """Virtual time added by a single tick at the current mode and rate."""
        base_ms = _BASE_MS_PER_SECOND[self._mode]
        micros = round(base_ms * self._rate * 1000 / self._ticks_per_second)
        return timedelta(microseconds=micros)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Resume advancing. No-op when already running."""
        if self._running:
            return
        self._running = True
        self._carry_seconds = 0.0
        _logger.debug("Clock started at %s", self._now.isoformat())

    def pause(self) -> None:
        """Stop advancing. No-op when already stopped."""
        if not self._running:
            return
        self._running = False
        self._carry_seconds = 0.0
        _logger.debug("Clock paused at %s", self._now.isoformat())

    def restart(self) -> None:
        """Return to the epoch and run, whatever the previous state."""
        self._now = self._epoch
        self._running = True
        self._carry_seconds = 0.0
        _logger.debug("Clock restarted at %s", self._epoch.isoformat())

    def set_rate(self, multiplier: float) -> None:
        """Change the playback multiplier, keeping time and running state."""
        self._rate = self._resolve_rate(multiplier)

    def set_mode(self, mode: ClockMode | str) -> None:
        """Switch mode without touching virtual time; the rate resets to 1."""
        new_mode = ClockMode(mode)
        if new_mode != self._mode:
            _logger.debug("Clock mode %s -> %s", self._mode, new_mode)
        self._mode = new_mode
        self._rate = DEFAULT_RATE

    # ------------------------------------------------------------------
    # Advancement
    # ------------------------------------------------------------------

    def tick(self) -> datetime:
        """Advance by one tick while running; return the virtual time."""
        if self._running:
            self._now += self.tick_increment
        return self._now

    def advance(self, real_seconds: float) -> datetime:
        """Advance by the whole ticks contained in *real_seconds* of wall time.

        The fractional remainder is carried into the next call, so the
        result does not depend on how a real-time interval is split up.
        Stopped clocks and non-positive deltas do not move.
        """
        if not self._running or real_seconds <= 0:
            return self._now

        total = self._carry_seconds + real_seconds
        ticks = math.floor(total * self._ticks_per_second + _TICK_EPSILON)
        self._carry_seconds = max(0.0, total - ticks / self._ticks_per_second)
        if ticks > 0:
            self._now += self.tick_increment * ticks
        return self._now

    def _resolve_rate(self, multiplier: float) -> float:
        allowed = _ALLOWED_RATES[self._mode]
        for candidate in allowed:
            if math.isclose(candidate, multiplier):
                return candidate
        _logger.debug("Rate %r not offered in %s mode, using %s", multiplier, self._mode, DEFAULT_RATE)
        return DEFAULT_RATE


class ClockDriver:
    """Runs a :class:`SimulatedClock` on the asyncio loop.

    Parameters
    ----------
    clock : SimulatedClock
        Clock to advance. The driver is its only writer.
    on_tick : callable, optional
        Called with the new virtual time whenever it moved.
    monotonic : callable
        Wall-clock source in seconds. Injectable for tests.
    sleep : callable
        Awaitable sleep. Injectable for tests.
    """

    def __init__(
        self,
        clock: SimulatedClock,
        *,
        on_tick: Callable[[datetime], None] | None = None,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clock = clock
        self._on_tick = on_tick
        self._monotonic = monotonic
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the tick loop on the running event loop."""
        if self.is_running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name="trackdash-clock")
        _logger.debug("Clock driver started (%s ticks/s)", self._clock.ticks_per_second)

    async def stop(self) -> None:
        """Cancel the tick loop and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.debug("Clock driver stopped at %s", self._clock.current_time().isoformat())

    async def _run(self) -> None:
        interval = 1.0 / self._clock.ticks_per_second
        last = self._monotonic()
        while True:
            await self._sleep(interval)
            now = self._monotonic()
            before = self._clock.current_time()
            current = self._clock.advance(now - last)
            last = now
            if self._on_tick is None or current == before:
                continue
            try:
                self._on_tick(current)
            except Exception:
                _logger.warning("Clock tick listener failed", exc_info=True)
