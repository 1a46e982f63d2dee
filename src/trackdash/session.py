"""Simulation session: the single owner of a dashboard's live state.

A session holds the simulated clock, the static demo fleet, the
real-time label store and the inbound update queue. Presentation code
reads snapshots from it; only its clock driver writes virtual time. Label
writes go through the update queue; direct calls such as
:meth:`SimulationSession.track_package` first apply whatever is still
queued, so every write lands in arrival order.

Lifecycle is ``create -> run -> teardown``::

    async with SimulationSession(DashboardConfig.from_env()) as session:
        ...
        views = session.asset_views()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from trackdash.clock import ClockDriver, ClockMode, SimulatedClock
from trackdash.config import DashboardConfig
from trackdash.engine import check_trace_order, classify_status, position_at, travelled_trace
from trackdash.exceptions import TrackDashError, UnknownAssetError
from trackdash.ingestion.fleet import default_demo_assets, load_assets
from trackdash.ingestion.queue import LabelUpdateQueue
from trackdash.ingestion.tracking import event_from_position_message, event_from_webhook, label_from_package
from trackdash.models.realtime import RealTimeLabel
from trackdash.models.summary import AssetView, Checkpoint, TraceSummary
from trackdash.models.trace import AssetStatus, TracePoint, TrackedAsset
from trackdash.state.events import LabelUpdateEvent
from trackdash.state.store import LabelStore
from trackdash.stats import checkpoints, duration_minutes, summarize

_logger = logging.getLogger(__name__)


class SimulationSession:
    """Owns the clock, the demo fleet and the real-time labels of one dashboard.

    Parameters
    ----------
    config : DashboardConfig, optional
        Session settings. Defaults to :class:`DashboardConfig` defaults.
    assets : iterable of TrackedAsset, optional
        Demo fleet. When omitted it is loaded from ``config.fleet_file``
        or the built-in fleet.
    store : LabelStore, optional
        Label store to use, e.g. one pre-populated by the caller.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        *,
        assets: Iterable[TrackedAsset] | None = None,
        store: LabelStore | None = None,
    ) -> None:
        self._config = config or DashboardConfig()
        cfg = self._config

        if assets is None:
            if cfg.fleet_file:
                assets = load_assets(cfg.fleet_file, strict_order=cfg.strict_trace_order)
            else:
                assets = default_demo_assets()
        elif cfg.strict_trace_order:
            assets = list(assets)
            for asset in assets:
                check_trace_order(asset.trace, asset_id=asset.id)
        self._assets: dict[str, TrackedAsset] = {asset.id: asset for asset in assets}

        self._clock = SimulatedClock(
            mode=cfg.mode,
            epoch=cfg.start_time,
            rate=cfg.default_rate,
            ticks_per_second=cfg.ticks_per_second,
        )
        self._labels = store if store is not None else LabelStore()
        self._updates = LabelUpdateQueue(self._labels, maxsize=cfg.queue_maxsize)
        self._updates.add_listener(self._on_label_applied)
        self._tick_listeners: list[Callable[[datetime], None]] = []
        self._driver = ClockDriver(self._clock, on_tick=self._on_tick)
        self._closed = False

    async def __aenter__(self) -> SimulationSession:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the clock driver and the label update consumer."""
        if self._closed:
            raise TrackDashError("session has been closed")
        self._driver.start()
        self._updates.start()
        _logger.debug(
            "Session started mode=%s assets=%d labels=%d",
            self._clock.mode,
            len(self._assets),
            len(self._labels),
        )

    async def close(self) -> None:
        """Stop ticking and consuming updates. The session cannot be restarted."""
        await self._driver.stop()
        await self._updates.stop()
        self._closed = True
        _logger.debug("Session closed at %s", self._clock.current_time().isoformat())

    @property
    def is_running(self) -> bool:
        return self._driver.is_running

    # ------------------------------------------------------------------
    # Owned state
    # ------------------------------------------------------------------

    @property
    def config(self) -> DashboardConfig:
        return self._config

    @property
    def clock(self) -> SimulatedClock:
        return self._clock

    @property
    def labels(self) -> LabelStore:
        return self._labels

    @property
    def updates(self) -> LabelUpdateQueue:
        return self._updates

    @property
    def assets(self) -> list[TrackedAsset]:
        return list(self._assets.values())

    def asset(self, asset_id: str) -> TrackedAsset:
        try:
            return self._assets[asset_id]
        except KeyError:
            raise UnknownAssetError(asset_id) from None

    def current_time(self) -> datetime:
        return self._clock.current_time()

    def select_mode(self, mode: ClockMode | str) -> None:
        """Switch between demo and realtime display; the rate resets to 1."""
        self._clock.set_mode(mode)

    def add_tick_listener(self, listener: Callable[[datetime], None]) -> None:
        """Call *listener* with the virtual time after each driver tick."""
        self._tick_listeners.append(listener)

    # ------------------------------------------------------------------
    # Demo views
    # ------------------------------------------------------------------

    def asset_view(self, asset_id: str, at: datetime | None = None) -> AssetView:
        """Position and status of one demo asset at *at* (default: now)."""
        asset = self.asset(asset_id)
        t = at if at is not None else self._clock.current_time()
        return AssetView(
            asset_id=asset.id,
            display_name=asset.display_name,
            position=position_at(asset.trace, t),
            status=classify_status(asset.trace, asset.target_reached, t),
            duration_minutes=duration_minutes(asset.trace),
            at=t,
        )

    def asset_views(
        self,
        at: datetime | None = None,
        *,
        status: AssetStatus | str | None = None,
    ) -> list[AssetView]:
        """Views of every demo asset that has something to display.

        With *status* only assets currently in that status are returned.
        """
        t = at if at is not None else self._clock.current_time()
        wanted = AssetStatus(status) if status is not None else None
        views = [self.asset_view(asset.id, t) for asset in self._assets.values() if asset.trace]
        if wanted is None:
            return views
        return [view for view in views if view.status == wanted]

    def travelled(self, asset_id: str, at: datetime | None = None) -> list[TracePoint]:
        """Recorded points of an asset's trace already passed at *at* (default: now)."""
        asset = self.asset(asset_id)
        t = at if at is not None else self._clock.current_time()
        return travelled_trace(asset.trace, t)

    def summary(self, asset_id: str) -> TraceSummary:
        asset = self.asset(asset_id)
        return summarize(asset.trace, target_reached=asset.target_reached, asset_id=asset.id)

    def checkpoints(self, asset_id: str) -> list[Checkpoint]:
        return checkpoints(self.asset(asset_id).trace)

    # ------------------------------------------------------------------
    # Real-time labels
    # ------------------------------------------------------------------

    def submit(self, event: LabelUpdateEvent) -> None:
        """Queue a label update; it is applied in arrival order."""
        self._updates.put_nowait(event)

    def submit_webhook(self, payload: Mapping[str, Any]) -> bool:
        """Queue a tracking-service location push. ``False`` if it was ignored."""
        event = event_from_webhook(payload)
        if event is None:
            return False
        self.submit(event)
        return True

    def submit_message(self, message: Mapping[str, Any]) -> bool:
        """Queue a dashboard ``update-position`` message. ``False`` if it was ignored."""
        event = event_from_position_message(message)
        if event is None:
            return False
        self.submit(event)
        return True

    def register_device(self, device_id: str, display_name: str | None = None) -> RealTimeLabel:
        self._apply_pending()
        return self._labels.register(device_id, display_name)

    def track_package(self, package: Mapping[str, Any]) -> RealTimeLabel:
        """Show a tracking-service package as a real-time label."""
        label = label_from_package(package)
        self._apply_pending()
        self._labels.add(label)
        self._switch_to_realtime()
        return label

    def remove_label(self, label_id: str) -> bool:
        self._apply_pending()
        return self._labels.remove(label_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_pending(self) -> None:
        # Direct store writes arrive after everything already queued.
        self._updates.drain()

    def _switch_to_realtime(self) -> None:
        if not self._config.auto_switch_realtime or self._clock.mode == ClockMode.REALTIME:
            return
        self._clock.set_mode(ClockMode.REALTIME)
        _logger.info("Live label update received, switched to realtime mode")

    def _on_label_applied(self, label: RealTimeLabel, event: LabelUpdateEvent) -> None:
        self._switch_to_realtime()

    def _on_tick(self, now: datetime) -> None:
        for listener in list(self._tick_listeners):
            listener(now)
