"""In-memory store for real-time labels.

This is the only component allowed to change a label. Updates are
applied in arrival order: the latest event to arrive wins, whatever its
payload timestamp says.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

from trackdash._constants import DEFAULT_LABEL_LAT, DEFAULT_LABEL_LNG
from trackdash.models.realtime import LabelMetadata, RealTimeLabel
from trackdash.models.trace import TracePoint
from trackdash.state.events import LabelUpdateEvent, UpdateSource

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _default_label_id(device_id: str) -> str:
    return f"rt-{device_id}"


class LabelStore:
    """Label id to :class:`RealTimeLabel` map.

    Labels are immutable models; every write swaps in a new object under
    the same key, so readers only ever see whole labels.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[str], str] = _default_label_id,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._labels: dict[str, RealTimeLabel] = {}

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label_id: object) -> bool:
        return label_id in self._labels

    def __iter__(self) -> Iterator[RealTimeLabel]:
        return iter(list(self._labels.values()))

    def labels(self) -> list[RealTimeLabel]:
        """All labels in registration order."""
        return list(self._labels.values())

    def get(self, label_id: str) -> RealTimeLabel | None:
        return self._labels.get(label_id)

    def get_by_device(self, device_id: str) -> RealTimeLabel | None:
        for label in self._labels.values():
            if label.device_id == device_id:
                return label
        return None

    def register(self, device_id: str, display_name: str | None = None) -> RealTimeLabel:
        """Add a label for *device_id*, or return the one already tracking it.

        New labels sit at the default position until the device reports.
        """
        existing = self.get_by_device(device_id)
        if existing is not None:
            return existing

        now = self._clock()
        label = RealTimeLabel(
            id=self._id_factory(device_id),
            device_id=device_id,
            display_name=display_name or "",
            position=TracePoint(lat=DEFAULT_LABEL_LAT, lng=DEFAULT_LABEL_LNG, timestamp=now),
            last_updated=now,
            created_at=now,
        )
        self._labels[label.id] = label
        _logger.debug("Registered label %s for device %s", label.id, device_id)
        return label

    def add(self, label: RealTimeLabel) -> RealTimeLabel:
        """Insert or replace a fully-formed label (e.g. from a package record)."""
        self._labels[label.id] = label
        return label

    def apply(self, event: LabelUpdateEvent) -> RealTimeLabel | None:
        """Apply a position update.

        Pushed updates create the label on its first report. Manual
        position messages only move labels that already exist; for an
        unknown label they are dropped and ``None`` is returned.
        """
        existing = self._labels.get(event.label_id)
        if existing is None:
            if event.source == UpdateSource.MANUAL:
                _logger.debug("Ignoring position message for unknown label %s", event.label_id)
                return None
            label = RealTimeLabel(
                id=event.label_id,
                device_id=event.device_id or event.label_id,
                display_name=event.display_name or "",
                position=event.position,
                is_active=True if event.is_active is None else event.is_active,
                last_updated=event.observed_at,
                created_at=event.observed_at,
                metadata=event.metadata or LabelMetadata(),
            )
            _logger.debug("Label %s created from %s update", label.id, event.source)
        else:
            label = existing.moved_to(
                event.position,
                received_at=event.observed_at,
                metadata=event.metadata,
                is_active=event.is_active,
                display_name=event.display_name,
            )
        self._labels[label.id] = label
        return label

    def remove(self, label_id: str) -> bool:
        """Drop a label. Returns ``False`` when it was not tracked."""
        return self._labels.pop(label_id, None) is not None
