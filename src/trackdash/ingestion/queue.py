"""Inbound queue for live label updates.

Transports (webhook handlers, websocket readers, pollers) only enqueue
:class:`LabelUpdateEvent`s. A single consumer applies them to the
:class:`LabelStore` in the order they arrived, which is what keeps two
updates for the same label from being applied out of order.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from trackdash.models.realtime import RealTimeLabel
from trackdash.state.events import LabelUpdateEvent
from trackdash.state.store import LabelStore

_logger = logging.getLogger(__name__)

LabelListener = Callable[[RealTimeLabel, LabelUpdateEvent], None]


class LabelUpdateQueue:
    """FIFO of label updates with a single applying consumer.

    Use :meth:`drain` to apply pending events synchronously (tests,
    polling loops) or :meth:`start` to run a background consumer task.
    """

    def __init__(self, store: LabelStore, *, maxsize: int = 0) -> None:
        self._store = store
        self._queue: asyncio.Queue[LabelUpdateEvent] = asyncio.Queue(maxsize=maxsize)
        self._listeners: list[LabelListener] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def store(self) -> LabelStore:
        return self._store

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: LabelListener) -> Callable[[], None]:
        """Call *listener* after each applied update. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _remove

    def put_nowait(self, event: LabelUpdateEvent) -> None:
        """Enqueue *event*. Raises :class:`asyncio.QueueFull` on a full bounded queue."""
        self._queue.put_nowait(event)

    async def put(self, event: LabelUpdateEvent) -> None:
        """Enqueue *event*, waiting for room on a bounded queue."""
        await self._queue.put(event)

    def drain(self) -> list[RealTimeLabel]:
        """Apply every pending event now, oldest first.

        Returns the labels that changed; dropped events are left out.
        """
        applied: list[RealTimeLabel] = []
        while True:
            try:
                event = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            try:
                label = self._apply(event)
            finally:
                self._queue.task_done()
            if label is not None:
                applied.append(label)
        return applied

    async def join(self) -> None:
        """Wait until every enqueued event has been applied."""
        await self._queue.join()

    def start(self) -> None:
        """Run the consumer as a task on the running loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._consume(), name="trackdash-label-updates")

    async def stop(self) -> None:
        """Cancel the consumer. Events still queued stay pending."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _consume(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self._apply(event)
            except Exception:
                _logger.warning("Failed to apply update for label %s", event.label_id, exc_info=True)
            finally:
                self._queue.task_done()

    def _apply(self, event: LabelUpdateEvent) -> RealTimeLabel | None:
        label = self._store.apply(event)
        if label is None:
            return None
        _logger.debug(
            "Label %s moved to %.5f,%.5f (%s)",
            label.id,
            label.position.lat,
            label.position.lng,
            event.source,
        )
        for listener in list(self._listeners):
            try:
                listener(label, event)
            except Exception:
                _logger.warning("Label listener failed for %s", label.id, exc_info=True)
        return label
