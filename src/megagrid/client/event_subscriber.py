"""Two independent confirmation subscriptions, each feeding its own channel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from megagrid.protocol import CELL_COLORED_EVENT, CELLS_COLORED_EVENT, EVENT_KINDS, GridEvent

from .interfaces import EventSource


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmedBatch:
    """One delivery from one subscription, flattened to ``(id, color)`` pairs."""

    kind: str
    entries: Tuple[Tuple[int, int], ...]


@dataclass
class EventChannel:
    """FIFO of delivered batches for a single subscription."""

    kind: str
    queue: "asyncio.Queue[ConfirmedBatch]" = field(default_factory=asyncio.Queue)
    delivered: int = 0

    def post(self, events: Sequence[GridEvent]) -> None:
        entries: List[Tuple[int, int]] = []
        for event in events:
            entries.extend(event.entries())
        self.queue.put_nowait(ConfirmedBatch(kind=self.kind, entries=tuple(entries)))
        self.delivered += 1

    def drain(self) -> List[ConfirmedBatch]:
        drained: List[ConfirmedBatch] = []
        while True:
            try:
                drained.append(self.queue.get_nowait())
            except asyncio.QueueEmpty:
                return drained


class EventSubscriber:
    """Open both subscriptions and expose one channel per event kind.

    Order is preserved within a channel; nothing orders one channel against
    the other.
    """

    def __init__(self, source: Optional[EventSource]) -> None:
        self._source = source
        self._channels: Dict[str, EventChannel] = {kind: EventChannel(kind) for kind in EVENT_KINDS}
        self._subscribed: Dict[str, str] = {}
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def channel(self, kind: str) -> EventChannel:
        return self._channels[kind]

    @property
    def channels(self) -> Tuple[EventChannel, ...]:
        return tuple(self._channels.values())

    async def start(self) -> bool:
        """Open both subscriptions; return ``False`` when there is no read session."""

        if self._source is None:
            logger.debug("event subscriber: no read session; subscriptions skipped")
            return False
        if self._started:
            return True
        for kind in (CELL_COLORED_EVENT, CELLS_COLORED_EVENT):
            # A retry after a partial failure only opens the missing kinds.
            if kind in self._subscribed:
                continue
            try:
                self._subscribed[kind] = await self._source.subscribe(kind, self._channels[kind].post)
            except Exception as exc:
                logger.warning("Event subscription for %s failed; confirmed events will not be shown (%s)", kind, exc)
                return False
        self._started = True
        logger.info("Subscribed to %s and %s", CELL_COLORED_EVENT, CELLS_COLORED_EVENT)
        return True

    def drain(self) -> List[ConfirmedBatch]:
        """Drain every channel, one channel after the other."""

        batches: List[ConfirmedBatch] = []
        for channel in self._channels.values():
            batches.extend(channel.drain())
        return batches

    async def next_batch(self) -> ConfirmedBatch:
        """Wait for whichever channel delivers next."""

        for channel in self._channels.values():
            if not channel.queue.empty():
                return channel.queue.get_nowait()
        getters = {
            asyncio.ensure_future(channel.queue.get()): channel for channel in self._channels.values()
        }
        try:
            done, _ = await asyncio.wait(getters.keys(), return_when=asyncio.FIRST_COMPLETED)
        finally:
            for getter in getters:
                if not getter.done():
                    getter.cancel()
        ready = [getter for getter in getters if getter in done]
        first = ready[0].result()
        # A second getter may have completed in the same turn; put its batch back.
        for extra in ready[1:]:
            channel = getters[extra]
            _requeue_front(channel, extra.result())
        return first


def _requeue_front(channel: EventChannel, batch: ConfirmedBatch) -> None:
    pending = channel.drain()
    channel.queue.put_nowait(batch)
    for item in pending:
        channel.queue.put_nowait(item)


__all__ = ["ConfirmedBatch", "EventChannel", "EventSubscriber"]
