"""Merge optimistic local edits and confirmed remote events into one surface.

The engine owns the :class:`OptimisticBuffer` and is the only writer to the
render surface. Every local edit and every confirmed entry is exactly one
``paint_cell`` call; whichever paint lands last is what the cell shows.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from megagrid.codec import (
    cell_at_pixel,
    coords_of,
    format_color,
    normalize_color,
    random_color,
)
from megagrid.config import DEFAULT_GRID_DIMENSION, NetworkDescriptor, clamp_cell_px

from .event_subscriber import ConfirmedBatch, EventSubscriber
from .interfaces import EventSource, GridReader, RenderSurface, WalletProvider, WriteSession
from .network_negotiator import NegotiationResult, NetworkNegotiator
from .optimistic_buffer import OptimisticBuffer
from .status import StatusIndicator
from .transaction_submitter import FlushResult, FlushStatus, TransactionSubmitter


logger = logging.getLogger(__name__)


CHECKER_EVEN = 0x141414
CHECKER_ODD = 0x101010


class ColorMode(str, Enum):
    PICKER = "picker"
    RANDOM = "random"


@dataclass
class GridSession:
    """Per-session state that used to live in module globals."""

    dimension: int = DEFAULT_GRID_DIMENSION
    buffer: OptimisticBuffer = field(default_factory=OptimisticBuffer)
    write_session: Optional[WriteSession] = None
    address: Optional[str] = None

    @property
    def cell_count(self) -> int:
        return self.dimension * self.dimension

    def contains(self, cell_id: int) -> bool:
        return 0 <= cell_id < self.cell_count


def checker_color(x: int, y: int) -> int:
    return CHECKER_EVEN if (x + y) % 2 == 0 else CHECKER_ODD


class ReconciliationEngine:
    def __init__(
        self,
        surface: RenderSurface,
        descriptor: NetworkDescriptor,
        *,
        reader: Optional[GridReader] = None,
        events: Optional[EventSource] = None,
        wallet: Optional[WalletProvider] = None,
        session: Optional[GridSession] = None,
        rng: Optional[random.Random] = None,
        status: Optional[StatusIndicator] = None,
    ) -> None:
        self.surface = surface
        self.session = session or GridSession()
        self.status = status or StatusIndicator()
        self.color_mode = ColorMode.RANDOM
        self.picker_color = 0xFFFFFF
        self._reader = reader
        self._rng = rng or random.Random()
        self._subscriber = EventSubscriber(events)
        self._negotiator = NetworkNegotiator(wallet, descriptor)
        self._submitter = TransactionSubmitter(self.session.buffer, lambda: self.session.write_session)
        self._started = False

    # ------------------------------------------------------------------
    @property
    def buffer(self) -> OptimisticBuffer:
        return self.session.buffer

    @property
    def dimension(self) -> int:
        return self.session.dimension

    @property
    def subscriber(self) -> EventSubscriber:
        return self._subscriber

    @property
    def negotiator(self) -> NetworkNegotiator:
        return self._negotiator

    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Read the grid dimension, draw the placeholder, open subscriptions."""

        self.session.dimension = await self._read_dimension()
        self._init_surface()
        await self._subscriber.start()
        self._started = True

    async def _read_dimension(self) -> int:
        if self._reader is None:
            logger.warning("No grid reader; using dimension %d", DEFAULT_GRID_DIMENSION)
            return DEFAULT_GRID_DIMENSION
        try:
            size = int(await self._reader.get_grid_dimension())
        except Exception as exc:
            logger.warning("Grid dimension read failed; using %d (%s)", DEFAULT_GRID_DIMENSION, exc)
            return DEFAULT_GRID_DIMENSION
        if size <= 0:
            logger.warning("Grid dimension read returned %d; using %d", size, DEFAULT_GRID_DIMENSION)
            return DEFAULT_GRID_DIMENSION
        logger.info("Grid dimension: %d", size)
        return size

    def _init_surface(self) -> None:
        n = self.session.dimension
        self.surface.init_surface(n, n)
        for y in range(n):
            for x in range(n):
                self.surface.paint_cell(x, y, checker_color(x, y))

    def set_cell_px(self, cell_px: int) -> int:
        """Resize cells and redraw the placeholder; painted cells are not replayed."""

        clamped = clamp_cell_px(cell_px)
        self.surface.cell_px = clamped
        if self._started:
            self._init_surface()
        return clamped

    # ------------------------------------------------------------------
    def _paint(self, cell_id: int, color: int) -> None:
        x, y = coords_of(cell_id, self.session.dimension)
        self.surface.paint_cell(x, y, color)

    def local_edit(self, cell_id: int, color: int) -> int:
        """Buffer ``color`` for ``cell_id`` and paint it immediately."""

        if not self.session.contains(cell_id):
            raise ValueError(f"cell id {cell_id} outside grid of {self.session.cell_count} cells")
        normalized = self.session.buffer.upsert(cell_id, color)
        self._paint(cell_id, normalized)
        return normalized

    def next_color(self) -> int:
        if self.color_mode is ColorMode.PICKER:
            return normalize_color(self.picker_color)
        return random_color(self._rng)

    def pointer_move(self, px: float, py: float) -> Optional[int]:
        cell_id = cell_at_pixel(px, py, self.surface.cell_px, self.session.dimension)
        if cell_id is None:
            return None
        self.surface.clear_overlay()
        self.surface.draw_highlight(*coords_of(cell_id, self.session.dimension))
        return cell_id

    def pointer_click(self, px: float, py: float) -> Optional[int]:
        cell_id = cell_at_pixel(px, py, self.surface.cell_px, self.session.dimension)
        if cell_id is None:
            return None
        self.local_edit(cell_id, self.next_color())
        return cell_id

    # ------------------------------------------------------------------
    def apply_confirmed(self, batch: ConfirmedBatch) -> int:
        """Paint one delivered batch in array order; return the paints issued.

        Confirmation leaves the optimistic buffer untouched.
        """

        painted = 0
        for cell_id, color in batch.entries:
            if not self.session.contains(cell_id):
                logger.warning("Dropping %s entry for out-of-grid cell %d", batch.kind, cell_id)
                continue
            self._paint(cell_id, normalize_color(color))
            painted += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("applied %s batch: entries=%d painted=%d", batch.kind, len(batch.entries), painted)
        return painted

    def apply_all(self, batches: Iterable[ConfirmedBatch]) -> int:
        return sum(self.apply_confirmed(batch) for batch in batches)

    def drain_events(self) -> int:
        """Apply everything currently queued on the subscription channels."""

        return self.apply_all(self._subscriber.drain())

    async def run_ingest(self, stop: Optional[asyncio.Event] = None) -> None:
        """Apply confirmed batches as they arrive until ``stop`` is set."""

        while stop is None or not stop.is_set():
            if stop is None:
                batch = await self._subscriber.next_batch()
            else:
                batch_task = asyncio.ensure_future(self._subscriber.next_batch())
                stop_task = asyncio.ensure_future(stop.wait())
                done, _ = await asyncio.wait({batch_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
                if batch_task not in done:
                    batch_task.cancel()
                    break
                stop_task.cancel()
                batch = batch_task.result()
            self.apply_confirmed(batch)

    # ------------------------------------------------------------------
    async def connect(self) -> NegotiationResult:
        result = await self._negotiator.connect()
        if result.connected:
            self.session.write_session = result.session
            self.session.address = result.address
            self.status.set(result.message or "connected", level=logging.INFO)
        else:
            self.status.set(result.message or "Wallet connection failed", level=logging.WARNING)
        return result

    async def flush(self) -> FlushResult:
        pending = len(self.session.buffer)
        if self.session.write_session is not None and pending:
            self.status.set(f"sending {pending} tiles…")
        result = await self._submitter.flush()
        if result.status is FlushStatus.NO_CHANGES:
            self.status.set("no changes")
        elif result.status is FlushStatus.NOT_CONNECTED:
            self.status.set(result.error or "Connect wallet first.", level=logging.WARNING)
        elif result.status is FlushStatus.SUBMITTED:
            tx = result.tx_hash or ""
            self.status.set(f"tx: {tx[:10]}…" if tx else "tx submitted", level=logging.INFO)
        else:
            self.status.set("tx failed", level=logging.WARNING)
        return result

    def describe_pending(self) -> str:
        return ", ".join(
            f"{cell_id}={format_color(color)}" for cell_id, color in self.session.buffer.as_dict().items()
        )


__all__ = [
    "CHECKER_EVEN",
    "CHECKER_ODD",
    "ColorMode",
    "GridSession",
    "ReconciliationEngine",
    "checker_color",
]
