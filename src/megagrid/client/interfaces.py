"""Collaborator interfaces consumed by the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence, Tuple

from megagrid.config import NetworkDescriptor
from megagrid.protocol import GridEvent


class StepOutcome(str, Enum):
    """Result of a single wallet negotiation step."""

    SUCCEEDED = "succeeded"
    REJECTED = "rejected"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SubmitResult:
    ok: bool
    tx_hash: Optional[str] = None
    error: Optional[str] = None


EventHandler = Callable[[Sequence[GridEvent]], None]


class GridReader(Protocol):
    async def get_grid_dimension(self) -> int: ...

    async def get_cell_color(self, cell_id: int) -> int: ...


class EventSource(Protocol):
    async def subscribe(self, kind: str, handler: EventHandler) -> Any: ...


class WriteSession(Protocol):
    network_id: int
    address: str

    async def submit_batch(self, cell_ids: Sequence[int], colors: Sequence[int]) -> SubmitResult: ...


class WalletProvider(Protocol):
    async def get_current_network(self) -> Optional[int]: ...

    async def switch_network(self, network_id: int) -> StepOutcome: ...

    async def add_network(self, descriptor: NetworkDescriptor) -> StepOutcome: ...

    async def request_accounts(self) -> Tuple[StepOutcome, Sequence[str]]: ...

    def bind_session(self, network_id: int, address: str) -> WriteSession: ...


class RenderSurface(Protocol):
    """Paints grid cells; ``init_surface`` takes the grid size in cells."""

    cell_px: int

    def init_surface(self, width: int, height: int) -> None: ...

    def paint_cell(self, x: int, y: int, color: int) -> None: ...

    def clear_overlay(self) -> None: ...

    def draw_highlight(self, x: int, y: int) -> None: ...


StatusListener = Callable[[str], None]


__all__ = [
    "EventHandler",
    "EventSource",
    "GridReader",
    "RenderSurface",
    "StatusListener",
    "StepOutcome",
    "SubmitResult",
    "WalletProvider",
    "WriteSession",
]
