from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from megagrid.client.interfaces import EventHandler, StepOutcome, SubmitResult
from megagrid.config import NativeCurrency, NetworkDescriptor


TARGET_CHAIN = 6342


class RecordingSurface:
    def __init__(self, cell_px: int = 5) -> None:
        self.cell_px = cell_px
        self.size: Optional[Tuple[int, int]] = None
        self.paints: List[Tuple[int, int, int]] = []
        self.highlights: List[Tuple[int, int]] = []
        self.overlay_clears = 0
        self.inits = 0

    def init_surface(self, width: int, height: int) -> None:
        self.size = (width, height)
        self.inits += 1
        self.paints.clear()

    def paint_cell(self, x: int, y: int, color: int) -> None:
        self.paints.append((x, y, color))

    def clear_overlay(self) -> None:
        self.overlay_clears += 1

    def draw_highlight(self, x: int, y: int) -> None:
        self.highlights.append((x, y))

    def last_color(self, x: int, y: int) -> Optional[int]:
        for px, py, color in reversed(self.paints):
            if (px, py) == (x, y):
                return color
        return None


class FakeReader:
    def __init__(self, dimension: Any = 4, *, error: Optional[Exception] = None) -> None:
        self.dimension = dimension
        self.error = error
        self.calls = 0

    async def get_grid_dimension(self) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.dimension

    async def get_cell_color(self, cell_id: int) -> int:
        return 0


class FakeEventSource:
    def __init__(self, *, error: Optional[Exception] = None) -> None:
        self.handlers: Dict[str, EventHandler] = {}
        self.error = error

    async def subscribe(self, kind: str, handler: EventHandler) -> str:
        if self.error is not None:
            raise self.error
        self.handlers[kind] = handler
        return f"sub-{kind}"

    def deliver(self, kind: str, events: Sequence[Any]) -> None:
        self.handlers[kind](list(events))


class FakeSession:
    def __init__(self, network_id: int = TARGET_CHAIN, address: str = "0x1234567890abcdef1234") -> None:
        self.network_id = network_id
        self.address = address
        self.calls: List[Tuple[List[int], List[int]]] = []
        self.results: List[SubmitResult] = []
        self.on_submit = None

    async def submit_batch(self, cell_ids: Sequence[int], colors: Sequence[int]) -> SubmitResult:
        self.calls.append((list(cell_ids), list(colors)))
        if self.on_submit is not None:
            self.on_submit()
        if self.results:
            return self.results.pop(0)
        return SubmitResult(ok=True, tx_hash="0xfeedfacecafebeef")


class FakeWallet:
    def __init__(
        self,
        *,
        current: Optional[int] = TARGET_CHAIN,
        switch: StepOutcome = StepOutcome.SUCCEEDED,
        add: StepOutcome = StepOutcome.SUCCEEDED,
        accounts: Tuple[StepOutcome, Sequence[str]] = (StepOutcome.SUCCEEDED, ["0xAbC0000000000000000000000000000000000001"]),
    ) -> None:
        self.current = current
        self.switch = switch
        self.add = add
        self.accounts = accounts
        self.calls: List[str] = []
        self.added: List[NetworkDescriptor] = []
        self.session = FakeSession()

    async def get_current_network(self) -> Optional[int]:
        self.calls.append("get_current_network")
        return self.current

    async def switch_network(self, network_id: int) -> StepOutcome:
        self.calls.append("switch_network")
        return self.switch

    async def add_network(self, descriptor: NetworkDescriptor) -> StepOutcome:
        self.calls.append("add_network")
        self.added.append(descriptor)
        return self.add

    async def request_accounts(self) -> Tuple[StepOutcome, Sequence[str]]:
        self.calls.append("request_accounts")
        return self.accounts

    def bind_session(self, network_id: int, address: str) -> FakeSession:
        self.calls.append("bind_session")
        self.session.network_id = network_id
        self.session.address = address
        return self.session


@pytest.fixture
def descriptor() -> NetworkDescriptor:
    return NetworkDescriptor(
        chain_id=TARGET_CHAIN,
        chain_name="MegaETH Testnet",
        native_currency=NativeCurrency(),
        rpc_urls=("https://rpc.example",),
    )


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def fake_wallet_factory():
    return FakeWallet


@pytest.fixture
def fake_session_factory():
    return FakeSession


@pytest.fixture
def fake_reader_factory():
    return FakeReader


@pytest.fixture
def fake_events_factory():
    return FakeEventSource


@pytest.fixture
def surface_factory():
    return RecordingSurface
