"""Wallet provider speaking the EIP-1193 method set over an RPC channel.

Every negotiation step reports a :class:`StepOutcome` instead of raising, so
the negotiator never branches on exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from megagrid.client.interfaces import StepOutcome, SubmitResult
from megagrid.codec import normalize_color
from megagrid.config import NetworkDescriptor
from megagrid.protocol import (
    ADD_CHAIN_METHOD,
    CHAIN_ID_METHOD,
    GRID_SUBMIT_BATCH_METHOD,
    REQUEST_ACCOUNTS_METHOD,
    SWITCH_CHAIN_METHOD,
    ProtocolError,
    RpcError,
    as_int,
)

from .rpc_channel import RpcChannel


logger = logging.getLogger(__name__)


def outcome_for_error(exc: Exception) -> StepOutcome:
    if isinstance(exc, RpcError) and exc.unsupported:
        return StepOutcome.UNSUPPORTED
    return StepOutcome.REJECTED


@dataclass
class RpcWriteSession:
    """Write capability bound to one network id and one account."""

    channel: RpcChannel
    network_id: int
    address: str
    grid_address: str

    async def submit_batch(self, cell_ids: Sequence[int], colors: Sequence[int]) -> SubmitResult:
        params = [
            {
                "chainId": hex(self.network_id),
                "from": self.address,
                "to": self.grid_address,
                "ids": [int(cell_id) for cell_id in cell_ids],
                "colors": [normalize_color(color) for color in colors],
            }
        ]
        try:
            tx_hash = await self.channel.request(GRID_SUBMIT_BATCH_METHOD, params)
        except RpcError as exc:
            logger.warning("submit_batch rejected: %s", exc)
            return SubmitResult(ok=False, error=exc.message)
        return SubmitResult(ok=True, tx_hash=str(tx_hash) if tx_hash is not None else None)


class RpcWalletProvider:
    def __init__(self, channel: RpcChannel, grid_address: str) -> None:
        self._channel = channel
        self._grid_address = grid_address

    @property
    def transport(self) -> RpcChannel:
        return self._channel

    async def get_current_network(self) -> Optional[int]:
        try:
            return as_int(await self._channel.request(CHAIN_ID_METHOD))
        except (RpcError, ProtocolError) as exc:
            logger.info("Could not read wallet chain id: %s", exc)
            return None

    async def switch_network(self, network_id: int) -> StepOutcome:
        return await self._step(SWITCH_CHAIN_METHOD, [{"chainId": hex(network_id)}])

    async def add_network(self, descriptor: NetworkDescriptor) -> StepOutcome:
        return await self._step(ADD_CHAIN_METHOD, [descriptor.to_dict()])

    async def request_accounts(self) -> Tuple[StepOutcome, Sequence[str]]:
        try:
            result = await self._channel.request(REQUEST_ACCOUNTS_METHOD)
        except RpcError as exc:
            logger.info("%s failed: %s", REQUEST_ACCOUNTS_METHOD, exc)
            return outcome_for_error(exc), []
        accounts: List[str] = [str(item) for item in result] if isinstance(result, list) else []
        return StepOutcome.SUCCEEDED, accounts

    def bind_session(self, network_id: int, address: str) -> RpcWriteSession:
        return RpcWriteSession(
            channel=self._channel,
            network_id=network_id,
            address=address,
            grid_address=self._grid_address,
        )

    async def _step(self, method: str, params: Any) -> StepOutcome:
        try:
            await self._channel.request(method, params)
        except RpcError as exc:
            outcome = outcome_for_error(exc)
            logger.info("%s -> %s (%s)", method, outcome.value, exc)
            return outcome
        return StepOutcome.SUCCEEDED


__all__ = ["RpcWalletProvider", "RpcWriteSession", "outcome_for_error"]
