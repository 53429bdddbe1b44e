"""Switch-then-add negotiation of the wallet network before any write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from megagrid.config import NetworkDescriptor

from .interfaces import StepOutcome, WalletProvider, WriteSession


logger = logging.getLogger(__name__)


NO_WALLET_MESSAGE = "No wallet found. Install a wallet provider."
MANUAL_SWITCH_MESSAGE = "Please switch to {name} manually in your wallet."
ACCOUNTS_FAILED_MESSAGE = "Wallet connection failed"


class NegotiationState(str, Enum):
    DISCONNECTED = "disconnected"
    NEGOTIATING_CHAIN = "negotiating_chain"
    CHAIN_READY = "chain_ready"
    CHAIN_FAILED = "chain_failed"
    REQUESTING_ACCOUNTS = "requesting_accounts"
    CONNECTED = "connected"
    CONNECTION_FAILED = "connection_failed"


@dataclass(frozen=True)
class NegotiationResult:
    state: NegotiationState
    address: Optional[str] = None
    session: Optional[WriteSession] = None
    message: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.state is NegotiationState.CONNECTED


def short_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return f"{address[:6]}…{address[-4:]}"


class NetworkNegotiator:
    """Drive a wallet provider to the target network and bind a write session.

    The session bound on success is written once and never re-negotiated if the
    wallet changes networks afterwards.
    """

    def __init__(self, provider: Optional[WalletProvider], descriptor: NetworkDescriptor) -> None:
        self._provider = provider
        self._descriptor = descriptor
        self._state = NegotiationState.DISCONNECTED
        self._session: Optional[WriteSession] = None
        self._history: List[NegotiationState] = [self._state]

    @property
    def state(self) -> NegotiationState:
        return self._state

    @property
    def session(self) -> Optional[WriteSession]:
        return self._session

    @property
    def history(self) -> tuple[NegotiationState, ...]:
        return tuple(self._history)

    def _transition(self, state: NegotiationState) -> None:
        logger.debug("negotiator: %s -> %s", self._state.value, state.value)
        self._state = state
        self._history.append(state)

    def _fail(self, state: NegotiationState, message: str) -> NegotiationResult:
        self._transition(state)
        logger.warning("Wallet negotiation ended in %s: %s", state.value, message)
        return NegotiationResult(state=state, message=message)

    async def connect(self) -> NegotiationResult:
        provider = self._provider
        if provider is None:
            return self._fail(NegotiationState.CONNECTION_FAILED, NO_WALLET_MESSAGE)

        target = self._descriptor.chain_id
        try:
            return await self._negotiate(provider, target)
        except Exception:
            logger.exception("Wallet provider raised during %s", self._state.value)
            return self._fail(NegotiationState.CONNECTION_FAILED, ACCOUNTS_FAILED_MESSAGE)

    async def _negotiate(self, provider: WalletProvider, target: int) -> NegotiationResult:
        self._transition(NegotiationState.NEGOTIATING_CHAIN)
        if not await self._ensure_chain(provider, target):
            return self._fail(
                NegotiationState.CHAIN_FAILED,
                MANUAL_SWITCH_MESSAGE.format(name=self._descriptor.chain_name),
            )
        self._transition(NegotiationState.CHAIN_READY)

        self._transition(NegotiationState.REQUESTING_ACCOUNTS)
        outcome, accounts = await provider.request_accounts()
        if outcome is not StepOutcome.SUCCEEDED or not accounts:
            logger.info("Account request returned %s with %d account(s)", outcome.value, len(accounts))
            return self._fail(NegotiationState.CONNECTION_FAILED, ACCOUNTS_FAILED_MESSAGE)

        address = str(accounts[0])
        session = provider.bind_session(target, address)
        self._session = session
        self._transition(NegotiationState.CONNECTED)
        logger.info("Wallet connected: address=%s chain=%d", short_address(address), target)
        return NegotiationResult(
            state=NegotiationState.CONNECTED,
            address=address,
            session=session,
            message=f"connected: {short_address(address)}",
        )

    async def _ensure_chain(self, provider: WalletProvider, target: int) -> bool:
        current = await provider.get_current_network()
        if current == target:
            logger.debug("negotiator: wallet already on chain %d", target)
            return True

        logger.info("Wallet on chain %s; switching to %d", current, target)
        switched = await provider.switch_network(target)
        if switched is StepOutcome.SUCCEEDED:
            return True

        logger.info("Switch to chain %d %s; adding network", target, switched.value)
        added = await provider.add_network(self._descriptor)
        if added is StepOutcome.SUCCEEDED:
            return True
        logger.error("Add network %d %s", target, added.value)
        return False


__all__ = [
    "ACCOUNTS_FAILED_MESSAGE",
    "MANUAL_SWITCH_MESSAGE",
    "NO_WALLET_MESSAGE",
    "NegotiationResult",
    "NegotiationState",
    "NetworkNegotiator",
    "short_address",
]
