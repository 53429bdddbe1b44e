"""Package the optimistic buffer into one batched write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .interfaces import WriteSession
from .optimistic_buffer import OptimisticBuffer


logger = logging.getLogger(__name__)


class FlushStatus(str, Enum):
    NO_CHANGES = "no_changes"
    NOT_CONNECTED = "not_connected"
    SUBMITTED = "submitted"
    FAILED = "failed"


@dataclass(frozen=True)
class FlushResult:
    status: FlushStatus
    submitted: int = 0
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (FlushStatus.SUBMITTED, FlushStatus.NO_CHANGES)


class TransactionSubmitter:
    """Submit the buffer through whatever session ``session_getter`` returns.

    Each :meth:`flush` is a single attempt. On success the whole live buffer is
    cleared, including edits made while the write was in flight.
    """

    def __init__(
        self,
        buffer: OptimisticBuffer,
        session_getter: Callable[[], Optional[WriteSession]],
    ) -> None:
        self._buffer = buffer
        self._session_getter = session_getter
        self.attempts = 0

    async def flush(self) -> FlushResult:
        session = self._session_getter()
        if session is None:
            return FlushResult(status=FlushStatus.NOT_CONNECTED, error="Connect wallet first.")
        if not self._buffer:
            return FlushResult(status=FlushStatus.NO_CHANGES)

        snapshot = self._buffer.snapshot()
        self.attempts += 1
        logger.info("Submitting batch of %d cell(s)", len(snapshot))
        try:
            result = await session.submit_batch(list(snapshot.cell_ids), list(snapshot.colors))
        except Exception as exc:
            logger.exception("Batch submission raised")
            return FlushResult(status=FlushStatus.FAILED, error=str(exc) or exc.__class__.__name__)

        if not result.ok:
            logger.warning("Batch submission failed: %s; %d cell(s) kept pending", result.error, len(self._buffer))
            return FlushResult(status=FlushStatus.FAILED, error=result.error)

        dropped = self._buffer.clear()
        if dropped != len(snapshot):
            logger.debug("flush: cleared %d entries for a %d-entry snapshot", dropped, len(snapshot))
        logger.info("Batch submitted: tx=%s", result.tx_hash)
        return FlushResult(status=FlushStatus.SUBMITTED, submitted=len(snapshot), tx_hash=result.tx_hash)


__all__ = ["FlushResult", "FlushStatus", "TransactionSubmitter"]
