"""Client-side reconciliation of optimistic edits with the remote grid log."""

from .event_subscriber import ConfirmedBatch, EventChannel, EventSubscriber
from .interfaces import StepOutcome, SubmitResult
from .network_negotiator import NegotiationResult, NegotiationState, NetworkNegotiator
from .optimistic_buffer import BufferSnapshot, OptimisticBuffer
from .reconciliation import ColorMode, GridSession, ReconciliationEngine
from .status import StatusIndicator
from .transaction_submitter import FlushResult, FlushStatus, TransactionSubmitter

__all__ = [
    "BufferSnapshot",
    "ColorMode",
    "ConfirmedBatch",
    "EventChannel",
    "EventSubscriber",
    "FlushResult",
    "FlushStatus",
    "GridSession",
    "NegotiationResult",
    "NegotiationState",
    "NetworkNegotiator",
    "OptimisticBuffer",
    "ReconciliationEngine",
    "StatusIndicator",
    "StepOutcome",
    "SubmitResult",
    "TransactionSubmitter",
]
