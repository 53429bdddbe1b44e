"""Read surface and event subscriptions of the remote grid log."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from megagrid.client.interfaces import EventHandler
from megagrid.codec import normalize_color
from megagrid.protocol import (
    EVENT_KINDS,
    GRID_CELL_COLOR_METHOD,
    GRID_DIMENSION_METHOD,
    GRID_SUBSCRIBE_METHOD,
    GRID_SUBSCRIPTION_NOTIFICATION,
    GRID_UNSUBSCRIBE_METHOD,
    GridEvent,
    ProtocolError,
    as_int,
    decode_event,
)

from .rpc_channel import RpcChannel


logger = logging.getLogger(__name__)


class GridNodeClient:
    """``GridReader`` + ``EventSource`` backed by a node's JSON-RPC channel."""

    def __init__(self, channel: RpcChannel, grid_address: str) -> None:
        self._channel = channel
        self.grid_address = grid_address
        self._subscriptions: Dict[str, Tuple[str, EventHandler]] = {}
        channel.on_notification(GRID_SUBSCRIPTION_NOTIFICATION, self._on_subscription)

    async def get_grid_dimension(self) -> int:
        result = await self._channel.request(GRID_DIMENSION_METHOD, [self.grid_address])
        return as_int(result)

    async def get_cell_color(self, cell_id: int) -> int:
        result = await self._channel.request(GRID_CELL_COLOR_METHOD, [self.grid_address, int(cell_id)])
        return normalize_color(as_int(result))

    async def subscribe(self, kind: str, handler: EventHandler) -> str:
        if kind not in EVENT_KINDS:
            raise ValueError(f"unknown event kind {kind!r}")
        result = await self._channel.request(GRID_SUBSCRIBE_METHOD, [kind, {"address": self.grid_address}])
        subscription_id = str(result)
        self._subscriptions[subscription_id] = (kind, handler)
        logger.info("Subscribed to %s (subscription=%s)", kind, subscription_id)
        return subscription_id

    async def unsubscribe_all(self) -> None:
        for subscription_id in list(self._subscriptions):
            self._subscriptions.pop(subscription_id, None)
            try:
                await self._channel.request(GRID_UNSUBSCRIBE_METHOD, [subscription_id])
            except Exception:
                logger.debug("unsubscribe %s failed", subscription_id, exc_info=True)

    def _on_subscription(self, params: Any) -> None:
        if not isinstance(params, Mapping):
            logger.debug("subscription notification without params object: %r", params)
            return
        subscription_id = str(params.get("subscription"))
        entry = self._subscriptions.get(subscription_id)
        if entry is None:
            logger.debug("notification for unknown subscription %s", subscription_id)
            return
        kind, handler = entry
        raw = params.get("result")
        items = raw if isinstance(raw, list) else [raw]
        events: List[GridEvent] = []
        for item in items:
            try:
                events.append(decode_event(kind, item))
            except ProtocolError as exc:
                logger.warning("Dropping malformed %s event: %s", kind, exc)
        handler(events)


def open_grid_node(url: str, grid_address: str, *, connector: Optional[Any] = None) -> GridNodeClient:
    """Build a client over a fresh channel; the channel connects on first use."""

    return GridNodeClient(RpcChannel(url, connector=connector, name="node"), grid_address)


__all__ = ["GridNodeClient", "open_grid_node"]
