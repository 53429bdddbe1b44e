"""JSON-RPC 2.0 over a single WebSocket connection."""

from __future__ import annotations

import asyncio
import itertools
import logging
from contextlib import suppress
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets

from megagrid.protocol import (
    INTERNAL_ERROR_CODE,
    ProtocolError,
    RpcError,
    RpcNotification,
    RpcRequest,
    RpcResponse,
    parse_frame,
)
from megagrid.protocol.rpc import Params


logger = logging.getLogger(__name__)


Connector = Callable[[str], Awaitable[Any]]
NotificationHandler = Callable[[Any], None]


async def _websocket_connector(url: str) -> Any:
    return await websockets.connect(url, max_size=None)


class RpcChannel:
    """Multiplex requests and server notifications over one WebSocket.

    Responses are matched to requests by id. Notifications are dispatched to
    handlers registered per method. There is no request timeout: a call waits
    until the remote end answers or the connection drops.
    """

    def __init__(self, url: str, *, connector: Optional[Connector] = None, name: str = "rpc") -> None:
        self.url = url
        self.name = name
        self._connector = connector or _websocket_connector
        self._ws: Any = None
        self._reader_task: Optional[asyncio.Task[None]] = None
        self._ids = itertools.count(1)
        self._pending: Dict[int, asyncio.Future[Any]] = {}
        self._handlers: Dict[str, List[NotificationHandler]] = {}
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self) -> None:
        async with self._open_lock:
            if self._ws is not None:
                return
            logger.info("Connecting %s channel at %s", self.name, self.url)
            self._ws = await self._connector(self.url)
            self._reader_task = asyncio.create_task(self._read_loop())
            logger.info("Connected %s channel", self.name)

    async def close(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None:
            with suppress(Exception):
                await ws.close()
        task = self._reader_task
        self._reader_task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self._fail_pending(RpcError(INTERNAL_ERROR_CODE, f"{self.name} channel closed"))

    def on_notification(self, method: str, handler: NotificationHandler) -> None:
        assert callable(handler), "notification handler must be callable"
        self._handlers.setdefault(method, []).append(handler)

    async def request(self, method: str, params: Params = ()) -> Any:
        """Send ``method`` and return its result; raise :class:`RpcError` on error replies."""

        if self._ws is None:
            await self.open()
        request = RpcRequest(request_id=next(self._ids), method=method, params=params)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request.request_id] = future
        text = request.to_json()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s -> %s", self.name, text)
        try:
            await self._ws.send(text)
        except Exception as exc:
            self._pending.pop(request.request_id, None)
            raise RpcError(INTERNAL_ERROR_CODE, f"{self.name} send failed: {exc}") from exc
        return await future

    # ------------------------------------------------------------------
    async def _read_loop(self) -> None:
        ws = self._ws
        error: Optional[BaseException] = None
        try:
            async for raw in ws:
                self._handle_frame(raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = exc
            logger.info("%s channel read failed (%s)", self.name, exc or exc.__class__.__name__)
        finally:
            if self._ws is ws:
                self._ws = None
            reason = f"{self.name} connection lost" if error is None else f"{self.name} connection lost: {error}"
            self._fail_pending(RpcError(INTERNAL_ERROR_CODE, reason))

    def _handle_frame(self, raw: Any) -> None:
        try:
            frame = parse_frame(raw)
        except ProtocolError:
            logger.debug("%s: dropping malformed frame", self.name, exc_info=True)
            return
        if isinstance(frame, RpcResponse):
            future = self._pending.pop(frame.request_id, None)
            if future is None or future.done():
                logger.debug("%s: response for unknown id %s", self.name, frame.request_id)
                return
            if frame.error is not None:
                future.set_exception(frame.error)
            else:
                future.set_result(frame.result)
            return
        self._dispatch_notification(frame)

    def _dispatch_notification(self, frame: RpcNotification) -> None:
        handlers = self._handlers.get(frame.method)
        if not handlers:
            logger.debug("%s: no handler for notification %s", self.name, frame.method)
            return
        for handler in tuple(handlers):
            try:
                handler(frame.params)
            except Exception:
                logger.exception("%s notification handler failed for %s", self.name, frame.method)

    def _fail_pending(self, error: RpcError) -> None:
        pending = list(self._pending.values())
        self._pending.clear()
        for future in pending:
            if not future.done():
                future.set_exception(error)


__all__ = ["Connector", "NotificationHandler", "RpcChannel"]
