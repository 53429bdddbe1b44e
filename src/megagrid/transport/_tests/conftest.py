from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import pytest


Responder = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


class FakeWebSocket:
    """In-memory stand-in for a client WebSocket connection."""

    def __init__(self, responder: Optional[Responder] = None) -> None:
        self.responder = responder
        self.sent: List[Dict[str, Any]] = []
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.closed = False

    async def send(self, text: str) -> None:
        if self.closed:
            raise ConnectionError("socket closed")
        message = json.loads(text)
        self.sent.append(message)
        if self.responder is not None:
            reply = self.responder(message)
            if reply is not None:
                self.push(reply)

    def push(self, frame: Any) -> None:
        self.inbox.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def drop(self) -> None:
        self.inbox.put_nowait(None)

    async def close(self) -> None:
        self.closed = True
        self.inbox.put_nowait(None)

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> str:
        item = await self.inbox.get()
        if item is None:
            raise StopAsyncIteration
        return item


def reply(message: Dict[str, Any], result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message["id"], "result": result}


def error(message: Dict[str, Any], code: int, text: str = "error") -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message["id"], "error": {"code": code, "message": text}}


@pytest.fixture
def fake_socket_factory():
    return FakeWebSocket


@pytest.fixture
def connector_for():
    def build(ws: FakeWebSocket):
        urls: List[str] = []

        async def connector(url: str) -> FakeWebSocket:
            urls.append(url)
            return ws

        connector.urls = urls  # type: ignore[attr-defined]
        return connector

    return build


@pytest.fixture
def rpc_reply():
    return reply


@pytest.fixture
def rpc_error():
    return error
