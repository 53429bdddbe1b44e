from __future__ import annotations

import argparse
import asyncio
import json

import pytest

from megagrid import cli
from megagrid.transport import rpc_channel


class _ScriptedSocket:
    def __init__(self, handlers) -> None:
        self.handlers = handlers
        self.sent = []
        self.inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, text: str) -> None:
        message = json.loads(text)
        self.sent.append(message)
        handler = self.handlers.get(message["method"])
        if handler is None:
            return
        outcome = handler(message)
        if isinstance(outcome, dict) and "code" in outcome:
            frame = {"jsonrpc": "2.0", "id": message["id"], "error": outcome}
        else:
            frame = {"jsonrpc": "2.0", "id": message["id"], "result": outcome}
        self.inbox.put_nowait(json.dumps(frame))

    async def close(self) -> None:
        self.inbox.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        item = await self.inbox.get()
        if item is None:
            raise StopAsyncIteration
        return item


@pytest.fixture
def sockets(monkeypatch: pytest.MonkeyPatch):
    opened = {}
    handlers = {
        "grid_dimension": lambda m: 4,
        "grid_subscribe": lambda m: f"0x{m['id']}",
        "eth_chainId": lambda m: "0x18c6",
        "eth_requestAccounts": lambda m: ["0x00000000000000000000000000000000000000aa"],
        "grid_submitBatch": lambda m: "0xabcdef0123456789",
    }

    async def connector(url: str):
        sock = _ScriptedSocket(handlers)
        opened[url] = sock
        return sock

    monkeypatch.setattr(rpc_channel, "_websocket_connector", connector)
    for name in ("MEGAGRID_WALLET_URL", "MEGAGRID_WS_URL", "MEGAGRID_GRID_ADDRESS", "MEGAGRID_CHAIN_ID"):
        monkeypatch.delenv(name, raising=False)
    return opened, handlers


def test_parse_cell_spec() -> None:
    assert cli.parse_cell_spec("12") == (12, None)
    assert cli.parse_cell_spec("0x10:#ff0000") == (16, 0xFF0000)
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_cell_spec("twelve")
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_cell_spec("3:#zz")


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_config_from_args_applies_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEGAGRID_CELL_PX", raising=False)
    args = cli.build_parser().parse_args(
        ["--node-url", "ws://node", "--chain-id", "0x18c6", "--grid-address", "0xgrid", "--cell-px", "1", "watch"]
    )
    config = cli.config_from_args(args)
    assert config.node_ws_url == "ws://node"
    assert config.chain_id == 6342
    assert config.grid_address == "0xgrid"
    assert config.cell_px == 2


def test_paint_submits_buffered_edits(sockets, capsys) -> None:
    opened, _ = sockets
    code = cli.main(
        [
            "--node-url", "ws://node",
            "--wallet-url", "ws://wallet",
            "--chain-id", "6342",
            "--grid-address", "0xgrid",
            "paint",
            "--cell", "1:#aabbcc",
            "--cell", "2:#001122",
            "--cell", "1:#445566",
        ]
    )

    assert code == 0
    submits = [m for m in opened["ws://wallet"].sent if m["method"] == "grid_submitBatch"]
    assert len(submits) == 1
    assert submits[0]["params"][0]["ids"] == [1, 2]
    assert submits[0]["params"][0]["colors"] == [0x445566, 0x001122]
    assert "0xabcdef0123456789" in capsys.readouterr().out


def test_paint_without_wallet_fails_connect(sockets) -> None:
    opened, _ = sockets
    code = cli.main(["--node-url", "ws://node", "--grid-address", "0xgrid", "paint", "--random", "2", "--seed", "1"])
    assert code == 2
    assert set(opened) == {"ws://node"}


def test_paint_reports_rejected_write(sockets) -> None:
    opened, handlers = sockets
    handlers["grid_submitBatch"] = lambda m: {"code": 4001, "message": "User rejected"}
    code = cli.main(
        ["--node-url", "ws://node", "--wallet-url", "ws://wallet", "--chain-id", "6342",
         "--grid-address", "0xgrid", "paint", "--cell", "3", "--color", "#123456"]
    )
    assert code == 1
    submits = [m for m in opened["ws://wallet"].sent if m["method"] == "grid_submitBatch"]
    assert submits[0]["params"][0]["colors"] == [0x123456]


def test_watch_saves_png(sockets, tmp_path) -> None:
    output = tmp_path / "grid.png"
    code = cli.main(["--node-url", "ws://node", "--grid-address", "0xgrid", "--cell-px", "2",
                     "watch", "--seconds", "0", "--output", str(output)])
    assert code == 0
    assert output.exists()


def test_missing_grid_address_is_a_usage_error(sockets) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--node-url", "ws://node", "paint"])


def test_paint_with_unreachable_wallet_exits_with_connect_failure(sockets, monkeypatch: pytest.MonkeyPatch) -> None:
    opened, handlers = sockets

    async def connector(url: str):
        if url == "ws://wallet":
            raise ConnectionRefusedError("wallet unreachable")
        sock = _ScriptedSocket(handlers)
        opened[url] = sock
        return sock

    monkeypatch.setattr(rpc_channel, "_websocket_connector", connector)
    code = cli.main(
        ["--node-url", "ws://node", "--wallet-url", "ws://wallet", "--grid-address", "0xgrid", "paint", "--cell", "1"]
    )
    assert code == 2
    assert set(opened) == {"ws://node"}
