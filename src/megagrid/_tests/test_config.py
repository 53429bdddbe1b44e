from __future__ import annotations

import pytest

from megagrid.config import (
    DEFAULT_CELL_PX,
    MAX_CELL_PX,
    MIN_CELL_PX,
    clamp_cell_px,
    load_grid_client_config,
)


_ENV_NAMES = (
    "MEGAGRID_RPC_URL",
    "MEGAGRID_WS_URL",
    "MEGAGRID_WALLET_URL",
    "MEGAGRID_CHAIN_ID",
    "MEGAGRID_CHAIN_NAME",
    "MEGAGRID_GRID_ADDRESS",
    "MEGAGRID_CELL_PX",
    "MEGAGRID_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_testnet_demo() -> None:
    config = load_grid_client_config()
    assert config.chain_name == "MegaETH Testnet"
    assert config.cell_px == DEFAULT_CELL_PX
    assert config.native_currency.symbol == "MEGA"
    assert config.native_currency.decimals == 18
    assert config.node_ws_url.startswith("wss://")
    assert config.wallet_ws_url is None
    assert config.debug is False


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEGAGRID_RPC_URL", "http://127.0.0.1:8545")
    monkeypatch.setenv("MEGAGRID_CHAIN_ID", "0x18c6")
    monkeypatch.setenv("MEGAGRID_GRID_ADDRESS", "0xabc")
    monkeypatch.setenv("MEGAGRID_CELL_PX", "50")
    monkeypatch.setenv("MEGAGRID_DEBUG", "yes")

    config = load_grid_client_config()
    assert config.rpc_url == "http://127.0.0.1:8545"
    assert config.node_ws_url == "ws://127.0.0.1:8545"
    assert config.chain_id == 0x18C6
    assert config.grid_address == "0xabc"
    assert config.cell_px == MAX_CELL_PX
    assert config.debug is True


def test_garbage_chain_id_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEGAGRID_CHAIN_ID", "not-a-number")
    assert load_grid_client_config().chain_id == 6342


def test_network_descriptor_carries_single_rpc_and_no_explorers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEGAGRID_RPC_URL", "https://rpc.example")
    monkeypatch.setenv("MEGAGRID_CHAIN_ID", "6342")
    payload = load_grid_client_config().network_descriptor().to_dict()
    assert payload == {
        "chainId": "0x18c6",
        "chainName": "MegaETH Testnet",
        "nativeCurrency": {"name": "MEGA", "symbol": "MEGA", "decimals": 18},
        "rpcUrls": ["https://rpc.example"],
        "blockExplorerUrls": [],
    }


def test_with_overrides_skips_none_and_clamps_cell_px() -> None:
    config = load_grid_client_config()
    updated = config.with_overrides(chain_id=None, grid_address="0xdef", cell_px=1)
    assert updated.chain_id == config.chain_id
    assert updated.grid_address == "0xdef"
    assert updated.cell_px == MIN_CELL_PX


@pytest.mark.parametrize("value, expected", [(None, DEFAULT_CELL_PX), (0, DEFAULT_CELL_PX), (1, 2), (7, 7), (99, 20)])
def test_clamp_cell_px(value, expected) -> None:
    assert clamp_cell_px(value) == expected
