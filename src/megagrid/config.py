"""Environment-derived configuration for the grid client."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from megagrid.utils.env import env_bool, env_int, env_str


DEFAULT_GRID_DIMENSION = 128
DEFAULT_CELL_PX = 5
MIN_CELL_PX = 2
MAX_CELL_PX = 20


def clamp_cell_px(value: Optional[int]) -> int:
    """Clamp a requested cell size to the supported pixel range."""

    if not value:
        return DEFAULT_CELL_PX
    return max(MIN_CELL_PX, min(MAX_CELL_PX, int(value)))


@dataclass(frozen=True)
class NativeCurrency:
    name: str = "MEGA"
    symbol: str = "MEGA"
    decimals: int = 18

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "symbol": self.symbol, "decimals": self.decimals}


@dataclass(frozen=True)
class NetworkDescriptor:
    """Everything a wallet needs to register the target network."""

    chain_id: int
    chain_name: str
    native_currency: NativeCurrency
    rpc_urls: tuple[str, ...]
    block_explorer_urls: tuple[str, ...] = ()

    @property
    def hex_chain_id(self) -> str:
        return hex(self.chain_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.hex_chain_id,
            "chainName": self.chain_name,
            "nativeCurrency": self.native_currency.to_dict(),
            "rpcUrls": list(self.rpc_urls),
            "blockExplorerUrls": list(self.block_explorer_urls),
        }


@dataclass(frozen=True)
class GridClientConfig:
    """Resolved settings for one grid client session."""

    rpc_url: str
    node_ws_url: str
    wallet_ws_url: Optional[str]
    chain_id: int
    chain_name: str
    grid_address: str
    cell_px: int = DEFAULT_CELL_PX
    native_currency: NativeCurrency = field(default_factory=NativeCurrency)
    debug: bool = False

    def network_descriptor(self) -> NetworkDescriptor:
        return NetworkDescriptor(
            chain_id=self.chain_id,
            chain_name=self.chain_name,
            native_currency=self.native_currency,
            rpc_urls=(self.rpc_url,),
        )

    def with_overrides(self, **overrides: Any) -> "GridClientConfig":
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        if "cell_px" in values:
            values["cell_px"] = clamp_cell_px(values["cell_px"])
        return replace(self, **values)


def load_grid_client_config() -> GridClientConfig:
    """Resolve ``MEGAGRID_*`` environment variables into a ``GridClientConfig``."""

    rpc_url = env_str("MEGAGRID_RPC_URL", "https://carrot.megaeth.com/rpc") or ""
    node_ws_url = env_str("MEGAGRID_WS_URL", None)
    if not node_ws_url:
        node_ws_url = _ws_url_from_rpc(rpc_url)
    wallet_ws_url = env_str("MEGAGRID_WALLET_URL", None) or None

    currency = NativeCurrency(
        name=env_str("MEGAGRID_CURRENCY_NAME", "MEGA") or "MEGA",
        symbol=env_str("MEGAGRID_CURRENCY_SYMBOL", "MEGA") or "MEGA",
        decimals=env_int("MEGAGRID_CURRENCY_DECIMALS", 18),
    )

    return GridClientConfig(
        rpc_url=rpc_url,
        node_ws_url=node_ws_url,
        wallet_ws_url=wallet_ws_url,
        chain_id=env_int("MEGAGRID_CHAIN_ID", 6342),
        chain_name=env_str("MEGAGRID_CHAIN_NAME", "MegaETH Testnet") or "MegaETH Testnet",
        grid_address=env_str("MEGAGRID_GRID_ADDRESS", "") or "",
        cell_px=clamp_cell_px(env_int("MEGAGRID_CELL_PX", DEFAULT_CELL_PX)),
        native_currency=currency,
        debug=env_bool("MEGAGRID_DEBUG", False),
    )


def _ws_url_from_rpc(rpc_url: str) -> str:
    if rpc_url.startswith("https://"):
        return "wss://" + rpc_url[len("https://"):]
    if rpc_url.startswith("http://"):
        return "ws://" + rpc_url[len("http://"):]
    return rpc_url


__all__ = [
    "DEFAULT_CELL_PX",
    "DEFAULT_GRID_DIMENSION",
    "GridClientConfig",
    "MAX_CELL_PX",
    "MIN_CELL_PX",
    "NativeCurrency",
    "NetworkDescriptor",
    "clamp_cell_px",
    "load_grid_client_config",
]
