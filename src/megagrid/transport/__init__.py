"""WebSocket JSON-RPC adapters for the grid node and the wallet."""

from .grid_node import GridNodeClient, open_grid_node
from .rpc_channel import RpcChannel
from .wallet import RpcWalletProvider, RpcWriteSession

__all__ = ["GridNodeClient", "RpcChannel", "RpcWalletProvider", "RpcWriteSession", "open_grid_node"]
