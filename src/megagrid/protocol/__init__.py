"""Wire shapes for the grid node and wallet JSON-RPC channels."""

from .messages import (
    CELL_COLORED_EVENT,
    CELLS_COLORED_EVENT,
    EVENT_KINDS,
    CellColored,
    CellsColored,
    GridEvent,
    ProtocolError,
    as_int,
    decode_event,
)
from .rpc import (
    ADD_CHAIN_METHOD,
    CHAIN_ID_METHOD,
    GRID_CELL_COLOR_METHOD,
    GRID_DIMENSION_METHOD,
    GRID_SUBMIT_BATCH_METHOD,
    GRID_SUBSCRIBE_METHOD,
    GRID_SUBSCRIPTION_NOTIFICATION,
    GRID_UNSUBSCRIBE_METHOD,
    INTERNAL_ERROR_CODE,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND_CODE,
    REQUEST_ACCOUNTS_METHOD,
    SWITCH_CHAIN_METHOD,
    UNAUTHORIZED_CODE,
    UNRECOGNIZED_CHAIN_CODE,
    UNSUPPORTED_METHOD_CODE,
    USER_REJECTED_CODE,
    RpcError,
    RpcNotification,
    RpcRequest,
    RpcResponse,
    parse_frame,
)

__all__ = [
    "ADD_CHAIN_METHOD",
    "CELLS_COLORED_EVENT",
    "CELL_COLORED_EVENT",
    "CHAIN_ID_METHOD",
    "EVENT_KINDS",
    "GRID_CELL_COLOR_METHOD",
    "GRID_DIMENSION_METHOD",
    "GRID_SUBMIT_BATCH_METHOD",
    "GRID_SUBSCRIBE_METHOD",
    "GRID_SUBSCRIPTION_NOTIFICATION",
    "GRID_UNSUBSCRIBE_METHOD",
    "INTERNAL_ERROR_CODE",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND_CODE",
    "REQUEST_ACCOUNTS_METHOD",
    "SWITCH_CHAIN_METHOD",
    "UNAUTHORIZED_CODE",
    "UNRECOGNIZED_CHAIN_CODE",
    "UNSUPPORTED_METHOD_CODE",
    "USER_REJECTED_CODE",
    "CellColored",
    "CellsColored",
    "GridEvent",
    "ProtocolError",
    "RpcError",
    "RpcNotification",
    "RpcRequest",
    "RpcResponse",
    "as_int",
    "decode_event",
    "parse_frame",
]
