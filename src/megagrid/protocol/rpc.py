"""JSON-RPC 2.0 frames shared by the grid node and wallet channels."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from .messages import ProtocolError


JSONRPC_VERSION = "2.0"

# Grid node methods.
GRID_DIMENSION_METHOD = "grid_dimension"
GRID_CELL_COLOR_METHOD = "grid_cellColor"
GRID_SUBSCRIBE_METHOD = "grid_subscribe"
GRID_UNSUBSCRIBE_METHOD = "grid_unsubscribe"
GRID_SUBSCRIPTION_NOTIFICATION = "grid_subscription"
GRID_SUBMIT_BATCH_METHOD = "grid_submitBatch"

# Wallet methods.
CHAIN_ID_METHOD = "eth_chainId"
SWITCH_CHAIN_METHOD = "wallet_switchEthereumChain"
ADD_CHAIN_METHOD = "wallet_addEthereumChain"
REQUEST_ACCOUNTS_METHOD = "eth_requestAccounts"

# Error codes reported by wallets.
USER_REJECTED_CODE = 4001
UNAUTHORIZED_CODE = 4100
UNSUPPORTED_METHOD_CODE = 4200
UNRECOGNIZED_CHAIN_CODE = 4902
METHOD_NOT_FOUND_CODE = -32601
INTERNAL_ERROR_CODE = -32603

UNSUPPORTED_CODES = frozenset({UNSUPPORTED_METHOD_CODE, UNRECOGNIZED_CHAIN_CODE, METHOD_NOT_FOUND_CODE})


class RpcError(RuntimeError):
    """Error object returned by the remote end (or synthesized for transport loss)."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"[{code}] {message}")
        self.code = int(code)
        self.message = message
        self.data = data

    @property
    def unsupported(self) -> bool:
        return self.code in UNSUPPORTED_CODES

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RpcError":
        try:
            code = int(data.get("code", INTERNAL_ERROR_CODE))
        except (TypeError, ValueError):
            code = INTERNAL_ERROR_CODE
        return cls(code, str(data.get("message") or "unknown error"), data.get("data"))


Params = Union[Sequence[Any], Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class RpcRequest:
    request_id: int
    method: str
    params: Params = ()

    def to_dict(self) -> Dict[str, Any]:
        params = dict(self.params) if isinstance(self.params, Mapping) else list(self.params)
        return {"jsonrpc": JSONRPC_VERSION, "id": self.request_id, "method": self.method, "params": params}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class RpcResponse:
    request_id: int
    result: Any = None
    error: Optional[RpcError] = None


@dataclass(frozen=True, slots=True)
class RpcNotification:
    method: str
    params: Any


def parse_frame(raw: Union[str, bytes]) -> Union[RpcResponse, RpcNotification]:
    """Decode one inbound frame into a response or a notification."""

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError("frame was not UTF-8") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ProtocolError("frame was not valid JSON") from exc
    if not isinstance(data, Mapping):
        raise ProtocolError("frame must be a JSON object")

    if "id" in data and data["id"] is not None and ("result" in data or "error" in data):
        try:
            request_id = int(data["id"])
        except (TypeError, ValueError) as exc:
            raise ProtocolError(f"response id must be an integer, got {data['id']!r}") from exc
        error = data.get("error")
        if error is not None:
            if not isinstance(error, Mapping):
                raise ProtocolError("response 'error' must be an object")
            return RpcResponse(request_id=request_id, error=RpcError.from_dict(error))
        return RpcResponse(request_id=request_id, result=data.get("result"))

    method = data.get("method")
    if not method:
        raise ProtocolError("frame is neither a response nor a notification")
    return RpcNotification(method=str(method), params=data.get("params"))


__all__ = [
    "ADD_CHAIN_METHOD",
    "CHAIN_ID_METHOD",
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
    "RpcError",
    "RpcNotification",
    "RpcRequest",
    "RpcResponse",
    "SWITCH_CHAIN_METHOD",
    "UNAUTHORIZED_CODE",
    "UNRECOGNIZED_CHAIN_CODE",
    "UNSUPPORTED_METHOD_CODE",
    "USER_REJECTED_CODE",
    "parse_frame",
]
