"""Confirmed grid events delivered by the remote event log.

Quantities may arrive as JSON integers or as ``0x``-prefixed hex strings; both
decode to ``int``. Colors are masked to 24 bits on decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from megagrid.codec import normalize_color


CELL_COLORED_EVENT = "cell_colored"
CELLS_COLORED_EVENT = "cells_colored"
EVENT_KINDS = (CELL_COLORED_EVENT, CELLS_COLORED_EVENT)


class ProtocolError(ValueError):
    """Raised when a frame or event payload does not match the wire schema."""


def as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ProtocolError(f"expected integer quantity, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError as exc:
            raise ProtocolError(f"invalid integer quantity {value!r}") from exc
    raise ProtocolError(f"expected integer quantity, got {type(value).__name__}")


def _as_int_list(value: Any, name: str) -> List[int]:
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        raise ProtocolError(f"'{name}' must be a list")
    return [as_int(item) for item in value]


@dataclass(frozen=True, slots=True)
class CellColored:
    """A single confirmed cell color."""

    cell_id: int
    color: int

    def entries(self) -> List[Tuple[int, int]]:
        return [(self.cell_id, self.color)]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.cell_id, "color": self.color}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellColored":
        if "id" not in data or "color" not in data:
            raise ProtocolError("cell_colored event requires 'id' and 'color'")
        return cls(cell_id=as_int(data["id"]), color=normalize_color(as_int(data["color"])))


@dataclass(frozen=True, slots=True)
class CellsColored:
    """A batch confirmation; ``ids`` and ``colors`` are index-aligned."""

    cell_ids: Tuple[int, ...]
    colors: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.cell_ids) != len(self.colors):
            raise ProtocolError(
                f"cells_colored length mismatch: {len(self.cell_ids)} ids vs {len(self.colors)} colors"
            )

    def entries(self) -> List[Tuple[int, int]]:
        return list(zip(self.cell_ids, self.colors))

    def to_dict(self) -> Dict[str, Any]:
        return {"ids": list(self.cell_ids), "colors": list(self.colors)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellsColored":
        ids = _as_int_list(data.get("ids"), "ids")
        colors = [normalize_color(c) for c in _as_int_list(data.get("colors"), "colors")]
        return cls(cell_ids=tuple(ids), colors=tuple(colors))


GridEvent = Union[CellColored, CellsColored]


def decode_event(kind: str, data: Mapping[str, Any]) -> GridEvent:
    if not isinstance(data, Mapping):
        raise ProtocolError(f"{kind} event must be an object")
    if kind == CELL_COLORED_EVENT:
        return CellColored.from_dict(data)
    if kind == CELLS_COLORED_EVENT:
        return CellsColored.from_dict(data)
    raise ProtocolError(f"unknown event kind {kind!r}")


__all__ = [
    "CELLS_COLORED_EVENT",
    "CELL_COLORED_EVENT",
    "EVENT_KINDS",
    "CellColored",
    "CellsColored",
    "GridEvent",
    "ProtocolError",
    "as_int",
    "decode_event",
]
