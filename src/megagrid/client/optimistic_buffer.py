"""Pending local edits that the remote log has not confirmed yet."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from megagrid.codec import format_color, normalize_color


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferSnapshot:
    """Index-aligned copy of the buffer, in insertion order."""

    cell_ids: Tuple[int, ...]
    colors: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.cell_ids)


class OptimisticBuffer:
    """Ordered ``cell id -> pending color`` mapping.

    Re-editing a pending cell replaces its color but keeps its original
    position in the iteration order.
    """

    def __init__(self) -> None:
        self._pending: Dict[int, int] = {}

    def upsert(self, cell_id: int, color: int) -> int:
        """Record ``color`` for ``cell_id`` and return the normalized value."""

        normalized = normalize_color(color)
        replaced = self._pending.get(cell_id)
        self._pending[cell_id] = normalized
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "buffer upsert: id=%d color=%s replaced=%s pending_len=%d",
                cell_id,
                format_color(normalized),
                format_color(replaced) if replaced is not None else None,
                len(self._pending),
            )
        return normalized

    def get(self, cell_id: int) -> Optional[int]:
        return self._pending.get(cell_id)

    def snapshot(self) -> BufferSnapshot:
        return BufferSnapshot(cell_ids=tuple(self._pending.keys()), colors=tuple(self._pending.values()))

    def clear(self) -> int:
        """Drop every pending entry and return how many were dropped."""

        dropped = len(self._pending)
        self._pending.clear()
        return dropped

    def as_dict(self) -> Dict[int, int]:
        return dict(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    def __contains__(self, cell_id: object) -> bool:
        return cell_id in self._pending

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._pending))

    def dump_debug(self) -> Dict[str, str]:  # pragma: no cover - diagnostic helper
        return {str(cell_id): format_color(color) for cell_id, color in self._pending.items()}


__all__ = ["BufferSnapshot", "OptimisticBuffer"]
