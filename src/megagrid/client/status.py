"""Single user-facing status line shared by every engine operation."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

from .interfaces import StatusListener


logger = logging.getLogger(__name__)


class StatusIndicator:
    def __init__(self, *, history: int = 32) -> None:
        self._text = ""
        self._history: Deque[str] = deque(maxlen=history)
        self._listeners: List[StatusListener] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def history(self) -> tuple[str, ...]:
        return tuple(self._history)

    def subscribe(self, listener: StatusListener) -> None:
        assert callable(listener), "status listener must be callable"
        self._listeners.append(listener)

    def set(self, text: str, *, level: Optional[int] = None) -> None:
        self._text = text
        self._history.append(text)
        if level is not None:
            logger.log(level, "status: %s", text)
        for listener in tuple(self._listeners):
            try:
                listener(text)
            except Exception:
                logger.debug("status listener failed", exc_info=True)


__all__ = ["StatusIndicator"]
