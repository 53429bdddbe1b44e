from __future__ import annotations

import os
from typing import Optional


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    s = v.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    return default


def env_int(name: str, default: int) -> int:
    """Parse decimal or ``0x``-prefixed integers; fall back on garbage."""

    v = os.getenv(name)
    if not v:
        return default
    try:
        return int(v.strip(), 0)
    except ValueError:
        return default
