"""Cell id <-> coordinate mapping and 24-bit color helpers.

The mapping functions do not range-check: callers handling pointer input must
reject out-of-grid positions first (see :func:`cell_at_pixel`).
"""

from __future__ import annotations

import random
from typing import Optional


COLOR_MASK = 0xFFFFFF

# Random colors stay inside this band to avoid near-black and near-white.
RANDOM_CHANNEL_MIN = 0x60
RANDOM_CHANNEL_SPAN = 0x90


def x_of(cell_id: int, dimension: int) -> int:
    return cell_id % dimension


def y_of(cell_id: int, dimension: int) -> int:
    return cell_id // dimension


def id_of(x: int, y: int, dimension: int) -> int:
    return y * dimension + x


def coords_of(cell_id: int, dimension: int) -> tuple[int, int]:
    return x_of(cell_id, dimension), y_of(cell_id, dimension)


def in_bounds(x: int, y: int, dimension: int) -> bool:
    return 0 <= x < dimension and 0 <= y < dimension


def cell_at_pixel(px: float, py: float, cell_px: int, dimension: int) -> Optional[int]:
    """Return the cell id under surface pixel ``(px, py)`` or ``None`` outside the grid."""

    gx = int(px // cell_px)
    gy = int(py // cell_px)
    if not in_bounds(gx, gy, dimension):
        return None
    return id_of(gx, gy, dimension)


def normalize_color(value: int) -> int:
    return int(value) & COLOR_MASK


def pack_rgb(red: int, green: int, blue: int) -> int:
    return ((red & 0xFF) << 16) | ((green & 0xFF) << 8) | (blue & 0xFF)


def unpack_rgb(color: int) -> tuple[int, int, int]:
    color = normalize_color(color)
    return (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def random_color(rng: random.Random) -> int:
    """Draw each channel uniformly from ``[0x60, 0xEF]`` and pack them."""

    red = RANDOM_CHANNEL_MIN + rng.randrange(RANDOM_CHANNEL_SPAN)
    green = RANDOM_CHANNEL_MIN + rng.randrange(RANDOM_CHANNEL_SPAN)
    blue = RANDOM_CHANNEL_MIN + rng.randrange(RANDOM_CHANNEL_SPAN)
    return pack_rgb(red, green, blue)


def parse_hex_color(text: str) -> int:
    """Parse ``#rrggbb`` / ``0xrrggbb`` / ``rrggbb`` into a 24-bit color."""

    raw = text.strip()
    if raw.startswith("#"):
        raw = raw[1:]
    elif raw.lower().startswith("0x"):
        raw = raw[2:]
    if not raw:
        raise ValueError(f"empty color literal: {text!r}")
    return normalize_color(int(raw, 16))


def format_color(color: int) -> str:
    return f"#{normalize_color(color):06x}"


__all__ = [
    "COLOR_MASK",
    "cell_at_pixel",
    "coords_of",
    "format_color",
    "id_of",
    "in_bounds",
    "normalize_color",
    "pack_rgb",
    "parse_hex_color",
    "random_color",
    "unpack_rgb",
    "x_of",
    "y_of",
]
