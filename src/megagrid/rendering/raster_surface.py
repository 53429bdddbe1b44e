"""Headless numpy raster implementing the engine's render surface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from megagrid.codec import unpack_rgb
from megagrid.config import DEFAULT_CELL_PX, clamp_cell_px


logger = logging.getLogger(__name__)


BACKGROUND_RGB = (0x0B, 0x0B, 0x0B)
HIGHLIGHT_RGB = (0xFF, 0xFF, 0xFF)
HIGHLIGHT_ALPHA = 0.7


class RasterSurface:
    """RGB framebuffer of ``cells * cell_px`` pixels per side.

    The hover highlight lives in a separate overlay so clearing it never
    disturbs painted cells.
    """

    def __init__(self, cell_px: int = DEFAULT_CELL_PX) -> None:
        self.cell_px = clamp_cell_px(cell_px)
        self.width = 0
        self.height = 0
        self._pixels = np.zeros((0, 0, 3), dtype=np.uint8)
        self._highlight: Optional[Tuple[int, int]] = None
        self.paint_count = 0

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def highlight(self) -> Optional[Tuple[int, int]]:
        return self._highlight

    def init_surface(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        px = self.cell_px
        self._pixels = np.empty((self.height * px, self.width * px, 3), dtype=np.uint8)
        self._pixels[...] = BACKGROUND_RGB
        self._highlight = None
        self.paint_count = 0
        logger.debug("surface init: cells=%dx%d cell_px=%d", self.width, self.height, px)

    def paint_cell(self, x: int, y: int, color: int) -> None:
        px = self.cell_px
        self._pixels[y * px:(y + 1) * px, x * px:(x + 1) * px] = unpack_rgb(color)
        self.paint_count += 1

    def cell_rgb(self, x: int, y: int) -> Tuple[int, int, int]:
        px = self.cell_px
        r, g, b = self._pixels[y * px, x * px]
        return int(r), int(g), int(b)

    def cell_color(self, x: int, y: int) -> int:
        r, g, b = self.cell_rgb(x, y)
        return (r << 16) | (g << 8) | b

    def clear_overlay(self) -> None:
        self._highlight = None

    def draw_highlight(self, x: int, y: int) -> None:
        self._highlight = (int(x), int(y))

    def composite(self) -> np.ndarray:
        """Return the framebuffer with the highlight outline blended on top."""

        frame = self._pixels.copy()
        if self._highlight is None:
            return frame
        x, y = self._highlight
        px = self.cell_px
        top, left = y * px, x * px
        bottom, right = top + px - 1, left + px - 1
        mask = np.zeros(frame.shape[:2], dtype=bool)
        mask[top, left:right + 1] = True
        mask[bottom, left:right + 1] = True
        mask[top:bottom + 1, left] = True
        mask[top:bottom + 1, right] = True
        blended = frame[mask].astype(np.float32) * (1.0 - HIGHLIGHT_ALPHA)
        blended += np.asarray(HIGHLIGHT_RGB, dtype=np.float32) * HIGHLIGHT_ALPHA
        frame[mask] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)
        return frame

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.composite())

    def save_png(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        self.to_image().save(target, format="PNG")
        logger.info("Saved %dx%d surface to %s", self.width, self.height, target)
        return target


__all__ = ["BACKGROUND_RGB", "HIGHLIGHT_ALPHA", "HIGHLIGHT_RGB", "RasterSurface"]
