from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from megagrid.rendering.raster_surface import BACKGROUND_RGB, RasterSurface


def test_init_surface_allocates_scaled_background() -> None:
    surface = RasterSurface(cell_px=3)
    surface.init_surface(4, 2)
    assert surface.pixels.shape == (6, 12, 3)
    assert surface.pixels.dtype == np.uint8
    assert tuple(surface.pixels[5, 11]) == BACKGROUND_RGB


def test_cell_px_is_clamped() -> None:
    assert RasterSurface(cell_px=1).cell_px == 2
    assert RasterSurface(cell_px=64).cell_px == 20


def test_paint_cell_fills_whole_block() -> None:
    surface = RasterSurface(cell_px=2)
    surface.init_surface(3, 3)
    surface.paint_cell(1, 2, 0x1FF8040)

    block = surface.pixels[4:6, 2:4]
    assert (block == np.array([0xFF, 0x80, 0x40], dtype=np.uint8)).all()
    assert surface.cell_color(1, 2) == 0xFF8040
    assert surface.cell_rgb(0, 0) == BACKGROUND_RGB
    assert surface.paint_count == 1


def test_highlight_lives_in_overlay_only() -> None:
    surface = RasterSurface(cell_px=4)
    surface.init_surface(2, 2)
    surface.paint_cell(0, 0, 0x000000)
    surface.draw_highlight(0, 0)

    frame = surface.composite()
    # Outline pixels blend toward white; the interior keeps the painted color.
    assert tuple(frame[0, 0]) == (178, 178, 178)
    assert tuple(frame[1, 1]) == (0, 0, 0)
    assert tuple(surface.pixels[0, 0]) == (0, 0, 0)

    surface.clear_overlay()
    assert surface.highlight is None
    assert np.array_equal(surface.composite(), surface.pixels)


def test_reinit_drops_highlight_and_paints() -> None:
    surface = RasterSurface(cell_px=2)
    surface.init_surface(2, 2)
    surface.paint_cell(1, 1, 0xFFFFFF)
    surface.draw_highlight(1, 1)
    surface.init_surface(2, 2)
    assert surface.highlight is None
    assert surface.paint_count == 0
    assert surface.cell_rgb(1, 1) == BACKGROUND_RGB


def test_save_png_round_trips_pixels(tmp_path) -> None:
    surface = RasterSurface(cell_px=2)
    surface.init_surface(2, 1)
    surface.paint_cell(1, 0, 0x00FF00)

    target = surface.save_png(tmp_path / "grid.png")

    with Image.open(target) as image:
        assert image.size == (4, 2)
        assert image.mode == "RGB"
        assert image.getpixel((3, 1)) == (0, 255, 0)


@pytest.mark.parametrize("cell_px", [2, 5])
def test_to_image_matches_composite(cell_px: int) -> None:
    surface = RasterSurface(cell_px=cell_px)
    surface.init_surface(3, 3)
    surface.draw_highlight(2, 2)
    assert np.array_equal(np.asarray(surface.to_image()), surface.composite())
