"""Tests for screenshot module.

Tests for canvas rendering and pixel-to-cell conversion.
"""

import base64
from io import BytesIO

from PIL import Image

from pixel_reveal.game_state import LevelEngine
from pixel_reveal.image_synth import BACKGROUND, foreground_color
from pixel_reveal.progress import InMemoryProgressStore, Progress
from pixel_reveal.screenshot import (
    DEFAULT_CANVAS_SIZE,
    HIDDEN_GRAY,
    cell_size_px,
    pixel_to_cell,
    render_canvas,
    render_canvas_png,
)


def _engine(pixels: list[int], level: int = 1) -> LevelEngine:
    store = InMemoryProgressStore(Progress(current_level=level, current_pixels=pixels))
    return LevelEngine(store)


def _open(png_bytes: bytes) -> Image.Image:
    return Image.open(BytesIO(png_bytes)).convert("RGBA")


class TestCellSize:
    """Test rendered cell size."""

    def test_first_level(self):
        """4x3 grid on 500px: 125px cells."""
        assert cell_size_px(4, 3, 500) == 125

    def test_uses_longest_side(self):
        assert cell_size_px(3, 10, 500) == 50

    def test_minimum_one(self):
        assert cell_size_px(1000, 1000, 500) == 1


class TestPixelToCell:
    """Test rendered pixel to grid cell conversion."""

    def test_origin(self):
        assert pixel_to_cell(0, 0, 125) == (0, 0)

    def test_cell_boundary(self):
        assert pixel_to_cell(124, 124, 125) == (0, 0)
        assert pixel_to_cell(125, 125, 125) == (1, 1)

    def test_no_clamping(self):
        """Pixels past the grid map past the grid."""
        assert pixel_to_cell(600, 10, 125) == (4, 0)
        assert pixel_to_cell(-1, -1, 125) == (-1, -1)


class TestRenderCanvas:
    """Test canvas PNG rendering."""

    def test_size(self):
        img = _open(render_canvas_png(_engine([])))
        assert img.size == (500, 375)

    def test_all_hidden(self):
        img = _open(render_canvas_png(_engine([])))
        assert img.getcolors() == [(500 * 375, HIDDEN_GRAY)]

    def test_revealed_cells_show_image(self):
        # cell 6 = (2, 1) is inside the level-1 circle, cell 0 is background
        img = _open(render_canvas_png(_engine([6, 0])))
        assert img.getpixel((2 * 125 + 60, 1 * 125 + 60)) == foreground_color(1)
        assert img.getpixel((10, 10)) == BACKGROUND
        assert img.getpixel((3 * 125 + 60, 2 * 125 + 60)) == HIDDEN_GRAY

    def test_cell_fills_whole_square(self):
        img = _open(render_canvas_png(_engine([6])))
        assert img.getpixel((250, 125)) == foreground_color(1)
        assert img.getpixel((374, 249)) == foreground_color(1)
        assert img.getpixel((375, 249)) == HIDDEN_GRAY

    def test_custom_canvas_size(self):
        img = _open(render_canvas_png(_engine([]), canvas_size=40))
        assert img.size == (40, 30)

    def test_base64_and_save(self, tmp_path):
        path = tmp_path / "shots" / "canvas.png"
        b64 = render_canvas(_engine([1]), save_path=str(path))
        png_bytes = base64.b64decode(b64)
        assert png_bytes[:8] == b"\x89PNG\r\n\x1a\n"
        assert path.read_bytes() == png_bytes

    def test_default_canvas_size(self):
        img = _open(base64.b64decode(render_canvas(_engine([], level=2))))
        # 5x4 grid: 100px cells
        assert img.size == (DEFAULT_CANVAS_SIZE, 400)
