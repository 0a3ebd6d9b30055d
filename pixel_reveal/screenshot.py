"""Render the player's view of the canvas as a PNG.

Revealed cells show the level image color, hidden cells a flat gray.
Each grid cell is drawn as a cell_px x cell_px square:
  cell_px = max(1, canvas_size // max(width, height))
Click mapping from rendered pixels back to cells:
  x = floor(px / cell_px), y = floor(py / cell_px)
Origin: (0, 0) = top-left; x right, y down. No clamping, so a pixel off the
grid maps to an off-grid cell and the click is ignored by the engine.
"""

import base64
import io
import math
import os

from PIL import Image, ImageDraw

DEFAULT_CANVAS_SIZE = 500
HIDDEN_GRAY = (128, 128, 128, 255)


def cell_size_px(width: int, height: int, canvas_size: int = DEFAULT_CANVAS_SIZE) -> int:
    """Side length in rendered pixels of one grid cell."""
    return max(1, canvas_size // max(width, height))


def pixel_to_cell(px: int, py: int, cell_px: int) -> tuple[int, int]:
    """Convert rendered pixel (px, py) to grid cell (x, y)."""
    return math.floor(px / cell_px), math.floor(py / cell_px)


def render_canvas_png(state, canvas_size: int = DEFAULT_CANVAS_SIZE) -> bytes:
    """Draw the revealed/hidden grid for `state` (a LevelEngine) and return PNG bytes."""
    image = state.image
    width, height = image.width, image.height
    cell_px = cell_size_px(width, height, canvas_size)

    img = Image.new("RGBA", (width * cell_px, height * cell_px), HIDDEN_GRAY)
    draw = ImageDraw.Draw(img)
    for index in state.tracker.ordered():
        y, x = divmod(index, width)
        x0 = x * cell_px
        y0 = y * cell_px
        draw.rectangle([x0, y0, x0 + cell_px - 1, y0 + cell_px - 1], fill=image.pixel(index))

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_canvas(
    state,
    canvas_size: int = DEFAULT_CANVAS_SIZE,
    save_path: str | None = None,
) -> str:
    """Render the canvas, optionally write it to `save_path`, and return base64 PNG."""
    png_bytes = render_canvas_png(state, canvas_size)
    if save_path:
        d = os.path.dirname(save_path)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(save_path, "wb") as f:
            f.write(png_bytes)
    return base64.b64encode(png_bytes).decode("ascii")
