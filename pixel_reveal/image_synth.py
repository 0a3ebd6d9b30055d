"""Procedural level images: one geometric motif per level on a gray background.

Motifs cycle every five levels: circle, square, triangle, heart, star.
Geometry (integer cell coordinates, origin top-left, y down):
  cx = width // 2, cy = height // 2, r = min(width, height) // 3
Foreground color is derived from the level number only, so the same
(width, height, level) always yields the same bytes.
"""

import math
from dataclasses import dataclass

from PIL import Image

from .sizing import InvalidLevel

BACKGROUND = (200, 200, 200, 255)
MOTIFS = ("circle", "square", "triangle", "heart", "star")
BYTES_PER_CELL = 4


@dataclass(frozen=True)
class SyntheticImage:
    """RGBA buffer for one level, row-major, 4 bytes per cell."""

    width: int
    height: int
    level: int
    motif: str
    data: bytes

    def pixel(self, index: int) -> tuple[int, int, int, int]:
        """Return the RGBA color of cell `index`."""
        if index < 0 or index >= self.width * self.height:
            raise IndexError(f"cell index {index} out of range")
        offset = index * BYTES_PER_CELL
        r, g, b, a = self.data[offset : offset + BYTES_PER_CELL]
        return r, g, b, a

    def to_image(self) -> Image.Image:
        """Return the buffer as a Pillow RGBA image (one image pixel per cell)."""
        return Image.frombytes("RGBA", (self.width, self.height), self.data)


def motif_for_level(level: int) -> str:
    """Return the motif name drawn on `level`."""
    if level < 1:
        raise InvalidLevel(f"level must be >= 1, got {level}")
    return MOTIFS[(level - 1) % len(MOTIFS)]


def foreground_color(level: int) -> tuple[int, int, int, int]:
    """Level-derived motif color."""
    return (
        50 + (level * 20) % 200,
        100 + (level * 30) % 150,
        150 + (level * 40) % 100,
        255,
    )


def _in_circle(dx: int, dy: int, r: int) -> bool:
    return math.sqrt(dx * dx + dy * dy) <= r


def _in_square(dx: int, dy: int, r: int) -> bool:
    return abs(dx) <= r and abs(dy) <= r


def _in_triangle(dx: int, dy: int, r: int) -> bool:
    # Wedge pointing down: widest at row cy - r, single cell at row cy + r.
    if r == 0:
        return False
    return dy >= -r and abs(dx) <= r * (r - dy) / r


def _in_heart(dx: int, dy: int, r: int) -> bool:
    value = (dx * dx + dy * dy - r * r) ** 3 - dx * dx * dy**3
    return value <= 0 and dy <= r / 2


def _in_star(dx: int, dy: int, r: int) -> bool:
    angle = math.atan2(dy, dx)
    star_radius = r * (0.5 + 0.5 * math.cos(5 * angle))
    return math.sqrt(dx * dx + dy * dy) <= star_radius


_PREDICATES = {
    "circle": _in_circle,
    "square": _in_square,
    "triangle": _in_triangle,
    "heart": _in_heart,
    "star": _in_star,
}


def synthesize(width: int, height: int, level: int) -> SyntheticImage:
    """Generate the image for a level. Pure: no randomness, no I/O."""
    if width < 1 or height < 1:
        raise ValueError(f"image dimensions must be positive, got {width}x{height}")
    motif = motif_for_level(level)
    inside = _PREDICATES[motif]
    fg = bytes(foreground_color(level))
    bg = bytes(BACKGROUND)

    cx = width // 2
    cy = height // 2
    radius = min(width, height) // 3

    buf = bytearray()
    for y in range(height):
        for x in range(width):
            buf += fg if inside(x - cx, y - cy, radius) else bg
    return SyntheticImage(width=width, height=height, level=level, motif=motif, data=bytes(buf))
