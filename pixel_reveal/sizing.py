"""Level sizing: how many cells a level has and how they are laid out.

Levels 1-10 grow by 10 cells per level (10, 20, ... 100). From level 11 on,
each level adds 20 cells, so every further block of ten levels adds 200.
The grid is the most square width x height that holds the cells:
  width = ceil(sqrt(total)), height = ceil(total / width)
"""

import math
from dataclasses import dataclass

FIRST_LEVEL_CELLS = 10
EARLY_LEVEL_STEP = 10  # levels 2..10
LATE_LEVEL_BASE = 100  # total_cells(10)
LATE_LEVEL_STEP = 20  # levels >= 11
LATE_LEVEL_BLOCK = 10


class InvalidLevel(ValueError):
    """Raised when a level number below 1 reaches the sizing model."""


@dataclass(frozen=True)
class GridSize:
    """Grid shape for a level."""

    width: int
    height: int

    @property
    def area(self) -> int:
        """Number of addressable cells (may exceed the level's total_cells)."""
        return self.width * self.height

    def contains(self, x: int, y: int) -> bool:
        """Return True if (x, y) lies on the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> int:
        """Row-major cell index of (x, y)."""
        return y * self.width + x


def _check_level(level: int) -> None:
    if level < 1:
        raise InvalidLevel(f"level must be >= 1, got {level}")


def total_cells(level: int) -> int:
    """Return the number of cells a player must reveal to finish `level`."""
    _check_level(level)
    if level == 1:
        return FIRST_LEVEL_CELLS
    if level <= 10:
        return FIRST_LEVEL_CELLS + (level - 1) * EARLY_LEVEL_STEP
    extra = level - 10
    blocks, rest = divmod(extra, LATE_LEVEL_BLOCK)
    return (
        LATE_LEVEL_BASE
        + blocks * LATE_LEVEL_STEP * LATE_LEVEL_BLOCK
        + rest * LATE_LEVEL_STEP
    )


def dimensions(cells: int) -> GridSize:
    """Return the near-square grid that holds `cells` cells."""
    if cells < 1:
        raise ValueError(f"cells must be positive, got {cells}")
    width = math.ceil(math.sqrt(cells))
    height = math.ceil(cells / width)
    return GridSize(width=width, height=height)


def grid_for_level(level: int) -> GridSize:
    """Shortcut for dimensions(total_cells(level))."""
    return dimensions(total_cells(level))
