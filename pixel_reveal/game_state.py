"""Per-player game state: level, grid, image, revealed cells, click count."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .image_synth import SyntheticImage, synthesize
from .progress import PersistError, Progress, ProgressGateway, ProgressNotFound
from .reveal import IndexPicker, RandomPicker, RevealTracker
from .sizing import GridSize, grid_for_level, total_cells

logger = logging.getLogger(__name__)

BONUS_REVEAL_LEVEL = 2  # from this level on every click reveals one extra random cell


@dataclass(frozen=True)
class LevelCompleted:
    """Emitted once when the player finishes a level."""

    new_level: int

    @property
    def message(self) -> str:
        """Toast text for the UI."""
        return f"Level complete! You reached level {self.new_level}."


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the game for display."""

    level: int
    width: int
    height: int
    revealed_count: int
    total_cells: int
    clicks: int
    motif: str
    bonus_reveal: bool


class LevelEngine:
    """Click/level state machine for one player.

    All mutation goes through handle_click(), advance() and reset_game().
    Every accepted click results in exactly one gateway.save() call; save
    failures are logged and never undo in-memory progress.
    """

    def __init__(self, gateway: ProgressGateway, picker: IndexPicker | None = None) -> None:
        self._gateway = gateway
        self._picker = picker if picker is not None else RandomPicker()
        self._listeners: list[Callable[[LevelCompleted], Any]] = []
        progress = self._load_progress()
        self._clicks = progress.total_clicks
        self._tracker = RevealTracker(0)
        self._setup_level(progress.current_level)
        self._restore_pixels(progress.current_pixels)

    # ------------------------------------------------------------------
    # read-only state
    # ------------------------------------------------------------------
    @property
    def level(self) -> int:
        return self._level

    @property
    def grid(self) -> GridSize:
        return self._grid

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def total_cells(self) -> int:
        return self._total

    @property
    def clicks(self) -> int:
        return self._clicks

    @property
    def image(self) -> SyntheticImage:
        return self._image

    @property
    def tracker(self) -> RevealTracker:
        return self._tracker

    def snapshot(self) -> Snapshot:
        """Return the display snapshot."""
        return Snapshot(
            level=self._level,
            width=self._grid.width,
            height=self._grid.height,
            revealed_count=self._tracker.count(),
            total_cells=self._total,
            clicks=self._clicks,
            motif=self._image.motif,
            bonus_reveal=self._level >= BONUS_REVEAL_LEVEL,
        )

    def progress(self) -> Progress:
        """Return the in-memory progress record (what the store converges to)."""
        return Progress(
            total_clicks=self._clicks,
            current_level=self._level,
            current_pixels=self._tracker.ordered(),
        )

    def subscribe(self, callback: Callable[[LevelCompleted], Any]) -> None:
        """Register a LevelCompleted listener."""
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    def handle_click(self, x: int, y: int) -> LevelCompleted | None:
        """Process a click on cell (x, y).

        Out-of-grid clicks are ignored. Returns the LevelCompleted event when
        this click finished the level, else None.
        """
        if not self._grid.contains(x, y):
            return None
        self._clicks += 1
        self._tracker.reveal(self._grid.index_of(x, y))
        if self._level >= BONUS_REVEAL_LEVEL:
            self._bonus_reveal()

        if self._tracker.count() >= self._total:
            event = self._next_level()
            self._persist(
                {
                    "total_clicks": self._clicks,
                    "current_level": self._level,
                    "current_pixels": [],
                }
            )
            self._notify(event)
            return event

        self._persist({"total_clicks": self._clicks, "current_pixels": self._tracker.ordered()})
        return None

    on_cell_click = handle_click

    def advance(self) -> LevelCompleted:
        """Move to the next level with a fresh grid, image and empty reveal set.

        Does not persist; handle_click() saves the transition as one update
        before listeners are notified.
        """
        event = self._next_level()
        self._notify(event)
        return event

    def reset_game(self) -> None:
        """Start over at level 1 with zero clicks."""
        self._clicks = 0
        self._setup_level(1)
        self._persist({"total_clicks": 0, "current_level": 1, "current_pixels": []})

    on_reset_requested = reset_game

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------
    def _load_progress(self) -> Progress:
        try:
            return self._gateway.load()
        except ProgressNotFound:
            return Progress()
        except PersistError as e:
            logger.warning("Starting from level 1, progress unreadable: %s", e)
            return Progress()

    def _next_level(self) -> LevelCompleted:
        event = LevelCompleted(new_level=self._level + 1)
        logger.info("Level %d complete after %d clicks", self._level, self._clicks)
        self._setup_level(event.new_level)
        return event

    def _notify(self, event: LevelCompleted) -> None:
        for callback in self._listeners:
            callback(event)

    def _setup_level(self, level: int) -> None:
        self._level = level
        self._total = total_cells(level)
        self._grid = grid_for_level(level)
        self._image = synthesize(self._grid.width, self._grid.height, level)
        self._tracker.reset(self._grid.area)

    def _restore_pixels(self, pixels: list[int]) -> None:
        for index in pixels:
            if 0 <= index < self._grid.area:
                self._tracker.reveal(index)
            else:
                logger.warning("Dropping stored pixel %d outside %s grid", index, self._grid)

    def _bonus_reveal(self) -> None:
        candidates = self._tracker.unrevealed()
        if candidates:
            self._tracker.reveal(self._picker.pick(candidates))

    def _persist(self, partial: dict[str, Any]) -> None:
        try:
            self._gateway.save(partial)
        except PersistError as e:
            logger.warning("Could not persist progress (level %d): %s", self._level, e)
