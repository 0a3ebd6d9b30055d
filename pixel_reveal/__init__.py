"""Pixel Reveal - incremental reveal-the-picture clicker game.

This package provides the level-progression and pixel-reveal engine, progress
persistence, a canvas renderer and a FastAPI service exposing the game.
"""

__version__ = "0.1.0"

from .game_state import LevelCompleted, LevelEngine, Snapshot
from .image_synth import SyntheticImage, synthesize
from .progress import (
    InMemoryProgressStore,
    JsonProgressStore,
    PersistError,
    Progress,
    ProgressNotFound,
)
from .reveal import RandomPicker, RevealTracker
from .screenshot import render_canvas
from .sizing import InvalidLevel, dimensions, total_cells

__all__ = [
    "LevelEngine",
    "LevelCompleted",
    "Snapshot",
    "SyntheticImage",
    "synthesize",
    "Progress",
    "ProgressNotFound",
    "PersistError",
    "InMemoryProgressStore",
    "JsonProgressStore",
    "RevealTracker",
    "RandomPicker",
    "render_canvas",
    "InvalidLevel",
    "total_cells",
    "dimensions",
]
