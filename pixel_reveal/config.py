"""Game server settings loaded from YAML."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

CONFIG_ENV_VAR = "PIXEL_REVEAL_CONFIG"
DEFAULT_CONFIG_PATH = Path("configs") / "game.yaml"


class GameConfig(BaseModel):
    """Settings for the game server and the play CLI."""

    progress_dir: str = "progress"  # one <player>.json per player
    flush_every: int = 1  # save every N clicks (level changes always save)
    async_writes: bool = True  # saves run on a background writer thread
    canvas_size: int = 500  # rendered canvas PNG size in pixels (longest side)
    seed: int | None = None  # bonus-reveal RNG seed; None = nondeterministic
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    server_url: str = "http://127.0.0.1:8000"  # used by pixel-reveal-play

    @field_validator("flush_every")
    @classmethod
    def validate_flush_every(cls, v: int) -> int:
        """Validate that flush_every is at least 1."""
        if v < 1:
            raise ValueError(f"flush_every must be >= 1, got {v}")
        return v

    @field_validator("canvas_size")
    @classmethod
    def validate_canvas_size(cls, v: int) -> int:
        """Validate that canvas_size is positive."""
        if v < 1:
            raise ValueError(f"canvas_size must be positive, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log_level: {v}")
        return level


def load_config(path: str | Path | None = None) -> GameConfig:
    """Load GameConfig from YAML.

    Path resolution: explicit `path`, then $PIXEL_REVEAL_CONFIG, then
    configs/game.yaml. Only the default path may be missing (defaults are used).
    """
    explicit = path if path is not None else os.environ.get(CONFIG_ENV_VAR)
    p = Path(explicit) if explicit else DEFAULT_CONFIG_PATH
    if not p.is_absolute():
        p = Path.cwd() / p
    if not p.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {p}")
        return GameConfig()
    with open(p) as f:
        data = yaml.safe_load(f) or {}
    return GameConfig(**data)
