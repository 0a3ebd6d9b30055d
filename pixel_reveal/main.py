"""FastAPI app: per-player game snapshot, click, reset, canvas PNG, health."""

import logging
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from fastapi import Depends, FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import GameConfig, load_config
from .game_state import LevelEngine, Snapshot
from .screenshot import cell_size_px, pixel_to_cell, render_canvas_png
from .sessions import PLAYER_ID_RE, SessionRegistry

_config: GameConfig | None = None
_registry: SessionRegistry | None = None


def get_config() -> GameConfig:
    """Return the process-wide config, loaded once and shared by CORS and sessions."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_registry() -> SessionRegistry:
    """Return the process-wide session registry (created from config on first use)."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry(get_config())
    return _registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Apply logging config on startup; flush every session on shutdown."""
    registry = get_registry()
    logging.basicConfig(level=registry.config.log_level)
    yield
    registry.close()


app = FastAPI(title="Pixel Reveal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SnapshotResponse(BaseModel):
    """Display state of a player's game."""

    level: int
    width: int
    height: int
    revealed_count: int
    total_cells: int
    clicks: int
    motif: str
    bonus_reveal: bool  # every click also reveals one random hidden cell

    @classmethod
    def from_snapshot(cls, snap: Snapshot) -> "SnapshotResponse":
        return cls(
            level=snap.level,
            width=snap.width,
            height=snap.height,
            revealed_count=snap.revealed_count,
            total_cells=snap.total_cells,
            clicks=snap.clicks,
            motif=snap.motif,
            bonus_reveal=snap.bonus_reveal,
        )


class ProgressResponse(BaseModel):
    """Full in-memory progress record (same fields as the stored one)."""

    total_clicks: int
    current_level: int
    current_pixels: list[int]


class ClickRequest(BaseModel):
    """Click coordinates: grid cells, or rendered canvas pixels when pixel=True."""

    x: int
    y: int
    pixel: bool = False


class ClickResponse(BaseModel):
    """Result of one click."""

    accepted: bool  # False when the click fell outside the grid
    snapshot: SnapshotResponse
    level_completed: int | None = None  # new level number when this click finished one
    message: str | None = None  # toast text


def _check_player(player: str) -> None:
    if not PLAYER_ID_RE.match(player):
        raise HTTPException(status_code=400, detail=f"invalid player id: {player!r}")


@contextmanager
def _player_session(registry: SessionRegistry, player: str) -> Iterator[LevelEngine]:
    _check_player(player)
    with registry.session(player) as engine:
        yield engine


@app.get("/api/game/{player}", response_model=SnapshotResponse)
def game_snapshot(player: str, registry: SessionRegistry = Depends(get_registry)) -> SnapshotResponse:
    """Return the player's current snapshot (loads stored progress on first access)."""
    with _player_session(registry, player) as engine:
        return SnapshotResponse.from_snapshot(engine.snapshot())


@app.get("/api/game/{player}/progress", response_model=ProgressResponse)
def game_progress(player: str, registry: SessionRegistry = Depends(get_registry)) -> ProgressResponse:
    """Return the player's in-memory progress record."""
    with _player_session(registry, player) as engine:
        progress = engine.progress()
        return ProgressResponse(
            total_clicks=progress.total_clicks,
            current_level=progress.current_level,
            current_pixels=progress.current_pixels,
        )


@app.post("/api/game/{player}/click", response_model=ClickResponse)
def game_click(
    player: str, req: ClickRequest, registry: SessionRegistry = Depends(get_registry)
) -> ClickResponse:
    """Click a cell. Off-grid clicks are accepted as requests but change nothing."""
    with _player_session(registry, player) as engine:
        x, y = req.x, req.y
        if req.pixel:
            cell_px = cell_size_px(engine.width, engine.height, registry.config.canvas_size)
            x, y = pixel_to_cell(x, y, cell_px)
        accepted = engine.grid.contains(x, y)
        event = engine.handle_click(x, y)
        return ClickResponse(
            accepted=accepted,
            snapshot=SnapshotResponse.from_snapshot(engine.snapshot()),
            level_completed=event.new_level if event else None,
            message=event.message if event else None,
        )


@app.post("/api/game/{player}/reset", response_model=SnapshotResponse)
def game_reset(player: str, registry: SessionRegistry = Depends(get_registry)) -> SnapshotResponse:
    """Reset the player's game to level 1 with zero clicks."""
    with _player_session(registry, player) as engine:
        engine.reset_game()
        return SnapshotResponse.from_snapshot(engine.snapshot())


@app.get("/api/game/{player}/canvas.png")
def game_canvas(player: str, registry: SessionRegistry = Depends(get_registry)) -> Response:
    """Return the rendered canvas (revealed colors over gray) as PNG."""
    with _player_session(registry, player) as engine:
        png_bytes = render_canvas_png(engine, canvas_size=registry.config.canvas_size)
    return Response(content=png_bytes, media_type="image/png")


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}
