"""One LevelEngine per player, built lazily from the player's stored progress."""

import logging
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import GameConfig
from .game_state import LevelEngine
from .progress import (
    BatchingGateway,
    JsonProgressStore,
    PersistError,
    ProgressGateway,
    SerialWriter,
)
from .reveal import RandomPicker

logger = logging.getLogger(__name__)

PLAYER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class SessionRegistry:
    """Owns the engines and gateways of all active players.

    Access to a player's engine goes through session(), which holds that
    player's lock so concurrent requests never interleave inside the engine.
    """

    def __init__(self, config: GameConfig) -> None:
        self._config = config
        self._engines: dict[str, LevelEngine] = {}
        self._gateways: dict[str, ProgressGateway] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @property
    def config(self) -> GameConfig:
        return self._config

    def progress_path(self, player: str) -> Path:
        return Path(self._config.progress_dir) / f"{player}.json"

    def _build_gateway(self, player: str) -> ProgressGateway:
        gateway: ProgressGateway = JsonProgressStore(self.progress_path(player))
        if self._config.flush_every > 1:
            gateway = BatchingGateway(gateway, every=self._config.flush_every)
        if self._config.async_writes:
            gateway = SerialWriter(gateway)
        return gateway

    @contextmanager
    def session(self, player: str) -> Iterator[LevelEngine]:
        """Yield the player's engine while holding its lock."""
        if not PLAYER_ID_RE.match(player):
            raise ValueError(f"invalid player id: {player!r}")
        with self._registry_lock:
            lock = self._locks.setdefault(player, threading.Lock())
        with lock:
            engine = self._engines.get(player)
            if engine is None:
                gateway = self._build_gateway(player)
                engine = LevelEngine(gateway, picker=RandomPicker(self._config.seed))
                self._gateways[player] = gateway
                self._engines[player] = engine
                logger.info("Loaded session for %s at level %d", player, engine.level)
            yield engine

    def flush(self) -> None:
        """Push every pending save to storage."""
        for player, gateway in list(self._gateways.items()):
            self._call(player, gateway, "flush")

    def close(self) -> None:
        """Flush all sessions and stop background writers."""
        for player, gateway in list(self._gateways.items()):
            if not self._call(player, gateway, "close"):
                self._call(player, gateway, "flush")
        self._engines.clear()
        self._gateways.clear()

    def _call(self, player: str, gateway: ProgressGateway, name: str) -> bool:
        method = getattr(gateway, name, None)
        if method is None:
            return False
        try:
            method()
        except PersistError as e:
            logger.warning("Could not %s progress for %s: %s", name, player, e)
        return True
