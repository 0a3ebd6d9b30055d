"""Progress persistence: record type, gateway contract and stores.

A gateway exposes load() and save(partial). Partials are any subset of
PROGRESS_FIELDS and are merged into the stored record in one step.

Stores:
  InMemoryProgressStore  dict-backed, no I/O
  JsonProgressStore      one JSON file per player, temp file + os.replace
Wrappers:
  BatchingGateway        flush policy ("save every N clicks")
  SerialWriter           fire-and-forget saves on one worker thread
"""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = ("total_clicks", "current_level", "current_pixels")


class ProgressNotFound(LookupError):
    """No progress stored yet (first run)."""


class PersistError(RuntimeError):
    """Progress could not be read or written."""


@dataclass
class Progress:
    """Persisted game progress for one player."""

    total_clicks: int = 0
    current_level: int = 1
    current_pixels: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Progress":
        """Build a Progress from a stored record, repairing bad values."""
        clicks = _as_int(data.get("total_clicks"))
        if clicks is None or clicks < 0:
            if "total_clicks" in data:
                logger.warning("Invalid total_clicks %r, using 0", data.get("total_clicks"))
            clicks = 0
        level = _as_int(data.get("current_level"))
        if level is None or level < 1:
            if "current_level" in data:
                logger.warning("Invalid current_level %r, using 1", data.get("current_level"))
            level = 1
        raw_pixels = data.get("current_pixels")
        pixels: list[int] = []
        if isinstance(raw_pixels, list):
            for item in raw_pixels:
                value = _as_int(item)
                if value is None:
                    logger.warning("Dropping invalid pixel index %r", item)
                    continue
                pixels.append(value)
        elif raw_pixels is not None:
            logger.warning("current_pixels is not a list (%r), using []", type(raw_pixels).__name__)
        return cls(total_clicks=clicks, current_level=level, current_pixels=pixels)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def merged(self, partial: Mapping[str, Any]) -> "Progress":
        """Return a copy with the fields of `partial` applied."""
        check_partial(partial)
        data = self.to_dict()
        data.update(partial)
        data["current_pixels"] = list(data["current_pixels"])
        return Progress.from_dict(data)


def _as_int(value: Any) -> int | None:
    # bool is an int subclass; a stored true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def check_partial(partial: Mapping[str, Any]) -> None:
    """Reject partial updates with unknown field names."""
    unknown = set(partial) - set(PROGRESS_FIELDS)
    if unknown:
        raise ValueError(f"Unknown progress fields: {sorted(unknown)}")


class ProgressGateway(Protocol):
    """Persistence contract consumed by LevelEngine."""

    def load(self) -> Progress: ...

    def save(self, partial: Mapping[str, Any]) -> None: ...


class InMemoryProgressStore:
    """Gateway that keeps the record in memory."""

    def __init__(self, initial: Progress | None = None) -> None:
        self._progress = initial
        self.saves: list[dict[str, Any]] = []

    def load(self) -> Progress:
        if self._progress is None:
            raise ProgressNotFound("no progress stored")
        return Progress.from_dict(self._progress.to_dict())

    def save(self, partial: Mapping[str, Any]) -> None:
        base = self._progress or Progress()
        self._progress = base.merged(partial)
        self.saves.append(dict(partial))


class JsonProgressStore:
    """Gateway persisting one player's progress to a JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a failed save leaves the previous record untouched.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Progress:
        if not self._path.exists():
            raise ProgressNotFound(f"no progress file at {self._path}")
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise PersistError(f"Could not load progress from {self._path}: {e}") from e
        if not isinstance(payload, dict):
            raise PersistError(f"Progress file {self._path} does not hold an object")
        return Progress.from_dict(payload)

    def save(self, partial: Mapping[str, Any]) -> None:
        check_partial(partial)
        try:
            current = self.load()
        except ProgressNotFound:
            current = Progress()
        except PersistError as e:
            # unreadable record: the engine started fresh, so overwrite it
            logger.warning("Replacing unreadable progress file: %s", e)
            current = Progress()
        updated = current.merged(partial)
        self._write(updated)

    def _write(self, progress: Progress) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(progress.to_dict(), f)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistError(f"Could not save progress to {self._path}: {e}") from e


class BatchingGateway:
    """Flush policy wrapper: forward merged partials every `every` saves.

    Partials carrying current_level (level transitions, resets) are
    forwarded immediately together with anything still pending.
    """

    def __init__(self, inner: ProgressGateway, every: int = 1) -> None:
        if every < 1:
            raise ValueError(f"every must be >= 1, got {every}")
        self._inner = inner
        self._every = every
        self._pending: dict[str, Any] = {}
        self._count = 0

    @property
    def pending(self) -> dict[str, Any]:
        return dict(self._pending)

    def load(self) -> Progress:
        return self._inner.load()

    def save(self, partial: Mapping[str, Any]) -> None:
        check_partial(partial)
        self._pending.update(partial)
        self._count += 1
        if "current_level" in partial or self._count >= self._every:
            self.flush()

    def flush(self) -> None:
        """Forward pending fields to the inner gateway.

        Pending fields are kept when the inner save fails so the next flush
        retries them.
        """
        if not self._pending:
            return
        self._inner.save(dict(self._pending))
        self._pending = {}
        self._count = 0


class SerialWriter:
    """Run saves on a single worker thread, in submission order.

    save() returns immediately; at most one inner save runs at a time, so a
    stale write can never land after a newer one. Failures are logged.
    """

    def __init__(self, inner: ProgressGateway) -> None:
        self._inner = inner
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="progress-writer")
        self._lock = threading.Lock()
        self._last: Future | None = None

    def load(self) -> Progress:
        self.flush()
        return self._inner.load()

    def save(self, partial: Mapping[str, Any]) -> None:
        check_partial(partial)
        with self._lock:
            self._last = self._executor.submit(self._save, dict(partial))

    def _save(self, partial: dict[str, Any]) -> None:
        try:
            self._inner.save(partial)
        except PersistError as e:
            logger.warning("Progress save failed: %s", e)

    def flush(self) -> None:
        """Block until every submitted save has run, then flush the inner gateway."""
        with self._lock:
            last = self._last
        if last is not None:
            last.result()
        inner_flush = getattr(self._inner, "flush", None)
        if inner_flush is not None:
            self._executor.submit(self._flush_inner, inner_flush).result()

    def _flush_inner(self, inner_flush) -> None:
        try:
            inner_flush()
        except PersistError as e:
            logger.warning("Progress flush failed: %s", e)

    def close(self) -> None:
        """Flush pending saves and stop the worker."""
        self.flush()
        self._executor.shutdown(wait=True)
