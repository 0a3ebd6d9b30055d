"""Revealed-cell bookkeeping for the level in progress."""

import random
from collections.abc import Iterable, Sequence
from typing import Protocol


class IndexPicker(Protocol):
    """Source of the bonus-reveal cell: pick one uniformly from `candidates`."""

    def pick(self, candidates: Sequence[int]) -> int: ...


class RandomPicker:
    """IndexPicker backed by random.Random (seedable for reproducible games)."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def pick(self, candidates: Sequence[int]) -> int:
        if not candidates:
            raise ValueError("cannot pick from an empty candidate list")
        return self._rng.choice(candidates)


class RevealTracker:
    """Ordered set of revealed cell indices on a grid of `area` cells.

    Insertion order is kept so the persisted pixel list replays the
    player's actual reveal sequence.
    """

    def __init__(self, area: int, revealed: Iterable[int] = ()) -> None:
        self._area = area
        self._revealed: dict[int, None] = {}
        for index in revealed:
            self.reveal(index)

    @property
    def area(self) -> int:
        """Number of addressable cells."""
        return self._area

    def reveal(self, index: int) -> bool:
        """Reveal `index`. Returns True if it was not revealed before."""
        if index < 0 or index >= self._area:
            raise IndexError(f"cell index {index} outside grid of {self._area} cells")
        if index in self._revealed:
            return False
        self._revealed[index] = None
        return True

    def is_revealed(self, index: int) -> bool:
        return index in self._revealed

    def count(self) -> int:
        return len(self._revealed)

    def revealed_indices(self) -> set[int]:
        return set(self._revealed)

    def ordered(self) -> list[int]:
        """Revealed indices in reveal order."""
        return list(self._revealed)

    def unrevealed(self) -> list[int]:
        """Hidden indices in ascending order."""
        return [i for i in range(self._area) if i not in self._revealed]

    def reset(self, area: int | None = None) -> None:
        """Hide every cell; optionally switch to a grid of `area` cells."""
        self._revealed = {}
        if area is not None:
            self._area = area
