"""Deterministic random source for the turn reducer.

Every random draw the engine makes (to-hit rolls, damage, monster
wandering, arena purses) goes through a ``RandomSource`` handed to
``step``. Replaying the same seed and command list from the same starting
state therefore reproduces the same state and events exactly.

Example:
    >>> from omega_engine.engine.rng import DeterministicRng
    >>> rng = DeterministicRng.seeded(42)
    >>> 1 <= rng.range_inclusive(1, 6) <= 6
    True
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar, runtime_checkable


T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Anything that can draw an inclusive integer range."""

    def range_inclusive(self, low: int, high: int) -> int:
        """Draw an integer in ``[low, high]``; return ``low`` when high <= low."""
        ...


class DeterministicRng:
    """Seeded pseudo-random stream.

    Uses a private ``random.Random`` instance so that draws never touch
    the interpreter-wide generator.

    Attributes:
        seed: The seed the stream was created with.
        draws: Number of values drawn so far.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self.draws = 0
        self._random = random.Random(seed)

    @classmethod
    def seeded(cls, seed: int) -> DeterministicRng:
        return cls(seed)

    def range_inclusive(self, low: int, high: int) -> int:
        self.draws += 1
        if high <= low:
            # Still consume a value so call order alone fixes the stream
            self._random.random()
            return low
        return self._random.randint(low, high)

    def __repr__(self) -> str:
        return f"DeterministicRng(seed={self.seed!r}, draws={self.draws!r})"


def roll_d20(rng: RandomSource) -> int:
    return rng.range_inclusive(1, 20)


def chance(rng: RandomSource, percent: int) -> bool:
    """Return True with the given percent probability (one draw)."""
    return rng.range_inclusive(1, 100) <= percent


def choose(rng: RandomSource, options: Sequence[T]) -> T:
    """Pick one element; the sequence must not be empty."""
    return options[rng.range_inclusive(0, len(options) - 1)]


__all__ = [
    "RandomSource",
    "DeterministicRng",
    "roll_d20",
    "chance",
    "choose",
]
