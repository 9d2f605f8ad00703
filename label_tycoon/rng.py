"""Deterministic random source for the simulation.

The engine never touches the ``random`` module's global state. Every
advance_turn() call gets its own RNG, matching the protocol:

    def __call__(self) -> float: ...   # value in [0, 1)

Three implementations are provided:

    SeededRNG: private random.Random seeded from a string. Production.
    FixedRNG: always returns the same value. Tests.
    SequenceRNG: replays a list of values, cycling. Tests.
"""

from __future__ import annotations

import random
from typing import Protocol, Sequence


class RNG(Protocol):
    def __call__(self) -> float: ...


def turn_seed(game_id: str, turn: int) -> str:
    """Seed string for a game's turn; same game + turn -> same stream."""
    return f"{game_id}-{turn}"


class SeededRNG:
    def __init__(self, seed: str) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def __call__(self) -> float:
        return self._random.random()


class FixedRNG:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return self.value


class SequenceRNG:
    def __init__(self, values: Sequence[float]) -> None:
        if not values:
            raise ValueError("SequenceRNG needs at least one value")
        self._values = list(values)
        self.calls = 0

    def __call__(self) -> float:
        value = self._values[self.calls % len(self._values)]
        self.calls += 1
        return value


def rng_range(rng: RNG, low: float, high: float) -> float:
    """One draw scaled to [low, high)."""
    return low + rng() * (high - low)


def rng_int(rng: RNG, low: int, high: int) -> int:
    """One draw mapped to an integer in [low, high] inclusive."""
    return min(high, low + int(rng() * (high - low + 1)))
