"""Random-source protocol and deterministic sources for tests and replays."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable


@runtime_checkable
class RandomSource(Protocol):
    """Anything with a ``random()`` returning floats in [0, 1).

    ``random.Random`` conforms. The engine never touches the global
    generator; every roll goes through the source it is handed.
    """

    def random(self) -> float:
        ...


class FixedRandom:
    """Deterministic random source.

    Returns the given values in order, cycling when exhausted. A single float
    makes every roll return the same number, which pins every randomised
    interval and chance for a test.
    """

    def __init__(self, values: float | Iterable[float] = 0.5) -> None:
        seq = [float(values)] if isinstance(values, (int, float)) else [float(v) for v in values]
        if not seq:
            raise ValueError("FixedRandom needs at least one value")
        for v in seq:
            if not 0.0 <= v < 1.0:
                raise ValueError(f"FixedRandom values must be in [0, 1), got {v}")
        self._values = seq
        self._index = 0
        self.calls = 0

    def random(self) -> float:
        value = self._values[self._index]
        self._index = (self._index + 1) % len(self._values)
        self.calls += 1
        return value


def roll_chance(chance: float, rng: RandomSource) -> bool:
    """Single roll against *chance*, capped at certainty. Non-positive never fires."""
    if chance <= 0:
        return False
    return rng.random() < min(1.0, chance)


def random_between(lo: int, hi: int, rng: RandomSource) -> int:
    """Uniform integer in ``[lo, hi]`` drawn from one ``random()`` call."""
    return min(hi, lo + int(rng.random() * (hi - lo + 1)))
