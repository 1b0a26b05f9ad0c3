"""Random number generation utilities for the training agent."""

from typing import Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class SeededRNG:
    """Seeded random number generator for reproducible training runs."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._generator = np.random.default_rng(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return float(self._generator.random())

    def choice(self, seq: Sequence[T]) -> T:
        """Choose random element from a non-empty sequence."""
        return seq[int(self._generator.integers(len(seq)))]
