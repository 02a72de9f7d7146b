"""
RNG - Spawn Random Source
=========================

Seedable uniform source used for apple position and speed jitter, so that
a session is reproducible for a given seed.
"""

from __future__ import annotations

import random
from typing import Any, Optional


class SpawnRandom:
    """
    Uniform random source for apple admission.

    Each admission draws exactly two values, in order: horizontal position,
    then speed jitter. Keeping that order fixed is what makes two sessions
    with the same seed and the same tick timestamps identical.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random source.

        Args:
            seed: Random seed for reproducibility. Random if None.
        """
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> Optional[int]:
        """Seed the source was last reset with."""
        return self._seed

    def uniform(self) -> float:
        """Draw a float in [0, 1)."""
        return self._rng.random()

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the source with optional new seed.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)

    def get_state(self) -> Any:
        """Get state for checkpointing."""
        return self._rng.getstate()

    def set_state(self, state: Any) -> None:
        """Restore state captured by get_state()."""
        self._rng.setstate(state)
