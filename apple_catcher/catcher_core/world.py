"""
World State
===========

Immutable values describing one session: the falling apples, score, lives
and the time of the last admission. Every operation returns a new World.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class FallingObject:
    """A single falling apple."""
    id: int       # Unique, increasing in admission order
    x: float      # Percent of play-area width from the left edge
    y: float      # Percent of play-area height from the top (may be negative)
    speed: float  # Percent of height travelled per tick

    def moved(self) -> "FallingObject":
        """Return this apple one tick further down."""
        return replace(self, y=self.y + self.speed)


@dataclass(frozen=True)
class World:
    """
    Live state of one session.

    Objects are kept in admission order, but nothing depends on that order;
    lookups go through the identity.
    """
    objects: Tuple[FallingObject, ...] = ()
    score: int = 0
    lives: int = 0
    last_admission: float = 0.0
    next_id: int = 1

    @classmethod
    def initial(
        cls,
        lives: int,
        now: float,
        next_id: int = 1
    ) -> "World":
        """
        Build the World for a fresh session.

        Args:
            lives: Starting lives.
            now: Session start timestamp (ms); first admission is one interval later.
            next_id: First identity to hand out.
        """
        return cls(objects=(), score=0, lives=lives, last_admission=now, next_id=next_id)

    @property
    def object_count(self) -> int:
        return len(self.objects)

    def get(self, object_id: int) -> Optional[FallingObject]:
        """Find an apple by identity, or None."""
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    def contains(self, object_id: int) -> bool:
        return self.get(object_id) is not None

    def without(self, object_id: int) -> "World":
        """Return a World with the given apple removed (no-op if absent)."""
        return replace(
            self,
            objects=tuple(obj for obj in self.objects if obj.id != object_id)
        )
