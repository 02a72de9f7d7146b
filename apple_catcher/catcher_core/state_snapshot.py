"""
State Snapshot
==============

Packs session state into fixed-size numpy arrays for Gymnasium observations
and other readers of the output surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from apple_catcher.catcher_core.config_loader import GameConfig, get_config
from apple_catcher.catcher_core.world import FallingObject, World

# Integer codes for the session state in observations
STATE_CODES = {"not_started": 0, "active": 1, "ended": 2}


@dataclass
class GameSnapshot:
    """
    Session state at one instant.

    Object arrays are fixed-size with masking. Slots are ordered closest to
    the exit first, so slot 0 is always the most urgent apple.
    """
    # Core state
    state: str
    score: int
    lives: int
    high_score: int
    ticks: int
    objects_count: int

    # Board info (for normalization)
    exit_threshold: float
    spawn_y: float

    # Derived features
    lowest_apple_y: float          # Largest y on the board, spawn_y if empty
    min_ticks_to_exit: float       # Ticks until the next miss, inf if empty
    danger_level: float            # lowest_apple_y / exit_threshold, clipped to [0, 1]
    ms_since_admission: float

    # Object arrays (fixed size, padded)
    obj_id: np.ndarray             # (MAX_OBJ,) int64, -1 for empty slots
    obj_x: np.ndarray              # (MAX_OBJ,) float32
    obj_y: np.ndarray              # (MAX_OBJ,) float32
    obj_speed: np.ndarray          # (MAX_OBJ,) float32
    obj_mask: np.ndarray           # (MAX_OBJ,) bool

    def slot_object_id(self, slot: int) -> Optional[int]:
        """Identity of the apple in a slot, or None for an empty slot."""
        if 0 <= slot < len(self.obj_mask) and self.obj_mask[slot]:
            return int(self.obj_id[slot])
        return None

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            "state": np.array(STATE_CODES[self.state], dtype=np.int32),
            "score": np.array(self.score, dtype=np.int64),
            "lives": np.array(self.lives, dtype=np.int32),
            "objects_count": np.array(self.objects_count, dtype=np.int32),
            "lowest_apple_y": np.array(self.lowest_apple_y, dtype=np.float32),
            "min_ticks_to_exit": np.array(
                min(self.min_ticks_to_exit, np.finfo(np.float32).max), dtype=np.float32
            ),
            "danger_level": np.array(self.danger_level, dtype=np.float32),
            "obj_x": self.obj_x,
            "obj_y": self.obj_y,
            "obj_speed": self.obj_speed,
            "obj_mask": self.obj_mask.astype(np.int8),
        }


class SnapshotBuilder:
    """Builds GameSnapshots from a World."""

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize snapshot builder.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._max_objects = config.observation.max_objects
        self._exit_threshold = config.board.exit_threshold
        self._spawn_y = config.board.spawn_y

    @property
    def max_objects(self) -> int:
        return self._max_objects

    def build(
        self,
        world: World,
        state: str,
        high_score: int,
        ticks: int,
        now: float
    ) -> GameSnapshot:
        """
        Build a snapshot.

        Args:
            world: Current World.
            state: Session state value ("not_started", "active", "ended").
            high_score: Current high score.
            ticks: Ticks simulated this session.
            now: Current time in ms.
        """
        ordered: List[FallingObject] = sorted(world.objects, key=lambda o: o.y, reverse=True)
        visible = ordered[:self._max_objects]

        obj_id = np.full(self._max_objects, -1, dtype=np.int64)
        obj_x = np.zeros(self._max_objects, dtype=np.float32)
        obj_y = np.zeros(self._max_objects, dtype=np.float32)
        obj_speed = np.zeros(self._max_objects, dtype=np.float32)
        obj_mask = np.zeros(self._max_objects, dtype=bool)

        for i, obj in enumerate(visible):
            obj_id[i] = obj.id
            obj_x[i] = obj.x
            obj_y[i] = obj.y
            obj_speed[i] = obj.speed
            obj_mask[i] = True

        if ordered:
            lowest_y = ordered[0].y
            # Stationary apples never exit
            min_ticks = min(
                (max(0.0, (self._exit_threshold - o.y) / o.speed) for o in ordered if o.speed > 0),
                default=float("inf")
            )
        else:
            lowest_y = self._spawn_y
            min_ticks = float("inf")

        danger = float(np.clip(lowest_y / self._exit_threshold, 0.0, 1.0)) if self._exit_threshold > 0 else 0.0

        return GameSnapshot(
            state=state,
            score=world.score,
            lives=world.lives,
            high_score=high_score,
            ticks=ticks,
            objects_count=len(world.objects),
            exit_threshold=self._exit_threshold,
            spawn_y=self._spawn_y,
            lowest_apple_y=lowest_y,
            min_ticks_to_exit=min_ticks,
            danger_level=danger,
            ms_since_admission=max(0.0, now - world.last_admission),
            obj_id=obj_id,
            obj_x=obj_x,
            obj_y=obj_y,
            obj_speed=obj_speed,
            obj_mask=obj_mask,
        )
