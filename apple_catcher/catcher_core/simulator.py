"""
Tick Simulator
==============

One display frame of the game: move every apple, drop the ones that fell
past the exit threshold (one life each), and admit a new apple when the
spawn interval has elapsed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from apple_catcher.catcher_core.config_loader import GameConfig, get_config
from apple_catcher.catcher_core.rng import SpawnRandom
from apple_catcher.catcher_core.rules import GameRules
from apple_catcher.catcher_core.world import FallingObject, World

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single tick."""
    world: World
    exited: Tuple[FallingObject, ...]
    admitted: Optional[FallingObject]
    lives_lost: int  # After flooring at zero, so may be below len(exited)


class TickSimulator:
    """
    Advances a World by one tick.

    The input World is never modified. The only hidden state is the random
    source, which is consumed once per admission.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[SpawnRandom] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize simulator.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source. A new one seeded with `seed` if None.
            seed: Seed for the random source when `rng` is None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rules = GameRules(config)
        self._rng = rng if rng is not None else SpawnRandom(seed)

    @property
    def rules(self) -> GameRules:
        return self._rules

    @property
    def rng(self) -> SpawnRandom:
        return self._rng

    def advance(
        self,
        world: World,
        now: float,
        play_area_width: Optional[float] = None
    ) -> World:
        """
        Advance the world by one tick.

        Args:
            world: Current state.
            now: Tick timestamp in milliseconds.
            play_area_width: Host play-area width in pixels; None or unusable
                values fall back to the configured width.

        Returns:
            The updated World. Score is unchanged.
        """
        return self.step(world, now, play_area_width).world

    def step(
        self,
        world: World,
        now: float,
        play_area_width: Optional[float] = None
    ) -> TickResult:
        """
        Advance the world by one tick and report what happened.

        Args:
            world: Current state.
            now: Tick timestamp in milliseconds.
            play_area_width: Host play-area width in pixels.

        Returns:
            TickResult with the new World, the apples that exited and the
            apple admitted this tick, if any.
        """
        survivors: List[FallingObject] = []
        exited: List[FallingObject] = []
        for obj in world.objects:
            moved = obj.moved()
            if self._rules.exit.has_exited(moved.y):
                exited.append(moved)
            else:
                survivors.append(moved)

        lives = max(0, world.lives - len(exited))
        if exited:
            logger.debug("%d apple(s) missed, lives %d -> %d", len(exited), world.lives, lives)

        admitted = None
        last_admission = world.last_admission
        next_id = world.next_id
        if self._rules.spawn.admission_due(now, world.last_admission):
            admitted = self._admit(next_id, world.score, play_area_width)
            survivors.append(admitted)
            last_admission = now
            next_id += 1
            logger.debug(
                "Admitted apple %d at x=%.1f speed=%.3f",
                admitted.id, admitted.x, admitted.speed
            )

        new_world = replace(
            world,
            objects=tuple(survivors),
            lives=lives,
            last_admission=last_admission,
            next_id=next_id
        )
        return TickResult(
            world=new_world,
            exited=tuple(exited),
            admitted=admitted,
            lives_lost=world.lives - lives
        )

    def _admit(
        self,
        object_id: int,
        score: int,
        play_area_width: Optional[float]
    ) -> FallingObject:
        """Create a new apple above the visible area."""
        spawn = self._rules.spawn
        # Draw order (position, then jitter) is fixed for reproducibility
        x = spawn.sample_to_spawn_x(self._rng.uniform(), play_area_width)
        speed = spawn.spawn_speed(self._rng.uniform(), score)
        return FallingObject(id=object_id, x=x, y=spawn.spawn_y, speed=speed)
