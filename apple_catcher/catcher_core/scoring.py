"""
Scoring System
==============

Applies the dismissal reward when the player clicks an apple.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from apple_catcher.catcher_core.config_loader import GameConfig, get_config
from apple_catcher.catcher_core.world import World


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    object_id: int
    was_present: bool  # False when the apple had already left the World

    def __repr__(self) -> str:
        if not self.was_present:
            return f"ScoreEvent(late_dismiss={self.object_id}, points={self.points})"
        return f"ScoreEvent(dismiss={self.object_id}, points={self.points})"


class DismissHandler:
    """
    Removes clicked apples and awards points.

    The reward is granted on every dismissal, including one that arrives
    after the apple was already removed by a tick: a click racing the exit
    still counts.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize dismiss handler.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._reward = config.scoring.dismiss_reward

    @property
    def reward(self) -> int:
        """Points per dismissal."""
        return self._reward

    def dismiss(self, world: World, object_id: int) -> World:
        """
        Remove an apple by identity and add the reward.

        Args:
            world: Current state.
            object_id: Identity of the clicked apple.

        Returns:
            Updated World. Lives, timing and other apples are unchanged.
        """
        return self.apply(world, object_id)[0]

    def apply(self, world: World, object_id: int) -> Tuple[World, ScoreEvent]:
        """
        Same as dismiss(), also returning the ScoreEvent.

        Args:
            world: Current state.
            object_id: Identity of the clicked apple.

        Returns:
            (updated World, ScoreEvent) tuple.
        """
        was_present = world.contains(object_id)
        updated = world.without(object_id) if was_present else world
        updated = replace(updated, score=updated.score + self._reward)
        event = ScoreEvent(points=self._reward, object_id=object_id, was_present=was_present)
        return updated, event
