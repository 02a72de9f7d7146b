"""
Game Rules
==========

Handles spawn positioning and velocity, the exit threshold, and
termination conditions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from apple_catcher.catcher_core.config_loader import GameConfig, get_config


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    truncated: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, False, reason)

    @staticmethod
    def truncation(reason: str) -> "TerminationResult":
        return TerminationResult(False, True, reason)


class SpawnRules:
    """
    Handles where new apples appear and how fast they fall.

    Maps a uniform draw in [0, 1) to an X position that keeps the whole
    apple inside the play area, and scales speed with the current score.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize spawn rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._spawn_y = config.board.spawn_y
        self._fallback_width = config.board.fallback_width
        self._apple_size = config.apple.size
        self._interval_ms = config.spawn.interval_ms

    @property
    def spawn_y(self) -> float:
        """Y coordinate for spawning."""
        return self._spawn_y

    @property
    def interval_ms(self) -> float:
        """Minimum time between two admissions."""
        return self._interval_ms

    def effective_width(self, play_area_width: Optional[float]) -> float:
        """
        Width to use for spawn placement.

        Args:
            play_area_width: Width reported by the host, in pixels.

        Returns:
            The reported width, or the configured fallback if it is missing,
            not positive or not finite.
        """
        if play_area_width is None:
            return self._fallback_width
        try:
            width = float(play_area_width)
        except (TypeError, ValueError, OverflowError):
            return self._fallback_width
        if not math.isfinite(width) or width <= 0:
            return self._fallback_width
        return width

    def get_spawn_x_range(self, play_area_width: Optional[float]) -> Tuple[float, float]:
        """
        Get valid spawn X range, in percent of the play area.

        Args:
            play_area_width: Width reported by the host, in pixels.

        Returns:
            (min_x, max_x) tuple.
        """
        width = self.effective_width(play_area_width)
        apple_span = self._apple_size / width * 100.0
        # An area narrower than one apple pins spawns to the left edge
        return (0.0, max(0.0, 100.0 - apple_span))

    def sample_to_spawn_x(self, u: float, play_area_width: Optional[float]) -> float:
        """
        Convert a uniform draw in [0, 1) to an X position.

        Args:
            u: Uniform draw.
            play_area_width: Width reported by the host, in pixels.

        Returns:
            X in percent of the play area.
        """
        min_x, max_x = self.get_spawn_x_range(play_area_width)
        return min_x + u * (max_x - min_x)

    def spawn_speed(self, u: float, score: int) -> float:
        """
        Speed for a new apple.

        Base speed plus jitter, plus a term that grows with score so the
        game gets harder as it goes.

        Args:
            u: Uniform draw in [0, 1) for the jitter.
            score: Score at admission time.
        """
        spawn = self._config.spawn
        return (
            spawn.base_speed
            + u * spawn.speed_jitter
            + max(0, score) / spawn.score_speed_divisor
        )

    def admission_due(self, now: float, last_admission: float) -> bool:
        """
        True if enough time has passed to admit a new apple.

        The comparison is strict, and a non-finite timestamp never admits.
        """
        elapsed = now - last_admission
        if not math.isfinite(elapsed):
            return False
        return elapsed > self._interval_ms


class ExitRules:
    """Decides when a falling apple has been missed."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._exit_threshold = config.board.exit_threshold

    @property
    def exit_threshold(self) -> float:
        """Y coordinate past which an apple is missed."""
        return self._exit_threshold

    def has_exited(self, y: float) -> bool:
        return y > self._exit_threshold


class TerminationRules:
    """
    Handles game termination conditions.

    - Lives exhausted: the session is over
    - Tick cap: headless episodes are cut off after a fixed number of ticks
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize termination rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._max_ticks = config.caps.max_ticks

    @property
    def max_ticks(self) -> int:
        """Maximum ticks per headless episode."""
        return self._max_ticks

    def check_termination(self, lives: int) -> TerminationResult:
        """
        Check whether the session has ended.

        Args:
            lives: Lives left after the latest tick.

        Returns:
            TerminationResult indicating game state.
        """
        if lives <= 0:
            return TerminationResult.game_over("lives_exhausted")
        return TerminationResult.none()

    def check_truncation(self, ticks: int) -> TerminationResult:
        """
        Check the tick cap (used by the Gymnasium wrapper only).

        Args:
            ticks: Ticks simulated in the current episode.
        """
        if ticks >= self._max_ticks:
            return TerminationResult.truncation("tick_cap")
        return TerminationResult.none()


class GameRules:
    """
    Combined interface for all game rules.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self.spawn = SpawnRules(config)
        self.exit = ExitRules(config)
        self.termination = TerminationRules(config)
