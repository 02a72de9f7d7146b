"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to Apple Catcher. One environment
step is one display frame on a simulated clock: the action is applied as a
click, then the session ticks once.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from apple_catcher.catcher_core.config_loader import GameConfig, load_config
from apple_catcher.catcher_core.scheduler import FrameScheduler, SimulatedClock
from apple_catcher.catcher_core.session import SessionController, SessionState
from apple_catcher.catcher_core.state_snapshot import GameSnapshot
from apple_catcher.catcher_core.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


class AppleCatcherEnv(gym.Env):
    """
    Apple Catcher as a Gymnasium environment.

    Action Space:
        Discrete(max_objects + 1)
        0 does nothing; k clicks the apple in observation slot k - 1.
        Slots are ordered closest-to-exit first. Clicking an empty slot
        does nothing.

    Observation Space:
        Dict built from GameSnapshot.to_obs_dict().

    Reward:
        Score gained during the step.

    Info:
        Contains score, delta_score, lives, lives_lost, ticks, etc.
    """

    metadata = {"render_modes": []}

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        store: Optional[KeyValueStore] = None,
        play_area_width: Optional[float] = None,
    ):
        """
        Initialize Apple Catcher environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already loaded configuration; takes precedence over config_path.
            store: High score storage. In-memory if None, so training runs
                never touch the player's saved high score.
            play_area_width: Simulated play-area width in pixels.
                Uses board.fallback_width if None.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._store = store if store is not None else MemoryStore()
        self._play_area_width = play_area_width
        self._frame_ms = self._config.loop.frame_ms

        self._clock: SimulatedClock
        self._session: SessionController
        self._last_snapshot: Optional[GameSnapshot] = None
        self._new_session(seed=None)

        self.action_space = spaces.Discrete(self._config.observation.max_objects + 1)
        self.observation_space = self._build_observation_space()

        logger.debug(
            "AppleCatcherEnv initialized: max_objects=%d, frame=%.2fms, lives=%d",
            self._config.observation.max_objects,
            self._frame_ms,
            self._config.session.initial_lives,
        )

    def _new_session(self, seed: Optional[int]) -> None:
        """Fresh clock, scheduler and session; the old ones are dropped with any pending frame."""
        self._clock = SimulatedClock()
        scheduler = FrameScheduler(clock=self._clock)
        self._session = SessionController(
            config=self._config,
            store=self._store,
            scheduler=scheduler,
            seed=seed,
            play_area_width=self._play_area_width,
        )

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_obj = self._config.observation.max_objects
        lives = self._config.session.initial_lives

        return spaces.Dict({
            # Core state
            "state": spaces.Box(low=0, high=2, shape=(), dtype=np.int32),
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "lives": spaces.Box(low=0, high=lives, shape=(), dtype=np.int32),
            "objects_count": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),

            # Derived features
            "lowest_apple_y": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "min_ticks_to_exit": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "danger_level": spaces.Box(low=0, high=1, shape=(), dtype=np.float32),

            # Object arrays
            "obj_x": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obj,), dtype=np.float32),
            "obj_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_obj,), dtype=np.float32),
            "obj_speed": spaces.Box(low=0, high=np.inf, shape=(max_obj,), dtype=np.float32),
            "obj_mask": spaces.MultiBinary(max_obj),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        # Later resets without a seed stay reproducible through np_random
        session_seed = int(self.np_random.integers(0, 2**31 - 1))
        self._new_session(session_seed)
        self._session.start()

        obs = self._observe()
        info = self._session.get_info()
        info["delta_score"] = 0
        info["lives_lost"] = 0
        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 0 for no click, k to click observation slot k - 1.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        if self._session.state is not SessionState.ACTIVE:
            # Episode already ended, return current state
            info = self._session.get_info()
            info["delta_score"] = 0
            info["lives_lost"] = 0
            return self._observe(), 0.0, True, False, info

        score_before = self._session.score
        lives_before = self._session.lives

        clicked = None
        if action > 0 and self._last_snapshot is not None:
            clicked = self._last_snapshot.slot_object_id(action - 1)
            if clicked is not None:
                self._session.dismiss(clicked)

        self._clock.advance(self._frame_ms)
        self._session.scheduler.run_frame()

        terminated = self._session.state is SessionState.ENDED
        truncated = False
        if not terminated:
            truncated = self._session.simulator.rules.termination.check_truncation(
                self._session.ticks
            ).truncated

        delta_score = self._session.score - score_before
        obs = self._observe()

        info = self._session.get_info()
        info["delta_score"] = delta_score
        info["lives_lost"] = lives_before - self._session.lives
        info["clicked"] = clicked

        if terminated:
            logger.debug("Episode terminated: %s", info["terminated_reason"])

        return obs, float(delta_score), terminated, truncated, info

    def _observe(self) -> Dict[str, np.ndarray]:
        self._last_snapshot = self._session.snapshot()
        return self._last_snapshot.to_obs_dict()

    def close(self) -> None:
        """Clean up resources."""
        self._last_snapshot = None

    @property
    def session(self) -> SessionController:
        """Access to underlying session (for debugging/tools)."""
        return self._session

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
