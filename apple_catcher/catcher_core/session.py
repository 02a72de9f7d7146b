"""
Session Controller
==================

Owns the not_started -> active -> ended state machine, drives the tick
simulator once per frame while active, and records the high score when a
session ends.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from apple_catcher.catcher_core.config_loader import GameConfig, get_config
from apple_catcher.catcher_core.rng import SpawnRandom
from apple_catcher.catcher_core.scheduler import FrameScheduler
from apple_catcher.catcher_core.scoring import DismissHandler, ScoreEvent
from apple_catcher.catcher_core.simulator import TickResult, TickSimulator
from apple_catcher.catcher_core.state_snapshot import GameSnapshot, SnapshotBuilder
from apple_catcher.catcher_core.storage import HighScoreRecord, KeyValueStore, open_default_store
from apple_catcher.catcher_core.world import FallingObject, World

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    ENDED = "ended"


class SessionController:
    """
    Main game session class.

    Orchestrates:
    - Tick simulation (one tick per scheduled frame)
    - Dismissals from player input
    - Termination when lives run out
    - High score persistence

    At most one frame request is outstanding at any time, and it is
    cancelled as soon as the session leaves the active state.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        store: Optional[KeyValueStore] = None,
        scheduler: Optional[FrameScheduler] = None,
        seed: Optional[int] = None,
        play_area_width: Optional[float] = None
    ):
        """
        Initialize session controller.

        Args:
            config: Game configuration. Uses default if None.
            store: High score storage. Opens the on-disk store if None.
            scheduler: Frame scheduler the host loop drives. New one if None.
            seed: Random seed for reproducibility.
            play_area_width: Play-area width in pixels, if already known.
        """
        if config is None:
            config = get_config()
        if store is None:
            store = open_default_store(config)

        self._config = config
        self._scheduler = scheduler if scheduler is not None else FrameScheduler()
        self._rng = SpawnRandom(seed)

        # Initialize subsystems
        self._simulator = TickSimulator(config, rng=self._rng)
        self._dismisser = DismissHandler(config)
        self._high_score = HighScoreRecord(store, config)
        self._snapshot_builder = SnapshotBuilder(config)

        # Session state
        self._state = SessionState.NOT_STARTED
        self._world = World(lives=config.session.initial_lives)
        self._frame_handle: Optional[int] = None
        self._ticks: int = 0
        self._termination_reason: str = ""
        self._last_tick: Optional[TickResult] = None

        self.play_area_width = play_area_width

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def simulator(self) -> TickSimulator:
        return self._simulator

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def world(self) -> World:
        """Current World (immutable; replaced on every change)."""
        return self._world

    @property
    def apples(self) -> Tuple[FallingObject, ...]:
        return self._world.objects

    @property
    def score(self) -> int:
        """Current score."""
        return self._world.score

    @property
    def lives(self) -> int:
        return self._world.lives

    @property
    def high_score(self) -> int:
        return self._high_score.value

    @property
    def ticks(self) -> int:
        """Ticks simulated in the current (or last) session."""
        return self._ticks

    @property
    def termination_reason(self) -> str:
        """Reason for session end, or empty string."""
        return self._termination_reason

    @property
    def last_tick(self) -> Optional[TickResult]:
        """Result of the most recent tick."""
        return self._last_tick

    @property
    def has_pending_frame(self) -> bool:
        return self._frame_handle is not None

    def start(self, seed: Optional[int] = None) -> bool:
        """
        Start a new session (or restart after game over).

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            True if a session was started, False if one is already active.
        """
        if self._state is SessionState.ACTIVE:
            logger.debug("start() ignored: session already active")
            return False

        self._rng.reset(seed)
        # Identities carry over so a stale click can never hit a new apple
        self._world = World.initial(
            lives=self._config.session.initial_lives,
            now=self._scheduler.now(),
            next_id=self._world.next_id
        )
        self._ticks = 0
        self._termination_reason = ""
        self._last_tick = None
        self._state = SessionState.ACTIVE
        self._request_frame()

        logger.info("Session started (lives=%d, high score=%d)", self._world.lives, self.high_score)
        return True

    def dismiss(self, object_id: int) -> Optional[ScoreEvent]:
        """
        Handle a click on an apple.

        Args:
            object_id: Identity of the clicked apple.

        Returns:
            ScoreEvent, or None if no session is active.
        """
        if self._state is not SessionState.ACTIVE:
            return None

        self._world, event = self._dismisser.apply(self._world, object_id)
        logger.debug("%r, score now %d", event, self._world.score)
        return event

    def restore_world(self, world: World) -> None:
        """
        Replace the live World (checkpoint restore).

        Raises:
            RuntimeError: If no session is active.
        """
        if self._state is not SessionState.ACTIVE:
            raise RuntimeError(f"Cannot restore a World while session is {self._state.value}")
        self._world = world

    def _request_frame(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
        self._frame_handle = self._scheduler.request_frame(self._on_frame)

    def _on_frame(self, now: float) -> None:
        """Frame callback: one tick."""
        self._frame_handle = None
        if self._state is not SessionState.ACTIVE:
            return

        try:
            result = self._simulator.step(self._world, now, self.play_area_width)
        except Exception:
            # World is unchanged; keep the loop alive so the next frame retries
            logger.exception("Tick failed at %.1fms", now)
            self._request_frame()
            raise
        self._world = result.world
        self._last_tick = result
        self._ticks += 1

        term = self._simulator.rules.termination.check_termination(self._world.lives)
        if term.terminated:
            self._end(term.reason)
            return

        self._request_frame()

    def _end(self, reason: str) -> None:
        """Leave the active state and record the high score."""
        self._state = SessionState.ENDED
        self._termination_reason = reason
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

        improved = self._high_score.record(self._world.score)
        logger.info(
            "Session ended (%s): score=%d, ticks=%d%s",
            reason, self._world.score, self._ticks,
            ", new high score" if improved else ""
        )

    def snapshot(self) -> GameSnapshot:
        """Build current state snapshot."""
        return self._snapshot_builder.build(
            world=self._world,
            state=self._state.value,
            high_score=self.high_score,
            ticks=self._ticks,
            now=self._scheduler.now()
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "state": self._state.value,
            "score": self._world.score,
            "lives": self._world.lives,
            "high_score": self.high_score,
            "ticks": self._ticks,
            "apples": len(self._world.objects),
            "terminated_reason": self._termination_reason,
        }

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dict with apple positions and the HUD values.
        """
        return {
            "state": self._state.value,
            "apple_size": self._config.apple.size,
            "exit_threshold": self._config.board.exit_threshold,
            "apples": [
                {"id": a.id, "x": a.x, "y": a.y, "speed": a.speed}
                for a in self._world.objects
            ],
            "score": self._world.score,
            "lives": self._world.lives,
            "high_score": self.high_score,
        }
