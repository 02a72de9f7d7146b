"""
Catcher Core - The game itself, minus presentation.

This module provides the tick simulation, the session state machine, high
score storage, frame scheduling and a Gymnasium environment wrapper.

Main exports:
- SessionController: start/dismiss input surface, drives ticks while active
- TickSimulator: one-frame World update
- DismissHandler: click handling and scoring
- FrameScheduler: display-refresh callback model
- AppleCatcherEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from apple_catcher.catcher_core.config_loader import GameConfig, load_config
from apple_catcher.catcher_core.world import FallingObject, World
from apple_catcher.catcher_core.simulator import TickResult, TickSimulator
from apple_catcher.catcher_core.scoring import DismissHandler, ScoreEvent
from apple_catcher.catcher_core.scheduler import FrameScheduler, SimulatedClock
from apple_catcher.catcher_core.storage import (
    HighScoreRecord,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)
from apple_catcher.catcher_core.session import SessionController, SessionState
from apple_catcher.catcher_core.env_gym import AppleCatcherEnv

__all__ = [
    "GameConfig",
    "load_config",
    "FallingObject",
    "World",
    "TickResult",
    "TickSimulator",
    "DismissHandler",
    "ScoreEvent",
    "FrameScheduler",
    "SimulatedClock",
    "HighScoreRecord",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SessionController",
    "SessionState",
    "AppleCatcherEnv",
]
