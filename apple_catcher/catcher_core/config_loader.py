"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class BoardConfig:
    """Play area geometry, in percent of the area's width/height."""
    spawn_y: float          # Y where new apples appear (negative = above view)
    exit_threshold: float   # Y past which an apple counts as missed
    fallback_width: float   # Pixels, used when the host width is unusable


@dataclass(frozen=True)
class AppleConfig:
    """Apple geometry."""
    size: int  # Square side in pixels


@dataclass(frozen=True)
class SpawnConfig:
    """Admission timing and velocity parameters."""
    interval_ms: float
    base_speed: float
    speed_jitter: float
    score_speed_divisor: float


@dataclass(frozen=True)
class SessionConfig:
    """Per-session starting values."""
    initial_lives: int


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    dismiss_reward: int


@dataclass(frozen=True)
class StorageConfig:
    """Persisted high score location."""
    high_score_key: str
    path: str

    @property
    def resolved_path(self) -> Path:
        """Storage path with ~ expanded."""
        return Path(os.path.expanduser(self.path))


@dataclass(frozen=True)
class LoopConfig:
    """Host loop parameters."""
    target_fps: int

    @property
    def frame_ms(self) -> float:
        """Duration of one display frame in milliseconds."""
        return 1000.0 / self.target_fps


@dataclass(frozen=True)
class CapsConfig:
    """Limits for headless episodes."""
    max_ticks: int


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    max_objects: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    board: BoardConfig
    apple: AppleConfig
    spawn: SpawnConfig
    session: SessionConfig
    scoring: ScoringConfig
    storage: StorageConfig
    loop: LoopConfig
    caps: CapsConfig
    observation: ObservationConfig


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.session.initial_lives < 1:
        raise ValueError(
            f"session.initial_lives must be at least 1, got {config.session.initial_lives}"
        )

    if config.spawn.base_speed <= 0:
        # Apples must always move down, otherwise they could sit forever
        raise ValueError(f"spawn.base_speed must be positive, got {config.spawn.base_speed}")

    if config.spawn.speed_jitter < 0:
        raise ValueError(f"spawn.speed_jitter must not be negative, got {config.spawn.speed_jitter}")

    if config.spawn.score_speed_divisor <= 0:
        raise ValueError(
            f"spawn.score_speed_divisor must be positive, got {config.spawn.score_speed_divisor}"
        )

    if config.spawn.interval_ms < 0:
        raise ValueError(f"spawn.interval_ms must not be negative, got {config.spawn.interval_ms}")

    if config.board.spawn_y >= config.board.exit_threshold:
        raise ValueError(
            f"board.spawn_y ({config.board.spawn_y}) must be above "
            f"board.exit_threshold ({config.board.exit_threshold})"
        )

    if config.board.fallback_width <= 0:
        raise ValueError(f"board.fallback_width must be positive, got {config.board.fallback_width}")

    if config.apple.size <= 0:
        raise ValueError(f"apple.size must be positive, got {config.apple.size}")

    if config.scoring.dismiss_reward < 0:
        raise ValueError(f"scoring.dismiss_reward must not be negative, got {config.scoring.dismiss_reward}")

    if config.loop.target_fps <= 0:
        raise ValueError(f"loop.target_fps must be positive, got {config.loop.target_fps}")

    if not config.storage.high_score_key:
        raise ValueError("storage.high_score_key must not be empty")

    if config.observation.max_objects < 1:
        raise ValueError(f"observation.max_objects must be at least 1, got {config.observation.max_objects}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        spawn_y=float(board_data.get("spawn_y", -10.0)),
        exit_threshold=float(board_data.get("exit_threshold", 100.0)),
        fallback_width=float(board_data.get("fallback_width", 800))
    )

    apple = AppleConfig(size=int(raw["apple"]["size"]))

    spawn_data = raw["spawn"]
    spawn = SpawnConfig(
        interval_ms=float(spawn_data["interval_ms"]),
        base_speed=float(spawn_data["base_speed"]),
        speed_jitter=float(spawn_data.get("speed_jitter", 0.0)),
        score_speed_divisor=float(spawn_data.get("score_speed_divisor", 1000))
    )

    session = SessionConfig(initial_lives=int(raw["session"]["initial_lives"]))

    scoring = ScoringConfig(dismiss_reward=int(raw["scoring"]["dismiss_reward"]))

    # Storage and the sections below are optional
    storage_data = raw.get("storage", {})
    storage = StorageConfig(
        high_score_key=str(storage_data.get("high_score_key", "appleCatcherHighScore")),
        path=str(storage_data.get("path", "~/.apple_catcher/storage.json"))
    )

    loop = LoopConfig(target_fps=int(raw.get("loop", {}).get("target_fps", 60)))

    caps = CapsConfig(max_ticks=int(raw.get("caps", {}).get("max_ticks", 36000)))

    observation = ObservationConfig(
        max_objects=int(raw.get("observation", {}).get("max_objects", 32))
    )

    config = GameConfig(
        board=board,
        apple=apple,
        spawn=spawn,
        session=session,
        scoring=scoring,
        storage=storage,
        loop=loop,
        caps=caps,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
