"""
Persisted Storage
=================

A tiny string key/value store (the browser-storage model: text keys, text
values) and the high score record kept in it.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from apple_catcher.catcher_core.config_loader import GameConfig, get_config

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Base class for string key/value stores."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Stored text for a key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under a key."""


class MemoryStore(KeyValueStore):
    """In-process store. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore(KeyValueStore):
    """Stores keys in a JSON object on disk. Persists across app restarts.

    Read and write failures are logged and otherwise ignored: the store then
    behaves as if empty, and values set keep living in memory.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._file_path = Path(path).expanduser()
        self._data = self._load()

    @property
    def path(self) -> Path:
        return self._file_path

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load storage from %s: %s", self._file_path, e)
            return {}

        if not isinstance(payload, dict):
            logger.warning("Ignoring storage at %s: expected a JSON object", self._file_path)
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save storage to %s: %s", self._file_path, e)


def parse_high_score(raw: Optional[str]) -> int:
    """
    Decode a stored high score.

    Args:
        raw: Stored text, or None if the key is absent.

    Returns:
        The score, or 0 when the value is absent, not an integer, or negative.
    """
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        logger.debug("Ignoring malformed high score %r", raw)
        return 0
    return value if value >= 0 else 0


class HighScoreRecord:
    """
    The best score seen so far, backed by a KeyValueStore.

    Read once on construction; written only when a better score is recorded.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[GameConfig] = None
    ):
        """
        Initialize high score record.

        Args:
            store: Backing store.
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._store = store
        self._key = config.storage.high_score_key
        self._value = parse_high_score(store.get(self._key))

    @property
    def value(self) -> int:
        """Current high score."""
        return self._value

    @property
    def key(self) -> str:
        return self._key

    def record(self, score: int) -> bool:
        """
        Offer a final session score.

        Args:
            score: Score at session end.

        Returns:
            True if it beat the stored value and was persisted.
        """
        if score <= self._value:
            return False
        self._value = score
        self._store.set(self._key, str(score))
        return True


def open_default_store(config: Optional[GameConfig] = None) -> JsonFileStore:
    """Open the on-disk store at the configured path."""
    if config is None:
        config = get_config()
    return JsonFileStore(config.storage.resolved_path)
