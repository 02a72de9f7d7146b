"""
Tests for high score storage.
"""

import json
import logging

import pytest

from apple_catcher.catcher_core.config_loader import load_config
from apple_catcher.catcher_core.storage import (
    HighScoreRecord,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    parse_high_score,
)

KEY = "appleCatcherHighScore"
STORAGE_LOGGER = "apple_catcher.catcher_core.storage"


@pytest.fixture
def config():
    return load_config()


class TestParseHighScore:
    """Test decoding of stored values."""

    @pytest.mark.parametrize("raw, expected", [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("12.5", 0),
        ("-5", 0),
        ("0", 0),
        ("150", 150),
        (" 42\n", 42),
    ])
    def test_parse(self, raw, expected):
        """Absent, malformed and negative values decode to zero."""
        assert parse_high_score(raw) == expected


class TestHighScoreRecord:
    """Test the high score record."""

    def test_uses_configured_key(self, config):
        """The record reads the appleCatcherHighScore key."""
        record = HighScoreRecord(MemoryStore({KEY: "100"}), config)

        assert record.key == KEY
        assert record.value == 100

    def test_defaults_to_zero(self, config):
        """Missing or malformed values read as zero."""
        assert HighScoreRecord(MemoryStore(), config).value == 0
        assert HighScoreRecord(MemoryStore({KEY: "lots"}), config).value == 0

    def test_better_score_persisted(self, config):
        """Stored 100, session ends with 150: store becomes 150."""
        store = MemoryStore({KEY: "100"})
        record = HighScoreRecord(store, config)

        assert record.record(150)
        assert record.value == 150
        assert store.get(KEY) == "150"

    def test_worse_score_ignored(self, config):
        """Stored 100, session ends with 80: store stays 100."""
        store = MemoryStore({KEY: "100"})
        record = HighScoreRecord(store, config)

        assert not record.record(80)
        assert not record.record(100)
        assert record.value == 100
        assert store.get(KEY) == "100"


class TestJsonFileStore:
    """Test the on-disk store."""

    def test_persists_across_instances(self, tmp_path):
        """Values set in one instance are read by the next."""
        path = tmp_path / "nested" / "storage.json"
        JsonFileStore(path).set(KEY, "320")

        assert JsonFileStore(path).get(KEY) == "320"
        assert json.loads(path.read_text(encoding="utf-8")) == {KEY: "320"}

    def test_missing_file_is_empty(self, tmp_path):
        """A store without a file has no keys."""
        assert JsonFileStore(tmp_path / "none.json").get(KEY) is None

    def test_corrupt_file_is_empty(self, tmp_path, caplog):
        """Unparseable content is logged and ignored rather than raised."""
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger=STORAGE_LOGGER):
            store = JsonFileStore(path)

        assert store.get(KEY) is None
        assert any(
            r.levelno == logging.WARNING and "Could not load storage" in r.getMessage()
            for r in caplog.records
        )

    def test_non_object_file_is_empty(self, tmp_path):
        """A JSON document that is not an object is ignored."""
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonFileStore(path).get(KEY) is None

    def test_values_read_as_text(self, tmp_path):
        """Non-string JSON values come back as their text form."""
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({KEY: 75}), encoding="utf-8")

        store = JsonFileStore(path)

        assert store.get(KEY) == "75"
        assert parse_high_score(store.get(KEY)) == 75

    def test_unwritable_path_keeps_value_in_memory(self, tmp_path, caplog):
        """A failed write is logged and the value still reads back."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileStore(blocker / "storage.json")

        with caplog.at_level(logging.WARNING, logger=STORAGE_LOGGER):
            store.set(KEY, "10")

        assert store.get(KEY) == "10"
        assert any(
            r.levelno == logging.WARNING and "Could not save storage" in r.getMessage()
            for r in caplog.records
        )


class TestKeyValueStore:
    """Test the store base class."""

    def test_partial_store_cannot_be_created(self):
        """A store missing set() fails at construction."""
        class ReadOnlyStore(KeyValueStore):
            def get(self, key):
                return None

        with pytest.raises(TypeError):
            ReadOnlyStore()
