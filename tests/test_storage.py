"""Tests for local storage and the board cache."""

from datetime import UTC, datetime
from pathlib import Path

from taskflow.models import DEFAULT_LABELS, BoardState, Label, Task
from taskflow.storage import GUEST_KEY, STORAGE_KEY, BoardCache, LocalStorage

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class TestLocalStorage:
    """Tests for LocalStorage."""

    def test_missing_key_reads_none(self, tmp_path: Path):
        assert LocalStorage(tmp_path / "store").get_item("nothing") is None

    def test_set_then_get(self, tmp_path: Path):
        storage = LocalStorage(tmp_path / "store")
        storage.set_item("k", "value")
        assert storage.get_item("k") == "value"

    def test_set_replaces(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.set_item("k", "one")
        storage.set_item("k", "two")
        assert storage.get_item("k") == "two"
        # No temp files left behind
        assert [p.name for p in tmp_path.iterdir()] == ["k"]

    def test_remove(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.set_item("k", "v")
        storage.remove_item("k")
        storage.remove_item("k")  # already gone, no error
        assert storage.get_item("k") is None

    def test_unsafe_key_characters_replaced(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        assert storage.path_for("../evil/key").parent == tmp_path


class TestBoardCache:
    """Tests for BoardCache."""

    def test_absent_snapshot(self, cache: BoardCache):
        assert cache.load() is None

    def test_save_and_load(self, cache: BoardCache):
        task = Task(id="t1", title="Ship", created_at=NOW, updated_at=NOW)
        state = BoardState(tasks=(task,))
        cache.save(state)
        assert cache.load() == state

    def test_stored_under_fixed_key(self, cache: BoardCache):
        cache.save(BoardState())
        assert cache.storage.get_item(STORAGE_KEY) is not None

    def test_malformed_json_reads_as_absent(self, cache: BoardCache):
        cache.storage.set_item(STORAGE_KEY, "{not json")
        assert cache.load() is None

    def test_invalid_task_reads_as_absent(self, cache: BoardCache):
        cache.storage.set_item(STORAGE_KEY, '{"tasks": [{"id": "x"}], "labels": []}')
        assert cache.load() is None

    def test_empty_labels_fall_back_to_defaults(self, cache: BoardCache):
        cache.storage.set_item(STORAGE_KEY, '{"tasks": [], "labels": []}')
        assert cache.load().labels == DEFAULT_LABELS

    def test_missing_keys_default(self, cache: BoardCache):
        cache.storage.set_item(STORAGE_KEY, "{}")
        state = cache.load()
        assert state.tasks == ()
        assert state.labels == DEFAULT_LABELS

    def test_custom_labels_kept(self, cache: BoardCache):
        state = BoardState(labels=(Label(id="x", name="Mine", color="teal"),))
        cache.save(state)
        assert cache.load().labels == state.labels

    def test_write_failure_is_not_raised(self, tmp_path: Path):
        """A storage directory that can't be created only logs."""
        blocker = tmp_path / "file"
        blocker.write_text("")
        cache = BoardCache(LocalStorage(blocker / "data"))
        cache.save(BoardState())
        assert cache.load() is None

    def test_undecodable_snapshot_reads_as_absent(self, cache: BoardCache):
        cache.storage.ensure_directory()
        cache.storage.path_for(STORAGE_KEY).write_bytes(b"\xff\xfe{garbage")
        assert cache.load() is None

    def test_undecodable_guest_flag_reads_as_off(self, cache: BoardCache):
        cache.storage.ensure_directory()
        cache.storage.path_for(GUEST_KEY).write_bytes(b"\xff")
        assert cache.is_guest() is False

    def test_guest_flag(self, cache: BoardCache):
        assert cache.is_guest() is False
        cache.set_guest(True)
        assert cache.is_guest() is True
        assert cache.storage.get_item(GUEST_KEY) == "1"
        cache.set_guest(False)
        assert cache.is_guest() is False
