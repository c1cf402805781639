"""Unit tests for StateStore."""

import json

import pytest

from core.state_store import StateLockedError, StateStore


@pytest.fixture
def store(tmp_path):
    return StateStore(state_file=tmp_path / "state.json")


class TestStateStoreLock:
    """Tests for file locking."""

    def test_acquire_lock_success(self, store):
        assert store._acquire_lock()
        assert store.lock_file.exists()
        store._release_lock()
        assert not store.lock_file.exists()

    def test_lock_timeout(self, store):
        """Test lock timeout when file is locked."""
        store.lock_file.touch()
        assert not store._acquire_lock(timeout=0.2)
        store.lock_file.unlink()

    def test_locked_store_raises(self, store, monkeypatch):
        monkeypatch.setattr(store, "_acquire_lock", lambda timeout=5.0: False)
        with pytest.raises(StateLockedError):
            store.get("profiles")


class TestStateStoreValues:
    def test_missing_file_gives_defaults(self, store):
        assert store.get("profiles") is None
        assert store.get("profiles", {}) == {}
        assert store.keys() == []

    def test_set_get_delete(self, store):
        store.set("preferences", {"active_agent_id": "codex"})
        assert store.get("preferences") == {"active_agent_id": "codex"}
        assert store.keys() == ["preferences"]

        store.delete("preferences")
        assert store.get("preferences") is None

    def test_document_shape(self, store):
        store.set("a", 1)
        data = json.loads(store.state_file.read_text())
        assert data == {"version": 1, "values": {"a": 1}}

    def test_save_creates_backup(self, store):
        store.set("a", 1)
        store.set("a", 2)
        assert json.loads(store.backup_file.read_text())["values"] == {"a": 1}


class TestStateStoreRecovery:
    """Corrupt state falls back to the backup, then to empty."""

    def test_corrupted_file_restores_backup(self, store):
        store.set("a", 1)
        store.set("a", 2)
        store.state_file.write_text("{ not json")

        assert store.get("a") == 1
        assert json.loads(store.state_file.read_text())["values"] == {"a": 1}

    def test_corrupted_without_backup_resets(self, store):
        store.state_file.write_text("[]")
        assert store.load() == {}
        assert json.loads(store.state_file.read_text()) == {"version": 1, "values": {}}

    def test_backup_also_corrupted(self, store):
        store.state_file.write_text("{")
        store.backup_file.write_text("{")
        assert store.load() == {}
