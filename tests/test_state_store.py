"""
Tests for state_store.

Verifies:
  - Missing state reads as level 0 with no timestamp
  - write/read round-trips the level and timestamp
  - Timestamps strictly increase across writes
  - The file uses the currentLevel/updatedAt keys; legacy "level" is read
  - Corrupt or out-of-range files raise StorageError
  - Unwritable locations raise StorageError and leave no temp files
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from evolution_framework.engine.state_store import LevelStateStore
from evolution_framework.errors import InvalidLevelError, StorageError

_FROZEN = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestRead:

    def test_missing_file_is_level_zero(self, tmp_path: Path):
        store = LevelStateStore(state_path=tmp_path / ".evolution")
        state = store.read()
        assert state.current_level == 0
        assert state.updated_at is None

    def test_legacy_level_key(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        path.write_text(json.dumps({"level": 2, "updatedAt": "2025-03-04T05:06:07.000Z"}))

        state = LevelStateStore(state_path=path).read()
        assert state.current_level == 2
        assert state.updated_at == datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)

    def test_corrupt_file_raises(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        path.write_text("{not json")
        with pytest.raises(StorageError):
            LevelStateStore(state_path=path).read()

    def test_undecodable_bytes_raise(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(StorageError):
            LevelStateStore(state_path=path).read()

    def test_out_of_range_level_raises(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        path.write_text(json.dumps({"currentLevel": 9, "updatedAt": None}))
        with pytest.raises(StorageError):
            LevelStateStore(state_path=path).read()


class TestWrite:

    def test_round_trip(self, tmp_path: Path):
        store = LevelStateStore(state_path=tmp_path / ".evolution")
        before = datetime.now(timezone.utc)

        store.write(3)
        state = store.read()

        assert state.current_level == 3
        assert state.updated_at is not None
        assert state.updated_at >= before

    def test_timestamp_strictly_later_than_previous(self, tmp_path: Path):
        store = LevelStateStore(state_path=tmp_path / ".evolution", clock=lambda: _FROZEN)
        store.write(1)
        before = store.read().updated_at

        store.write(3)
        after = store.read().updated_at

        assert after > before

    def test_timestamp_later_across_instances(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        LevelStateStore(state_path=path, clock=lambda: _FROZEN).write(1)

        second = LevelStateStore(state_path=path, clock=lambda: _FROZEN)
        before = second.read().updated_at
        second.write(2)

        assert second.read().updated_at > before

    def test_file_format(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        LevelStateStore(state_path=path, clock=lambda: _FROZEN).write(4)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"currentLevel": 4, "updatedAt": "2026-01-01T12:00:00Z"}

    def test_write_replaces_state(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        store = LevelStateStore(state_path=path)
        store.write(5)
        store.write(0)

        assert LevelStateStore(state_path=path).read().current_level == 0
        assert set(json.loads(path.read_text()).keys()) == {"currentLevel", "updatedAt"}

    def test_no_temp_files_left(self, tmp_path: Path):
        store = LevelStateStore(state_path=tmp_path / ".evolution")
        store.write(2)
        store.write(3)
        assert [p.name for p in tmp_path.iterdir()] == [".evolution"]

    def test_invalid_level_not_written(self, tmp_path: Path):
        path = tmp_path / ".evolution"
        with pytest.raises(InvalidLevelError):
            LevelStateStore(state_path=path).write(6)
        assert not path.exists()

    def test_unwritable_location_raises(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = LevelStateStore(state_path=blocker / ".evolution")

        with pytest.raises(StorageError):
            store.write(1)

    def test_for_project_uses_state_filename(self, tmp_path: Path):
        store = LevelStateStore.for_project(tmp_path)
        store.write(1)
        assert (tmp_path / ".evolution").exists()
        assert store.path == tmp_path / ".evolution"
