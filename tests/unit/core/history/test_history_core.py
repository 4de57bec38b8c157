"""Tests for rgdesk.core.history.history_core module."""

from __future__ import annotations

import json

import pytest

from rgdesk.core.history.history_core import (
    AUTO_CLEAN_INTERVAL,
    HISTORY_FILE_NAME,
    MAX_HISTORY_COUNT,
    HistoryLedger,
    is_duplicate,
)
from rgdesk.core.types import HistoryCandidate, SearchOptions

APP_DIR = "/home/user/.config/rgdesk"
DEFAULT_FILE = f"{APP_DIR}/{HISTORY_FILE_NAME}"
HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def _entry_dict(entry_id: int, timestamp: int, pattern: str = "p", path: str = "/src") -> dict:
    return {
        "id": str(entry_id),
        "pattern": pattern,
        "path": path,
        "options": SearchOptions().to_dict(),
        "timestamp": timestamp,
    }


def _stored(fs, path: str = DEFAULT_FILE) -> list[dict]:
    return json.loads(fs.files[path])


class TestIsDuplicate:
    """Tests for the dedup check."""

    def test_matches_on_pattern_path_and_options(self, ledger):
        ledger.append(HistoryCandidate("TODO", "/src", SearchOptions(regex=True)))
        assert is_duplicate(ledger.entries, HistoryCandidate("TODO", "/src", SearchOptions(regex=True)))

    def test_differs_by_options(self, ledger):
        ledger.append(HistoryCandidate("TODO", "/src", SearchOptions(regex=True)))
        assert not is_duplicate(ledger.entries, HistoryCandidate("TODO", "/src", SearchOptions()))

    def test_empty(self):
        assert not is_duplicate([], HistoryCandidate("TODO", "/src"))


class TestAppend:
    """Tests for HistoryLedger.append."""

    def test_newest_first(self, ledger, clock):
        for pattern in ("a", "b", "c"):
            ledger.append(HistoryCandidate(pattern, "/src"))
            clock.advance(1)
        assert [e.pattern for e in ledger.entries] == ["c", "b", "a"]

    def test_bounded(self, ledger, clock):
        for i in range(MAX_HISTORY_COUNT + 25):
            ledger.append(HistoryCandidate(f"p{i}", "/src"))
            clock.advance(1)
            assert len(ledger) <= MAX_HISTORY_COUNT
        assert len(ledger) == MAX_HISTORY_COUNT
        assert ledger.entries[0].pattern == f"p{MAX_HISTORY_COUNT + 24}"
        assert ledger.entries[-1].pattern == "p25"

    def test_ids_unique_within_same_millisecond(self, ledger):
        ledger.append(HistoryCandidate("a", "/src"))
        ledger.append(HistoryCandidate("b", "/src"))
        ids = [e.id for e in ledger.entries]
        assert len(set(ids)) == 2

    def test_timestamp_from_clock(self, ledger, clock):
        ledger.append(HistoryCandidate("a", "/src"))
        assert ledger.entries[0].timestamp == int(clock.now * 1000)

    def test_dedup_then_append_keeps_earlier_entry(self, ledger, clock):
        candidate = HistoryCandidate("TODO", "/src", SearchOptions(case_insensitive=True))
        ledger.append(candidate)
        first = ledger.entries[0]
        clock.advance(60)

        repeat = HistoryCandidate("TODO", "/src", SearchOptions(case_insensitive=True))
        if not is_duplicate(ledger.entries, repeat):
            ledger.append(repeat)

        assert len(ledger) == 1
        assert ledger.entries[0].id == first.id
        assert ledger.entries[0].timestamp == first.timestamp

    def test_persists(self, ledger, memory_fs):
        future = ledger.append(HistoryCandidate("TODO", "/src"))
        assert future.result(timeout=5) is True
        stored = _stored(memory_fs)
        assert stored[0]["pattern"] == "TODO"
        assert stored[0]["options"]["caseInsensitive"] is False

    def test_write_failure_resolves_false(self, ledger, memory_fs):
        memory_fs.fail("write", DEFAULT_FILE, PermissionError("read-only"))
        future = ledger.append(HistoryCandidate("TODO", "/src"))
        assert future.result(timeout=5) is False
        assert len(ledger) == 1

    def test_flush_reports_failure(self, ledger, memory_fs):
        memory_fs.fail("write", DEFAULT_FILE, PermissionError("read-only"))
        ledger.append(HistoryCandidate("a", "/src"))
        assert ledger.flush() is False
        assert ledger.flush() is True

    def test_writes_applied_in_order(self, ledger, memory_fs, clock):
        for pattern in ("a", "b", "c"):
            ledger.append(HistoryCandidate(pattern, "/src"))
            clock.advance(1)
        ledger.flush()
        assert [e["pattern"] for e in _stored(memory_fs)] == ["c", "b", "a"]


class TestClear:
    def test_clear(self, ledger, memory_fs):
        ledger.append(HistoryCandidate("a", "/src"))
        assert ledger.clear().result(timeout=5) is True
        assert len(ledger) == 0
        assert _stored(memory_fs) == []


class TestLoad:
    """Tests for HistoryLedger.load."""

    def test_missing_file_is_empty(self, ledger):
        assert ledger.load() == []

    def test_loads_entries(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = json.dumps([_entry_dict(2, 2000, "b"), _entry_dict(1, 1000, "a")])
        entries = ledger.load()
        assert [e.pattern for e in entries] == ["b", "a"]

    def test_corrupt_file_is_empty(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = "{not json"
        assert ledger.load() == []

    def test_wrong_document_shape_is_empty(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = json.dumps({"entries": []})
        assert ledger.load() == []

    def test_skips_malformed_entries(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = json.dumps(
            [_entry_dict(1, 1000, "good"), {"pattern": "no id"}, "nonsense"]
        )
        assert [e.pattern for e in ledger.load()] == ["good"]

    def test_skips_entry_with_overflowing_timestamp(self, ledger, memory_fs):
        document = json.dumps([_entry_dict(1, 1000, "keep"), _entry_dict(2, 7777, "bad")])
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = document.replace('"timestamp": 7777', '"timestamp": 1e400')

        assert [e.pattern for e in ledger.load()] == ["keep"]

        ledger.append(HistoryCandidate("new", "/src"))
        assert ledger.flush()
        assert [e["pattern"] for e in _stored(memory_fs)] == ["new", "keep"]

    def test_unreadable_file_is_empty(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = "[]"
        memory_fs.fail("read", DEFAULT_FILE, PermissionError("denied"))
        assert ledger.load() == []

    def test_truncates_to_bound(self, ledger, memory_fs):
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = json.dumps(
            [_entry_dict(i, 1000 + i) for i in range(MAX_HISTORY_COUNT + 10)]
        )
        assert len(ledger.load()) == MAX_HISTORY_COUNT

    def test_new_ids_after_load_do_not_collide(self, ledger, memory_fs, clock):
        future_ms = int(clock.now * 1000) + 5000
        memory_fs.make_dirs(APP_DIR)
        memory_fs.files[DEFAULT_FILE] = json.dumps([_entry_dict(future_ms, future_ms)])
        ledger.load()
        ledger.append(HistoryCandidate("new", "/src"))
        assert int(ledger.entries[0].id) > future_ms

    def test_default_dir_unusable_falls_back_to_working_directory(self, memory_fs, clock):
        memory_fs.fail("mkdir", APP_DIR, PermissionError("denied"))
        with HistoryLedger(memory_fs, default_dir=lambda: APP_DIR, clock=clock) as ledger:
            assert ledger.file_path() == HISTORY_FILE_NAME
            assert ledger.load() == []


class TestSetStoragePath:
    """Tests for HistoryLedger.set_storage_path."""

    def test_adopts_writable_directory(self, ledger, memory_fs):
        ledger.append(HistoryCandidate("a", "/src"))
        result = ledger.set_storage_path("  /data/history  ")
        assert result.success
        assert result.message
        assert ledger.storage_path == "/data/history"
        ledger.flush()
        assert _stored(memory_fs, "/data/history/search_history.json")[0]["pattern"] == "a"

    def test_probe_file_removed(self, ledger, memory_fs):
        ledger.set_storage_path("/data/history")
        ledger.flush()
        probes = [p for p in memory_fs.files if ".rgdesk-write-probe-" in p]
        assert probes == []
        assert any(".rgdesk-write-probe-" in p for p in memory_fs.removed)

    def test_unwritable_target_leaves_state_unchanged(self, ledger, memory_fs):
        ledger.append(HistoryCandidate("a", "/src"))
        ledger.flush()
        before = ledger.entries
        memory_fs.fail("write", "/locked", PermissionError("read-only file system"))

        result = ledger.set_storage_path("/locked")

        assert not result.success
        assert result.message.startswith("Failed to set history path:")
        assert ledger.storage_path is None
        assert ledger.entries == before

    def test_uncreatable_target_fails(self, ledger, memory_fs):
        memory_fs.fail("mkdir", "/nope", PermissionError("denied"))
        result = ledger.set_storage_path("/nope/history")
        assert not result.success
        assert result.message

    def test_probe_remove_failure_is_not_fatal(self, ledger, memory_fs):
        memory_fs.fail("remove", "/data", PermissionError("sticky"))
        assert ledger.set_storage_path("/data").success

    def test_adopt_without_persisting(self, ledger, memory_fs):
        memory_fs.make_dirs("/data")
        memory_fs.files["/data/search_history.json"] = "[]"
        ledger.append(HistoryCandidate("a", "/src"))
        ledger.flush()

        assert ledger.set_storage_path("/data", persist=False).success
        ledger.flush()
        assert memory_fs.files["/data/search_history.json"] == "[]"

    @pytest.mark.parametrize("path", [None, "", "   "])
    def test_blank_reverts_to_default(self, ledger, path):
        ledger.set_storage_path("/data/history")
        result = ledger.set_storage_path(path)
        assert result.success
        assert ledger.storage_path is None
        assert ledger.file_path() == DEFAULT_FILE


class TestCleanup:
    """Tests for age-based cleanup."""

    def _seed(self, fs, entries: list[dict]) -> None:
        fs.make_dirs(APP_DIR)
        fs.files[DEFAULT_FILE] = json.dumps(entries)

    def test_removes_exactly_expired_entries(self, ledger, memory_fs, clock):
        now = int(clock.now * 1000)
        recent = [_entry_dict(100 + i, now - i * HOUR_MS, f"recent{i}") for i in range(10)]
        expired = [_entry_dict(i, (now - 30 * DAY_MS) - i * HOUR_MS, f"old{i}") for i in range(5)]
        self._seed(memory_fs, recent + expired)
        ledger.load()

        removed = ledger.cleanup()

        assert removed == 5
        assert len(ledger) == 10
        assert all(e.pattern.startswith("recent") for e in ledger.entries)
        ledger.flush()
        assert len(_stored(memory_fs)) == 10

    def test_no_write_when_nothing_removed(self, ledger, memory_fs, clock):
        now = int(clock.now * 1000)
        self._seed(memory_fs, [_entry_dict(1, now)])
        ledger.load()
        writes_before = len(memory_fs.writes)

        assert ledger.cleanup() == 0
        ledger.flush()
        assert len(memory_fs.writes) == writes_before

    def test_cleanup_if_due(self, ledger, memory_fs, clock):
        now = int(clock.now * 1000)
        self._seed(memory_fs, [_entry_dict(1, now)])
        ledger.load()
        assert ledger.cleanup_if_due() == 0

        clock.advance(31 * 24 * 60 * 60)
        assert ledger.cleanup_if_due() == 1

        ledger.append(HistoryCandidate("a", "/src"))
        clock.advance(AUTO_CLEAN_INTERVAL - 1)
        assert ledger.cleanup_if_due() == 0


class TestQueries:
    """Tests for history queries and statistics."""

    def test_get_history_limit(self, ledger, clock):
        for pattern in ("a", "b", "c"):
            ledger.append(HistoryCandidate(pattern, "/src"))
            clock.advance(1)
        assert [e.pattern for e in ledger.get_history(2)] == ["c", "b"]
        assert len(ledger.get_history()) == 3

    def test_non_positive_limit_returns_nothing(self, ledger):
        ledger.append(HistoryCandidate("a", "/src"))
        assert ledger.get_history(0) == []
        assert ledger.get_history(-1) == []
        assert ledger.search_history("a", limit=-1) == []

    def test_search_history_case_insensitive(self, ledger):
        ledger.append(HistoryCandidate("FooBar", "/src"))
        ledger.append(HistoryCandidate("baz", "/src"))
        assert [e.pattern for e in ledger.search_history("foo")] == ["FooBar"]

    def test_stats_empty(self, ledger):
        stats = ledger.get_stats()
        assert stats["total_searches"] == 0
        assert stats["date_range"] is None

    def test_stats(self, ledger, clock):
        ledger.append(HistoryCandidate("a", "/src"))
        first_ms = int(clock.now * 1000)
        clock.advance(10)
        ledger.append(HistoryCandidate("a", "/lib"))
        clock.advance(10)
        ledger.append(HistoryCandidate("b", "/lib"))
        stats = ledger.get_stats()
        assert stats["total_searches"] == 3
        assert stats["unique_patterns"] == 2
        assert stats["unique_paths"] == 2
        assert stats["date_range"]["earliest"] == first_ms
        assert stats["date_range"]["latest"] == int(clock.now * 1000)
