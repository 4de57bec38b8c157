"""
Search history ledger for rgdesk.

The ledger keeps the most recent searches, newest first, bounded by count
and by age, and mirrors them to ``search_history.json``. Reads never fail:
a missing or corrupt file simply means an empty history.

Writes happen on a single background worker so that a search never waits
for the disk. Each mutation returns a ``Future[bool]`` that resolves once
its snapshot has been written (True) or the write failed and was logged
(False). Writes are applied in the order they were scheduled.

Classes:
    HistoryLedger: Bounded, persisted list of ``SearchHistoryEntry``

Functions:
    is_duplicate: Whether a candidate repeats an entry already recorded

Constants:
    MAX_HISTORY_COUNT: Upper bound on stored entries (100)
    MAX_HISTORY_DAYS: Entries older than this are dropped by cleanup (30)
    AUTO_CLEAN_INTERVAL: Minimum time between automatic cleanups (24h)

Example:
    >>> from rgdesk.core.history import HistoryLedger, is_duplicate
    >>> from rgdesk.core.types import HistoryCandidate
    >>>
    >>> with HistoryLedger(fs, default_dir=app_dir) as ledger:
    ...     ledger.load()
    ...     candidate = HistoryCandidate(pattern="TODO", path="/src")
    ...     if not is_duplicate(ledger.entries, candidate):
    ...         ledger.append(candidate)
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from ...storage.filesystem import FileSystem
from ...utils.error_handling import ErrorKind, ParseError, classify_exception, handle_storage_error
from ...utils.logging_config import get_logger
from ..paths import StoragePathResolver
from ..types import HistoryCandidate, PathUpdateResult, SearchHistoryEntry

HISTORY_FILE_NAME = "search_history.json"
MAX_HISTORY_COUNT = 100
MAX_HISTORY_DAYS = 30
AUTO_CLEAN_INTERVAL = 24 * 60 * 60  # seconds

_DAY_MS = 24 * 60 * 60 * 1000


def is_duplicate(entries: Iterable[SearchHistoryEntry], candidate: HistoryCandidate) -> bool:
    """True if any entry has the same pattern, path and options as ``candidate``."""
    key = candidate.dedup_key
    return any(entry.dedup_key == key for entry in entries)


class HistoryLedger:
    """
    Bounded search history with background persistence.

    Args:
        fs: Filesystem capability
        default_dir: Callable returning the default storage directory
        clock: Returns the current time in seconds (``time.time``)
        max_entries: Upper bound on stored entries
    """

    def __init__(
        self,
        fs: FileSystem,
        default_dir: Callable[[], str],
        clock: Callable[[], float] = time.time,
        max_entries: int = MAX_HISTORY_COUNT,
    ) -> None:
        self.fs = fs
        self.resolver = StoragePathResolver(fs)
        self.default_dir = default_dir
        self.clock = clock
        self.max_entries = max_entries
        self.storage_path: str | None = None

        self._entries: list[SearchHistoryEntry] = []
        self._last_id_ms = 0
        self._last_cleanup: float | None = None
        self._pending: list[Future[bool]] = []
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rgdesk-history")
        self.logger = get_logger()

    def __enter__(self) -> HistoryLedger:
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()

    @property
    def entries(self) -> list[SearchHistoryEntry]:
        """Snapshot of the entries, most recent first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def file_path(self, storage_path: str | None = None) -> str:
        """Resolve the history file under ``storage_path`` or the active location."""
        base = storage_path if storage_path is not None else self.storage_path
        return self.resolver.resolve(base, self.default_dir, HISTORY_FILE_NAME)

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def _decode(self, text: str, path: str) -> list[SearchHistoryEntry]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid JSON: {exc}", path=path) from exc
        if not isinstance(data, list):
            raise ParseError("history document must be a JSON array", path=path)

        entries: list[SearchHistoryEntry] = []
        for index, item in enumerate(data):
            try:
                entries.append(SearchHistoryEntry.from_dict(item))
            except ValueError as exc:
                self.logger.warning(f"Skipping malformed history entry #{index}: {exc}")
        return entries[: self.max_entries]

    def load(self) -> list[SearchHistoryEntry]:
        """
        Load history from disk, replacing the in-memory entries.

        Returns an empty list when the file is missing or unreadable.
        """
        path = self.file_path()
        try:
            if not self.fs.exists(path):
                self.logger.info(f"History file not found at {path}, starting empty")
                entries: list[SearchHistoryEntry] = []
            else:
                entries = self._decode(self.fs.read_text(path), path)
        except Exception as exc:
            error = classify_exception(exc, path=path)
            if error.kind is not ErrorKind.NOT_FOUND:
                self.logger.log_storage_error("load history", error, path=path)
            entries = []

        self._entries = entries
        if entries:
            self._last_id_ms = max(self._last_id_ms, max(_id_ms(e) for e in entries))
        return self.entries

    def _write(self, storage_path: str | None, snapshot: list[dict[str, Any]]) -> bool:
        path = self.file_path(storage_path)
        try:
            self.fs.write_text(path, json.dumps(snapshot, indent=2, ensure_ascii=False))
        except Exception as exc:
            handle_storage_error(exc, "save history", path, self.logger)
            return False
        self.logger.debug(f"History saved ({len(snapshot)} entries): {path}")
        return True

    def persist(self) -> Future[bool]:
        """Schedule a write of the current entries to the active location."""
        snapshot = [entry.to_dict() for entry in self._entries]
        future = self._executor.submit(self._write, self.storage_path, snapshot)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(future)
        return future

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for scheduled writes. True if every one of them succeeded."""
        pending, self._pending = self._pending, []
        return all([future.result(timeout=timeout) for future in pending])

    def close(self) -> None:
        """Flush pending writes and stop the writer."""
        self.flush()
        self._executor.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _next_id(self, now_ms: int) -> str:
        id_ms = max(now_ms, self._last_id_ms + 1)
        self._last_id_ms = id_ms
        return str(id_ms)

    def append(self, candidate: HistoryCandidate) -> Future[bool]:
        """
        Record ``candidate`` as the newest entry and schedule a write.

        Callers are expected to check ``is_duplicate`` first; the ledger
        itself records whatever it is given.
        """
        now_ms = self._now_ms()
        entry = SearchHistoryEntry(
            id=self._next_id(now_ms),
            pattern=candidate.pattern,
            path=candidate.path,
            options=candidate.options,
            timestamp=now_ms,
        )
        self._entries.insert(0, entry)
        if len(self._entries) > self.max_entries:
            del self._entries[self.max_entries :]
        return self.persist()

    def clear(self) -> Future[bool]:
        """Remove every entry and schedule a write."""
        self._entries = []
        return self.persist()

    def set_storage_path(self, path: str | None, persist: bool = True) -> PathUpdateResult:
        """
        Move the history file to ``path``.

        A blank ``path`` reverts to the default location. Otherwise the
        directory is created if needed and probed for write access; only a
        directory that passes is adopted. On failure the active location
        and the entries are left untouched.

        With ``persist`` the current entries are written to the new
        location; pass False to adopt a location before ``load``.
        """
        trimmed = path.strip() if path else ""
        if not trimmed:
            self.storage_path = None
            if persist:
                self.persist()
            return PathUpdateResult(True, "Using the default history location")

        try:
            self.resolver.ensure_dir(trimmed)
            self.resolver.probe_writable(trimmed)
        except Exception as exc:
            error = handle_storage_error(exc, "set history path", trimmed, self.logger)
            reason = error.detail or error.kind.value.replace("_", " ")
            return PathUpdateResult(False, f"Failed to set history path: {reason}")

        self.storage_path = trimmed
        if persist:
            self.persist()
        return PathUpdateResult(True, f"History path set to {trimmed}")

    def cleanup(self) -> int:
        """
        Drop entries older than ``MAX_HISTORY_DAYS`` and cap the count.

        Writes only when something was removed. Returns the number removed.
        """
        now_ms = self._now_ms()
        max_age = MAX_HISTORY_DAYS * _DAY_MS
        kept = [e for e in self._entries if now_ms - e.timestamp < max_age][: self.max_entries]
        self._last_cleanup = self.clock()

        removed = len(self._entries) - len(kept)
        if removed:
            self._entries = kept
            self.persist()
            self.logger.info(f"History cleaned up, {len(kept)} entries remain")
        return removed

    def cleanup_if_due(self) -> int:
        """Run ``cleanup`` if ``AUTO_CLEAN_INTERVAL`` has passed since the last run."""
        if self._last_cleanup is not None and self.clock() - self._last_cleanup < AUTO_CLEAN_INTERVAL:
            return 0
        return self.cleanup()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_history(self, limit: int | None = None) -> list[SearchHistoryEntry]:
        """Entries, most recent first, optionally limited."""
        if limit is not None:
            return self._entries[: max(limit, 0)]
        return self.entries

    def search_history(self, text: str, limit: int | None = None) -> list[SearchHistoryEntry]:
        """Entries whose pattern contains ``text`` (case-insensitive)."""
        needle = text.lower()
        matches = [e for e in self._entries if needle in e.pattern.lower()]
        if limit is not None:
            return matches[: max(limit, 0)]
        return matches

    def get_stats(self) -> dict[str, Any]:
        if not self._entries:
            return {"total_searches": 0, "unique_patterns": 0, "unique_paths": 0, "date_range": None}
        return {
            "total_searches": len(self._entries),
            "unique_patterns": len({e.pattern for e in self._entries}),
            "unique_paths": len({e.path for e in self._entries}),
            "date_range": {
                "earliest": self._entries[-1].timestamp,
                "latest": self._entries[0].timestamp,
            },
        }


def _id_ms(entry: SearchHistoryEntry) -> int:
    try:
        return int(entry.id)
    except ValueError:
        return 0
