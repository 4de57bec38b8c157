"""
Search session orchestration.

A ``SearchSession`` holds what the user is currently searching for and the
outcome of the last search. ``perform_search`` runs one search through the
engine, normalizes the matches, and records the search in history unless an
identical one is already there.

Lifecycle of one search::

    IDLE -> SEARCHING -> (SUCCEEDED | FAILED) -> IDLE

Progress is reported as 0 when a search starts and 100 when it ends, whether
it succeeded or not. A failed search is not retried.
"""

from __future__ import annotations

import time
from concurrent.futures import Future
from enum import Enum
from typing import Any

from ..search.ripgrep import SearchEngine
from ..utils.error_handling import ErrorKind, classify_exception
from ..utils.logging_config import get_logger
from .history import HistoryLedger, is_duplicate
from .types import HistoryCandidate, SearchOptions, SearchRequest, SearchResult

SEARCH_FAILED_PREFIX = "Search failed:"
UNKNOWN_ERROR_MESSAGE = f"{SEARCH_FAILED_PREFIX} an unknown error occurred"


class SearchPhase(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def classify_search_failure(detail: str | None) -> str:
    """
    Turn an engine failure detail into the message shown to the user.

    Details that already carry the "Search failed:" marker are kept as they
    are; other details get the marker prepended once; a missing detail
    becomes a generic unknown-error message.
    """
    if not detail or not detail.strip():
        return UNKNOWN_ERROR_MESSAGE
    if detail.startswith(SEARCH_FAILED_PREFIX):
        return detail
    return f"{SEARCH_FAILED_PREFIX} {detail}"


class SearchSession:
    """
    Current search inputs, last results, and the search workflow.

    Args:
        engine: The external search engine
        ledger: History to record successful searches in; None disables
            recording
    """

    def __init__(self, engine: SearchEngine, ledger: HistoryLedger | None = None) -> None:
        self.engine = engine
        self.ledger = ledger
        self.logger = get_logger()

        self.path = ""
        self.pattern = ""
        self.options = SearchOptions()

        self.results: list[SearchResult] = []
        self.error: str | None = None
        self.progress = 0
        self.is_searching = False
        self.phase = SearchPhase.IDLE
        self.outcome: SearchPhase | None = None
        self.last_persist: Future[bool] | None = None

    def set_path(self, path: str) -> None:
        self.path = path

    def set_pattern(self, pattern: str) -> None:
        self.pattern = pattern

    def set_options(self, **changes: Any) -> SearchOptions:
        """Merge ``changes`` into the current options."""
        self.options = self.options.merged(**changes)
        return self.options

    def _start(self) -> None:
        self.phase = SearchPhase.SEARCHING
        self.is_searching = True
        self.progress = 0
        self.results = []
        self.error = None
        self.outcome = None

    def _record(self, candidate: HistoryCandidate) -> None:
        if self.ledger is None:
            return
        if is_duplicate(self.ledger.entries, candidate):
            self.logger.debug(f"Search '{candidate.pattern}' already in history, not recorded")
            return
        self.last_persist = self.ledger.append(candidate)

    def perform_search(
        self,
        path: str | None = None,
        pattern: str | None = None,
        options: SearchOptions | None = None,
    ) -> None:
        """
        Run one search and update the session state with its outcome.

        Arguments left as None keep the session's current values. Callers
        must not start a second search while ``is_searching`` is True.
        """
        if path is not None:
            self.path = path
        if pattern is not None:
            self.pattern = pattern
        if options is not None:
            self.options = options

        candidate = HistoryCandidate(pattern=self.pattern, path=self.path, options=self.options)
        self._start()
        self.logger.log_search_start(self.pattern, self.path)
        started = time.perf_counter()

        try:
            try:
                raw_matches = self.engine.search(
                    SearchRequest.build(self.path, self.pattern, self.options)
                )
                results = [SearchResult.from_raw(raw) for raw in raw_matches]
            except Exception as exc:
                error = classify_exception(exc, default=ErrorKind.ENGINE)
                self.error = classify_search_failure(error.detail)
                self.results = []
                self.progress = 100
                self.outcome = SearchPhase.FAILED
                self.phase = SearchPhase.FAILED
                self.logger.log_search_failed(self.pattern, self.error)
                return

            self.results = results
            self.progress = 100
            self.outcome = SearchPhase.SUCCEEDED
            self.phase = SearchPhase.SUCCEEDED
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.logger.log_search_complete(self.pattern, len(results), elapsed_ms)

            self._record(candidate)
        finally:
            self.is_searching = False
            self.phase = SearchPhase.IDLE

    def filter_results(self, text: str) -> list[SearchResult]:
        """Results whose file path or line content contains ``text``."""
        if not text:
            return list(self.results)
        return [r for r in self.results if text in r.file or text in r.content]
