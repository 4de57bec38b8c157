"""
Type definitions for rgdesk.

All public data types live in ``basic_types`` and are re-exported here so
that callers can write ``from rgdesk.core.types import SearchOptions``.
"""

from .basic_types import (
    AppConfig,
    HistoryCandidate,
    PathUpdateResult,
    RawMatch,
    SearchHistoryEntry,
    SearchOptions,
    SearchRequest,
    SearchResult,
    UserConfig,
)

__all__ = [
    "AppConfig",
    "HistoryCandidate",
    "PathUpdateResult",
    "RawMatch",
    "SearchHistoryEntry",
    "SearchOptions",
    "SearchRequest",
    "SearchResult",
    "UserConfig",
]
