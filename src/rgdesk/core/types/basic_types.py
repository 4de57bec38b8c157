"""
Basic type definitions for rgdesk.

Key Types:
    SearchOptions: Flags and filters of one search (value type)
    HistoryCandidate: What a completed search would record in history
    SearchHistoryEntry: One recorded search, created only by the ledger
    UserConfig: User preferences
    AppConfig: The persisted application configuration
    SearchRequest: What is sent to the external search engine
    RawMatch: One match record as returned by the engine
    SearchResult: One normalized match exposed to the UI
    PathUpdateResult: Outcome of changing the history location

Persisted documents use camelCase keys; ``to_dict``/``from_dict`` convert
between those documents and the snake_case attributes used in Python.

Example:
    >>> from rgdesk.core.types import HistoryCandidate, SearchOptions
    >>>
    >>> a = HistoryCandidate("TODO", "/src", SearchOptions(case_insensitive=True))
    >>> b = HistoryCandidate("TODO", "/src", SearchOptions(case_insensitive=True))
    >>> a.dedup_key == b.dedup_key
    True
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any


def _bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return ()


def _type_names(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    # A bare string is one type name, not a sequence of characters
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """
    Flags and filters of one search.

    Compared by structural equality; two searches with equal options, pattern
    and path are the same search for history purposes.

    Attributes:
        case_insensitive: Ignore letter case
        whole_word: Only match whole words
        regex: Treat the pattern as a regular expression (otherwise literal)
        ignore_hidden: Skip hidden files and directories
        include_types: File types to restrict the search to
        exclude_types: File types to leave out
        max_depth: Maximum directory depth, 0 means unlimited
    """

    case_insensitive: bool = False
    whole_word: bool = False
    regex: bool = False
    ignore_hidden: bool = True
    include_types: tuple[str, ...] = ()
    exclude_types: tuple[str, ...] = ()
    max_depth: int = 0

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError("max_depth must be non-negative (0 = unlimited)")
        # Lists are accepted for convenience; stored as tuples to stay hashable
        object.__setattr__(self, "include_types", _type_names(self.include_types))
        object.__setattr__(self, "exclude_types", _type_names(self.exclude_types))

    def merged(self, **changes: Any) -> SearchOptions:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "caseInsensitive": self.case_insensitive,
            "wholeWord": self.whole_word,
            "regex": self.regex,
            "ignoreHidden": self.ignore_hidden,
            "includeTypes": list(self.include_types),
            "excludeTypes": list(self.exclude_types),
            "maxDepth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SearchOptions:
        """Build options from a persisted mapping, defaulting bad or missing fields."""
        data = data or {}
        defaults = cls()
        max_depth = data.get("maxDepth", 0)
        if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
            max_depth = defaults.max_depth
        return cls(
            case_insensitive=_bool(data.get("caseInsensitive"), defaults.case_insensitive),
            whole_word=_bool(data.get("wholeWord"), defaults.whole_word),
            regex=_bool(data.get("regex"), defaults.regex),
            ignore_hidden=_bool(data.get("ignoreHidden"), defaults.ignore_hidden),
            include_types=_str_tuple(data.get("includeTypes")),
            exclude_types=_str_tuple(data.get("excludeTypes")),
            max_depth=max_depth,
        )


@dataclass(frozen=True, slots=True)
class HistoryCandidate:
    """A completed search that may be appended to history."""

    pattern: str
    path: str
    options: SearchOptions = field(default_factory=SearchOptions)

    @property
    def dedup_key(self) -> tuple[str, str, SearchOptions]:
        return (self.pattern, self.path, self.options)


@dataclass(frozen=True, slots=True)
class SearchHistoryEntry:
    """
    One recorded search.

    Identity is ``id``; ``dedup_key`` deliberately leaves out ``id`` and
    ``timestamp``.
    """

    id: str
    pattern: str
    path: str
    options: SearchOptions
    timestamp: int  # epoch milliseconds

    @property
    def dedup_key(self) -> tuple[str, str, SearchOptions]:
        return (self.pattern, self.path, self.options)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pattern": self.pattern,
            "path": self.path,
            "options": self.options.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SearchHistoryEntry:
        """
        Build an entry from a persisted mapping.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        try:
            entry_id = data["id"]
            pattern = data["pattern"]
            path = data["path"]
            timestamp = data["timestamp"]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"history entry is missing a field: {exc}") from exc

        if not isinstance(pattern, str) or not isinstance(path, str):
            raise ValueError("history entry pattern and path must be strings")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("history entry timestamp must be a number")
        if isinstance(timestamp, float) and not math.isfinite(timestamp):
            raise ValueError(f"history entry timestamp is not finite: {timestamp}")

        options = data.get("options")
        return cls(
            id=str(entry_id),
            pattern=pattern,
            path=path,
            options=SearchOptions.from_dict(options if isinstance(options, Mapping) else None),
            timestamp=int(timestamp),
        )


@dataclass(slots=True)
class UserConfig:
    dark_mode: bool = False
    language: str = "en-US"

    def to_dict(self) -> dict[str, Any]:
        return {"darkMode": self.dark_mode, "language": self.language}


@dataclass(slots=True)
class AppConfig:
    """
    The persisted application configuration.

    Attributes:
        default_search_path: Directory the search box starts in
        history_path: Directory holding the history file, None for the default
        user_config: Appearance and language preferences
    """

    default_search_path: str = ""
    history_path: str | None = None
    user_config: UserConfig = field(default_factory=UserConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultSearchPath": self.default_search_path,
            "historyPath": self.history_path,
            "userConfig": self.user_config.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Request sent to the external search engine."""

    path: str
    pattern: str
    case_insensitive: bool = False
    whole_word: bool = False
    regex: bool = False
    ignore_hidden: bool = True
    max_depth: int = 0
    include_types: tuple[str, ...] = ()
    exclude_types: tuple[str, ...] = ()

    @classmethod
    def build(cls, path: str, pattern: str, options: SearchOptions) -> SearchRequest:
        return cls(
            path=path,
            pattern=pattern,
            case_insensitive=options.case_insensitive,
            whole_word=options.whole_word,
            regex=options.regex,
            ignore_hidden=options.ignore_hidden,
            max_depth=options.max_depth,
            include_types=options.include_types,
            exclude_types=options.exclude_types,
        )


@dataclass(frozen=True, slots=True)
class RawMatch:
    """One match as produced by the engine."""

    file: str
    line: int
    column: int
    content: str
    match_text: str


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One normalized match. ``line`` and ``column`` are 1-based."""

    file: str
    line: int
    column: int
    content: str
    match: str

    @classmethod
    def from_raw(cls, raw: RawMatch | Mapping[str, Any]) -> SearchResult:
        """Map an engine record field for field; ``match_text`` becomes ``match``."""
        if isinstance(raw, Mapping):
            return cls(
                file=raw["file"],
                line=raw["line"],
                column=raw["column"],
                content=raw["content"],
                match=raw["match_text"],
            )
        return cls(
            file=raw.file,
            line=raw.line,
            column=raw.column,
            content=raw.content,
            match=raw.match_text,
        )


@dataclass(frozen=True, slots=True)
class PathUpdateResult:
    success: bool
    message: str
