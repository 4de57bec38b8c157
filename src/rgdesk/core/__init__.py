"""
Core functionality for the rgdesk package.

This module contains the stateful components of the application:
- Storage path resolution
- Configuration management
- Search history tracking
- Search session orchestration
- File preview loading

``AppContext`` wires them together; front ends talk to it rather than to the
individual components.
"""

from .api import AppContext
from .config import ConfigState, ConfigStore, Environment, detect_environment
from .history import HistoryLedger, is_duplicate
from .paths import StoragePathResolver, default_app_dir
from .preview import FilePreviewLoader
from .session import SearchPhase, SearchSession, classify_search_failure
from .types import (
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
    # Main classes
    "AppContext",
    "ConfigStore",
    "ConfigState",
    "Environment",
    "detect_environment",
    "HistoryLedger",
    "is_duplicate",
    "StoragePathResolver",
    "default_app_dir",
    "FilePreviewLoader",
    "SearchSession",
    "SearchPhase",
    "classify_search_failure",
    # Data types
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
