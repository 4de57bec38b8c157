"""
rgdesk: Desktop-style front end state for ripgrep searches.

rgdesk keeps the state a search front end needs around an external search
engine: a persisted configuration, a bounded search history, the current
search session and a file preview. Matching itself is delegated to the
``rg`` executable.

Main Classes:
    AppContext: Composition root owning configuration, history and search state
    ConfigStore: Load, save and update the persisted configuration
    HistoryLedger: Bounded, persisted search history
    SearchSession: Current search inputs, results and the search workflow
    RipgrepEngine: Default search engine driving ``rg --json``

Example Usage:
    API usage:
        >>> from rgdesk import AppContext, SearchOptions
        >>> with AppContext() as app:
        ...     app.startup()
        ...     session = app.search("TODO", path=".", options=SearchOptions(case_insensitive=True))
        ...     print(len(session.results), session.error)

    CLI usage:
        $ rgdesk search "TODO" --path . -i
        $ rgdesk history --limit 10
        $ rgdesk history-path ~/rgdesk-history
"""

from .core.api import AppContext
from .core.config import ConfigStore
from .core.history import HistoryLedger
from .core.session import SearchSession
from .core.types import (
    AppConfig,
    HistoryCandidate,
    SearchHistoryEntry,
    SearchOptions,
    SearchResult,
    UserConfig,
)
from .search import RipgrepEngine
from .storage import LocalFileSystem
from .utils.error_handling import AppError, ErrorKind

__version__ = "0.1.0"

__all__ = [
    "AppContext",
    "ConfigStore",
    "HistoryLedger",
    "SearchSession",
    "RipgrepEngine",
    "LocalFileSystem",
    "AppConfig",
    "HistoryCandidate",
    "SearchHistoryEntry",
    "SearchOptions",
    "SearchResult",
    "UserConfig",
    "AppError",
    "ErrorKind",
    "__version__",
]
