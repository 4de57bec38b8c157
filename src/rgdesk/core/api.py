"""
Application context for rgdesk.

``AppContext`` wires the configuration store, history ledger, search session
and preview loader together and owns their state for the life of the
process. There is no module-level state: everything a front end needs hangs
off one context object.

Example:
    >>> from rgdesk import AppContext
    >>>
    >>> with AppContext() as app:
    ...     app.startup()
    ...     app.search("TODO", path="~/src")
    ...     for result in app.session.results:
    ...         print(result.file, result.line, result.content)
"""

from __future__ import annotations

from typing import Any

from ..search.ripgrep import RipgrepEngine, SearchEngine
from ..storage.filesystem import FileSystem, LocalFileSystem
from ..utils.logging_config import get_logger
from .config import ConfigStore, Environment
from .history import HistoryLedger
from .paths import default_app_dir
from .preview import FilePreviewLoader
from .session import SearchSession
from .types import AppConfig, PathUpdateResult, SearchOptions


class AppContext:
    """
    Composition root owning configuration, history and search state.

    Args:
        fs: Filesystem capability, local disk by default
        engine: Search engine, ripgrep by default
        environment: Host facts for default configuration, detected by default
        config_dir: Directory holding ``config.json`` and the default history
            file; the per-user application directory by default
    """

    def __init__(
        self,
        fs: FileSystem | None = None,
        engine: SearchEngine | None = None,
        environment: Environment | None = None,
        config_dir: str | None = None,
    ) -> None:
        self.fs = fs or LocalFileSystem()
        self.logger = get_logger()
        self.config_store = ConfigStore(self.fs, environment=environment, config_dir=config_dir)
        self.ledger = HistoryLedger(self.fs, default_dir=self._default_history_dir)
        self.session = SearchSession(engine or RipgrepEngine(), self.ledger)
        self.preview = FilePreviewLoader(self.fs)
        self.started = False

    def _default_history_dir(self) -> str:
        try:
            return self.config_store.config_dir
        except Exception:
            return default_app_dir(self.fs)

    def __enter__(self) -> AppContext:
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.close()

    @property
    def config(self) -> AppConfig:
        return self.config_store.config

    def startup(self) -> AppConfig:
        """
        Initialize configuration and history. Never raises.

        The configured history location is adopted before history is loaded,
        so nothing is written to it here; if it is no longer usable the
        ledger stays on its default location.
        """
        if self.started:
            return self.config
        config = self.config_store.initialize()

        try:
            if config.history_path:
                result = self.ledger.set_storage_path(config.history_path, persist=False)
                if not result.success:
                    self.logger.warning(f"Configured history path ignored: {result.message}")
            self.ledger.load()
            if config.default_search_path:
                self.session.set_path(config.default_search_path)
            self.ledger.cleanup()
        except Exception as exc:
            self.logger.exception(f"Startup failed, continuing with defaults: {exc}")

        self.started = True
        return config

    def search(
        self,
        pattern: str,
        path: str | None = None,
        options: SearchOptions | None = None,
    ) -> SearchSession:
        """Run a search through the session and return it for inspection."""
        self.session.perform_search(path=path, pattern=pattern, options=options)
        return self.session

    def set_history_path(self, path: str | None) -> PathUpdateResult:
        """
        Move history to ``path`` (None or blank for the default location).

        The configuration is only updated once the ledger has accepted the
        new location.
        """
        result = self.ledger.set_storage_path(path)
        if result.success:
            self.config_store.update_history_path(self.ledger.storage_path)
        return result

    def close(self) -> None:
        """Wait for pending history writes and release the writer."""
        self.ledger.close()
