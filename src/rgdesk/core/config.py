"""
Configuration store for rgdesk.

The store owns the single ``AppConfig`` of a process. It is initialized once
at startup by detecting the configuration file, creating a default one when
it is absent, and loading it. Every update is written straight back to disk.

Nothing in here blocks startup: when the file cannot be found, created, read
or parsed, the store falls back to a default configuration built from the
host environment and logs what went wrong.

Classes:
    ConfigState: Lifecycle of the store
    Environment: Host facts used to build defaults
    ConfigStore: Load, save and update the persisted configuration

Functions:
    detect_environment: Read home directory, color scheme and locale

Example:
    >>> from rgdesk.core.config import ConfigStore
    >>> from rgdesk.storage.filesystem import LocalFileSystem
    >>>
    >>> store = ConfigStore(LocalFileSystem())
    >>> config = store.initialize()
    >>> store.update_user_config(dark_mode=True)
    True
"""

from __future__ import annotations

import json
import locale
import os
import subprocess
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..storage.filesystem import FileSystem
from ..utils.error_handling import ErrorKind, ParseError, classify_exception, handle_storage_error
from ..utils.logging_config import get_logger
from .paths import StoragePathResolver, default_app_dir
from .types import AppConfig, UserConfig

CONFIG_FILE_NAME = "config.json"
HISTORY_DIR_NAME = "history"
DEFAULT_LANGUAGE = "en-US"
DARK_MODE_ENV = "RGDESK_DARK_MODE"

_TRUE_VALUES = {"1", "true", "yes", "on", "dark"}
_FALSE_VALUES = {"0", "false", "no", "off", "light"}


class ConfigState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DETECTING = "detecting"
    EXISTS = "exists"
    ABSENT = "absent"
    LOADED = "loaded"


@dataclass(frozen=True, slots=True)
class Environment:
    """Host facts that seed a default configuration."""

    home_dir: str = ""
    prefers_dark: bool = False
    locale: str = DEFAULT_LANGUAGE

    def user_config(self) -> UserConfig:
        return UserConfig(dark_mode=self.prefers_dark, language=self.locale)


def _normalize_locale(name: str | None) -> str | None:
    if not name:
        return None
    name = name.split(".", 1)[0].split("@", 1)[0]
    if name in ("C", "POSIX", ""):
        return None
    return name.replace("_", "-")


def _detect_locale() -> str:
    try:
        current = locale.getlocale()[0]
    except ValueError:
        current = None
    return (
        _normalize_locale(current)
        or _normalize_locale(os.environ.get("LC_ALL"))
        or _normalize_locale(os.environ.get("LANG"))
        or DEFAULT_LANGUAGE
    )


def _detect_dark_mode() -> bool:
    override = os.environ.get(DARK_MODE_ENV, "").strip().lower()
    if override in _TRUE_VALUES:
        return True
    if override in _FALSE_VALUES:
        return False

    if "dark" in os.environ.get("GTK_THEME", "").lower():
        return True

    if sys.platform == "darwin":
        try:
            result = subprocess.run(
                ["defaults", "read", "-g", "AppleInterfaceStyle"],
                capture_output=True,
                text=True,
                timeout=2,
            )
        except (OSError, subprocess.SubprocessError):
            return False
        return result.returncode == 0 and result.stdout.strip().lower() == "dark"

    return False


def detect_environment(fs: FileSystem) -> Environment:
    """Collect home directory, color-scheme preference and locale. Never raises."""
    try:
        home = fs.home_dir()
    except Exception as exc:
        get_logger().warning(f"Home directory is not available: {exc}")
        home = ""
    return Environment(home_dir=home, prefers_dark=_detect_dark_mode(), locale=_detect_locale())


class ConfigStore:
    """
    Owner of the persisted ``AppConfig``.

    Args:
        fs: Filesystem capability
        environment: Host facts for defaults; detected when omitted
        config_dir: Directory holding ``config.json``; defaults to the
            per-user application directory
    """

    def __init__(
        self,
        fs: FileSystem,
        environment: Environment | None = None,
        config_dir: str | None = None,
    ) -> None:
        self.fs = fs
        self.resolver = StoragePathResolver(fs)
        self.environment = environment or detect_environment(fs)
        self._config_dir = config_dir
        self.state = ConfigState.UNINITIALIZED
        self.config = self.fallback_config()
        self.logger = get_logger()

    @property
    def config_dir(self) -> str:
        if self._config_dir is None:
            self._config_dir = default_app_dir(self.fs)
        return self._config_dir

    def config_file_path(self) -> str:
        """Full path of ``config.json``, or the bare name if it cannot be built."""
        try:
            return self.fs.join(self.config_dir, CONFIG_FILE_NAME)
        except Exception as exc:
            handle_storage_error(exc, "build config file path", None, self.logger)
            return CONFIG_FILE_NAME

    def fallback_config(self) -> AppConfig:
        """Configuration used when nothing could be read from disk."""
        return AppConfig(
            default_search_path="",
            history_path=None,
            user_config=self.environment.user_config(),
        )

    def default_config(self) -> AppConfig:
        """Configuration written on first run."""
        return AppConfig(
            default_search_path=self.environment.home_dir,
            history_path=self.fs.join(self.config_dir, HISTORY_DIR_NAME),
            user_config=self.environment.user_config(),
        )

    def detect(self) -> bool:
        """Check whether the configuration file exists."""
        self.state = ConfigState.DETECTING
        path = self.config_file_path()
        try:
            found = self.fs.exists(path)
        except Exception as exc:
            handle_storage_error(exc, "detect config file", path, self.logger)
            found = False
        self.state = ConfigState.EXISTS if found else ConfigState.ABSENT
        return found

    def create_default(self) -> bool:
        """Write a default configuration file. Returns True on success."""
        try:
            default = self.default_config()
        except Exception as exc:
            handle_storage_error(exc, "build default config", None, self.logger)
            return False
        created = self.save(default)
        if created:
            self.logger.info(f"Default config created: {self.config_file_path()}")
        return created

    def _parse(self, text: str, path: str) -> AppConfig:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid JSON: {exc}", path=path) from exc
        if not isinstance(data, dict):
            raise ParseError("config document must be a JSON object", path=path)

        default_search_path = data.get("defaultSearchPath")
        history_path = data.get("historyPath")
        user: Any = data.get("userConfig")
        if not isinstance(user, dict):
            user = {}
        dark_mode = user.get("darkMode")
        language = user.get("language")

        return AppConfig(
            default_search_path=default_search_path if isinstance(default_search_path, str) else "",
            history_path=history_path if isinstance(history_path, str) and history_path.strip() else None,
            user_config=UserConfig(
                dark_mode=dark_mode if isinstance(dark_mode, bool) else self.environment.prefers_dark,
                language=language if isinstance(language, str) and language else self.environment.locale,
            ),
        )

    def load(self) -> AppConfig:
        """
        Read, parse and validate the configuration file.

        Missing or mistyped fields are replaced by defaults. A missing file
        or malformed document yields the fallback configuration.
        """
        path = self.config_file_path()
        try:
            config = self._parse(self.fs.read_text(path), path)
        except Exception as exc:
            error = classify_exception(exc, path=path)
            if error.kind is ErrorKind.NOT_FOUND:
                self.logger.info(f"Config file not found at {path}, using defaults")
            else:
                self.logger.log_storage_error("load config", error, path=path)
            config = self.fallback_config()

        self.config = config
        self.state = ConfigState.LOADED
        return config

    def initialize(self) -> AppConfig:
        """
        Detect, create if absent, then load. Runs once per store.

        Always returns a usable configuration.
        """
        if self.state is ConfigState.LOADED:
            return self.config
        try:
            if not self.detect():
                self.create_default()
            return self.load()
        except Exception as exc:
            self.logger.exception(f"Config initialization failed: {exc}")
            self.config = self.fallback_config()
            self.state = ConfigState.LOADED
            return self.config

    def save(self, config: AppConfig | None = None) -> bool:
        """
        Write ``config`` (or the current one) to disk. Never raises.

        A config written successfully becomes the current one, so later
        ``update_*`` calls build on what is on disk.
        """
        config = config or self.config
        path = self.config_file_path()
        try:
            content = json.dumps(config.to_dict(), indent=2, ensure_ascii=False)
            directory = os.path.dirname(path)
            if directory:
                self.resolver.ensure_dir(directory)
            self.fs.write_text(path, content)
        except Exception as exc:
            handle_storage_error(exc, "save config", path, self.logger)
            return False
        self.config = config
        self.logger.debug(f"Config saved: {path}")
        return True

    def update_default_search_path(self, path: str) -> bool:
        self.config.default_search_path = path
        return self.save()

    def update_history_path(self, path: str | None) -> bool:
        self.config.history_path = path.strip() if path and path.strip() else None
        return self.save()

    def update_user_config(
        self, dark_mode: bool | None = None, language: str | None = None
    ) -> bool:
        """Merge the given preferences into the current user config and save."""
        if dark_mode is not None:
            self.config.user_config.dark_mode = dark_mode
        if language is not None:
            self.config.user_config.language = language
        return self.save()
