"""
Storage location resolution for configuration and history files.

Reading state must never be blocked by an unusable directory, so ``resolve``
walks a fallback chain and always hands back some path. Changing a location
on purpose is different: the user is told why a directory was rejected, so
``probe_writable`` raises instead of falling back.

Fallback chain used by ``resolve``:
    1. the preferred directory (created if missing)
    2. the fallback directory returned by a callable (created if missing)
    3. the bare file name, relative to the working directory
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable

from ..storage.filesystem import FileSystem
from ..utils.error_handling import (
    PermissionDeniedError,
    classify_exception,
    handle_storage_error,
)
from ..utils.logging_config import get_logger

CONFIG_DIR_NAME = ".config"
APP_DIR_NAME = "rgdesk"
CONFIG_DIR_ENV = "RGDESK_CONFIG_DIR"
PROBE_PREFIX = ".rgdesk-write-probe-"


def default_app_dir(fs: FileSystem) -> str:
    """
    Per-user application directory, ``~/.config/rgdesk`` unless overridden.

    Raises:
        AppError: If the home directory cannot be determined
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return override
    return fs.join(fs.home_dir(), CONFIG_DIR_NAME, APP_DIR_NAME)


class StoragePathResolver:
    """Turns a preferred directory and a fallback into a usable file path."""

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs
        self.logger = get_logger()

    def ensure_dir(self, directory: str) -> None:
        """Create ``directory`` (and parents) unless it already exists."""
        if not self.fs.exists(directory):
            self.logger.debug(f"Creating directory {directory}")
            self.fs.make_dirs(directory)

    def resolve(
        self,
        preferred_base: str | None,
        fallback_base: Callable[[], str],
        file_name: str,
    ) -> str:
        """
        Return a path for ``file_name``, creating its directory as needed.

        Never raises. Directory failures degrade to the next link of the
        fallback chain and are logged.
        """
        if preferred_base:
            try:
                self.ensure_dir(preferred_base)
                return self.fs.join(preferred_base, file_name)
            except Exception as exc:
                handle_storage_error(exc, "prepare preferred directory", preferred_base, self.logger)

        try:
            base = fallback_base()
            self.ensure_dir(base)
            return self.fs.join(base, file_name)
        except Exception as exc:
            handle_storage_error(exc, "prepare fallback directory", None, self.logger)

        self.logger.warning(f"Falling back to working directory for {file_name}")
        return file_name

    def probe_writable(self, directory: str) -> None:
        """
        Confirm that files can be created in ``directory``.

        A uniquely named probe file is written and checked for existence,
        then removed on a best-effort basis.

        Raises:
            PermissionDeniedError: If the probe cannot be written or is not
                visible afterwards
        """
        probe = self.fs.join(directory, f"{PROBE_PREFIX}{uuid.uuid4().hex}")
        try:
            self.fs.write_text(probe, "test")
            written = self.fs.exists(probe)
        except Exception as exc:
            error = classify_exception(exc, path=directory)
            raise PermissionDeniedError(
                f"directory is not writable: {error.detail or error.kind.value}", path=directory
            ) from exc
        if not written:
            raise PermissionDeniedError("directory is not writable: probe file was not created", path=directory)

        try:
            self.fs.remove(probe)
        except Exception as exc:
            self.logger.warning(f"Could not remove write probe {probe}: {exc}")
