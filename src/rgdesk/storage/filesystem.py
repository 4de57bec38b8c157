"""
Filesystem capability used by the rgdesk core.

The core never touches the disk directly; it goes through a ``FileSystem``
object so that storage failures can be injected in tests and so that every
failure leaves this layer as a classified ``AppError``.

Classes:
    FileSystem: Protocol describing the primitives the core depends on
    LocalFileSystem: ``pathlib`` implementation with tmp-file-and-rename writes
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..utils.error_handling import PathResolutionError, classify_exception


@runtime_checkable
class FileSystem(Protocol):
    """Primitives the core depends on. All of them may raise ``AppError``."""

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, content: str) -> None: ...

    def exists(self, path: str) -> bool: ...

    def make_dirs(self, path: str) -> None: ...

    def remove(self, path: str) -> None: ...

    def join(self, *segments: str) -> str: ...

    def home_dir(self) -> str: ...


class LocalFileSystem:
    """Local disk implementation of ``FileSystem``."""

    encoding = "utf-8"

    def read_text(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise classify_exception(exc, path=path) from exc

    def write_text(self, path: str, content: str) -> None:
        target = Path(path)
        tmp_file = target.with_name(f".{target.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            tmp_file.write_text(content, encoding=self.encoding)
            tmp_file.replace(target)
        except OSError as exc:
            if tmp_file.exists():
                tmp_file.unlink(missing_ok=True)
            raise classify_exception(exc, path=path) from exc

    def exists(self, path: str) -> bool:
        try:
            return Path(path).exists()
        except OSError as exc:
            raise classify_exception(exc, path=path) from exc

    def make_dirs(self, path: str) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise classify_exception(exc, path=path) from exc

    def remove(self, path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as exc:
            raise classify_exception(exc, path=path) from exc

    def join(self, *segments: str) -> str:
        if not segments:
            raise PathResolutionError("cannot join an empty path")
        return os.path.join(*segments)

    def home_dir(self) -> str:
        try:
            return str(Path.home())
        except RuntimeError as exc:
            raise PathResolutionError(f"home directory is not available: {exc}") from exc
