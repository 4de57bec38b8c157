"""
Error classification for rgdesk.

Every failure that crosses a component boundary is expressed as an
``AppError`` tagged with one ``ErrorKind`` from a closed set. Components
decide what to do with a failure by looking at its kind, never by inspecting
the text of the message.

Error Kinds:
    - PATH_RESOLUTION: a directory could not be reached or created
    - PERMISSION_DENIED: a read or write was refused
    - NOT_FOUND: the target file does not exist
    - PARSE: persisted JSON is malformed
    - ENGINE: the external search engine failed

Classes:
    ErrorKind: The closed set of error kinds
    AppError: Base exception carrying kind, detail, path and suggestions
    PathResolutionError, PermissionDeniedError, NotFoundError,
    ParseError, EngineError: One subclass per kind

Functions:
    classify_exception: Map any exception onto the closed set
    handle_storage_error: Classify and log a storage failure in one step

Example:
    >>> from rgdesk.utils.error_handling import ErrorKind, classify_exception
    >>>
    >>> try:
    ...     open("/does/not/exist").read()
    ... except OSError as exc:
    ...     error = classify_exception(exc)
    >>> error.kind is ErrorKind.NOT_FOUND
    True
"""

from __future__ import annotations

import builtins
import json
from enum import Enum
from typing import Any

BuiltinPermissionError = builtins.PermissionError


class ErrorKind(str, Enum):
    """Kinds of failure produced at component boundaries."""

    PATH_RESOLUTION = "path_resolution"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    PARSE = "parse"
    ENGINE = "engine"


class AppError(Exception):
    """Base exception for rgdesk errors."""

    kind: ErrorKind = ErrorKind.PATH_RESOLUTION

    def __init__(
        self,
        detail: str | None = None,
        kind: ErrorKind | None = None,
        path: str | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        super().__init__(detail or "")
        self.detail: str | None = detail
        if kind is not None:
            self.kind = kind
        self.path: str | None = path
        self.suggestions: list[str] = suggestions or []

    def __str__(self) -> str:
        return self.detail or ""


class PathResolutionError(AppError):
    """A directory is unreachable or could not be created."""

    kind = ErrorKind.PATH_RESOLUTION

    def __init__(self, detail: str | None = None, path: str | None = None) -> None:
        super().__init__(
            detail,
            path=path,
            suggestions=["Check that the parent directory exists", "Choose another location"],
        )


class PermissionDeniedError(AppError):
    """A read, write or probe was refused."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, detail: str | None = None, path: str | None = None) -> None:
        super().__init__(
            detail,
            path=path,
            suggestions=[
                "Check directory permissions",
                "Verify the directory is not read-only",
            ],
        )


class NotFoundError(AppError):
    """The target file does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, detail: str | None = None, path: str | None = None) -> None:
        super().__init__(detail, path=path)


class ParseError(AppError):
    """Persisted JSON could not be decoded or has the wrong shape."""

    kind = ErrorKind.PARSE

    def __init__(self, detail: str | None = None, path: str | None = None) -> None:
        super().__init__(
            detail,
            path=path,
            suggestions=["Fix or delete the file; defaults will be recreated"],
        )


class EngineError(AppError):
    """The external search engine reported a failure."""

    kind = ErrorKind.ENGINE

    def __init__(self, detail: str | None = None, context: dict[str, Any] | None = None) -> None:
        super().__init__(detail)
        self.context: dict[str, Any] = context or {}


_KIND_TO_CLASS: dict[ErrorKind, type[AppError]] = {
    ErrorKind.PATH_RESOLUTION: PathResolutionError,
    ErrorKind.PERMISSION_DENIED: PermissionDeniedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.PARSE: ParseError,
}


def classify_exception(
    exception: BaseException,
    default: ErrorKind = ErrorKind.PATH_RESOLUTION,
    path: str | None = None,
) -> AppError:
    """
    Map an arbitrary exception onto the closed error set.

    ``AppError`` instances are returned unchanged. Builtin filesystem and
    decoding errors are mapped by type; anything else gets ``default``.

    Args:
        exception: The exception to classify
        default: Kind used when the type says nothing more specific
        path: Path the failing operation was working on, if known

    Returns:
        An ``AppError`` whose ``detail`` is the original message (or None
        when the original carried no text)
    """
    if isinstance(exception, AppError):
        return exception

    detail = str(exception) or None

    if isinstance(exception, FileNotFoundError):
        kind = ErrorKind.NOT_FOUND
    elif isinstance(exception, BuiltinPermissionError):
        kind = ErrorKind.PERMISSION_DENIED
    elif isinstance(exception, (json.JSONDecodeError, UnicodeDecodeError)):
        kind = ErrorKind.PARSE
    elif isinstance(exception, (NotADirectoryError, IsADirectoryError, FileExistsError)):
        kind = ErrorKind.PATH_RESOLUTION
    elif default is ErrorKind.ENGINE:
        return EngineError(detail)
    else:
        kind = default

    error = _KIND_TO_CLASS[kind](detail, path=path)
    error.__cause__ = exception
    return error


def handle_storage_error(
    exception: BaseException,
    operation: str,
    path: str | None = None,
    logger: Any | None = None,
    default: ErrorKind = ErrorKind.PATH_RESOLUTION,
) -> AppError:
    """
    Classify a storage failure and log it.

    Args:
        exception: The exception that occurred
        operation: Operation being performed (e.g. "load history")
        path: File or directory involved
        logger: Optional ``AppLogger`` to report through
        default: Kind used when the exception type is not specific

    Returns:
        The classified error, for callers that want to inspect its kind
    """
    error = classify_exception(exception, default=default, path=path)
    if logger:
        logger.log_storage_error(operation, error, path=path)
    return error
