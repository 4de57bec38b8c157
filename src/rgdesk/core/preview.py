"""
File preview loading.

Reads a file for display next to the search results. A failed read is not
an exception for the caller: the returned text is a readable explanation
chosen by the kind of failure.
"""

from __future__ import annotations

from ..storage.filesystem import FileSystem
from ..utils.error_handling import ErrorKind, classify_exception
from ..utils.logging_config import get_logger

PERMISSION_DENIED_MESSAGE = (
    "Permission denied: Cannot access this file. Please check the application permissions."
)
NOT_FOUND_MESSAGE = "File not found: The specified file does not exist."
READ_ERROR_PREFIX = "Error reading file: "
UNEXPECTED_ERROR_MESSAGE = f"{READ_ERROR_PREFIX}An unexpected error occurred."


class FilePreviewLoader:
    """Loads file text for the preview pane and tracks the loading flag."""

    def __init__(self, fs: FileSystem) -> None:
        self.fs = fs
        self.content = ""
        self.is_loading = False
        self.logger = get_logger()

    def load_file_content(self, path: str) -> str:
        """Return the text of ``path``, or a message describing why it could not be read."""
        self.is_loading = True
        try:
            self.content = self.fs.read_text(path)
        except Exception as exc:
            error = classify_exception(exc, path=path)
            self.logger.warning(f"Error reading file {path}: {error}", error_kind=error.kind.value)
            if error.kind is ErrorKind.PERMISSION_DENIED:
                self.content = PERMISSION_DENIED_MESSAGE
            elif error.kind is ErrorKind.NOT_FOUND:
                self.content = NOT_FOUND_MESSAGE
            elif error.detail:
                self.content = f"{READ_ERROR_PREFIX}{error.detail}"
            else:
                self.content = UNEXPECTED_ERROR_MESSAGE
        finally:
            self.is_loading = False
        return self.content
