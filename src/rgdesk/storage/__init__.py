"""
Storage primitives.

- filesystem: the ``FileSystem`` capability and its local implementation
"""

from .filesystem import FileSystem, LocalFileSystem

__all__ = [
    "FileSystem",
    "LocalFileSystem",
]
