"""Tests for rgdesk.core.preview module."""

from __future__ import annotations

from rgdesk.core.preview import (
    NOT_FOUND_MESSAGE,
    PERMISSION_DENIED_MESSAGE,
    READ_ERROR_PREFIX,
    UNEXPECTED_ERROR_MESSAGE,
    FilePreviewLoader,
)
from rgdesk.storage.filesystem import LocalFileSystem
from rgdesk.utils.error_handling import ParseError


class TestFilePreviewLoader:
    """Tests for FilePreviewLoader.load_file_content."""

    def test_reads_file(self, memory_fs):
        memory_fs.files["/home/user/a.txt"] = "hello\nworld\n"
        loader = FilePreviewLoader(memory_fs)
        assert loader.load_file_content("/home/user/a.txt") == "hello\nworld\n"
        assert loader.content == "hello\nworld\n"
        assert loader.is_loading is False

    def test_not_found(self, memory_fs):
        loader = FilePreviewLoader(memory_fs)
        assert loader.load_file_content("/home/user/missing.txt") == NOT_FOUND_MESSAGE

    def test_permission_denied(self, memory_fs):
        memory_fs.files["/secret"] = "x"
        memory_fs.fail("read", "/secret", PermissionError("Permission denied"))
        loader = FilePreviewLoader(memory_fs)
        assert loader.load_file_content("/secret") == PERMISSION_DENIED_MESSAGE

    def test_other_error_carries_detail(self, memory_fs):
        memory_fs.fail("read", "/bin.dat", ParseError("invalid utf-8"))
        loader = FilePreviewLoader(memory_fs)
        assert loader.load_file_content("/bin.dat") == f"{READ_ERROR_PREFIX}invalid utf-8"

    def test_error_without_detail(self, memory_fs):
        memory_fs.fail("read", "/odd", OSError())
        loader = FilePreviewLoader(memory_fs)
        assert loader.load_file_content("/odd") == UNEXPECTED_ERROR_MESSAGE
        assert loader.is_loading is False

    def test_local_filesystem(self, tmp_path):
        target = tmp_path / "note.md"
        target.write_text("# Note\n", encoding="utf-8")
        loader = FilePreviewLoader(LocalFileSystem())
        assert loader.load_file_content(str(target)) == "# Note\n"
        assert loader.load_file_content(str(tmp_path / "nope.md")) == NOT_FOUND_MESSAGE
