"""
Shared test fixtures and utilities for rgdesk tests.

This module provides an in-memory filesystem with failure injection, a
scripted search engine and a controllable clock so that the core components
can be exercised without touching the real disk or running ``rg``.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterator

import pytest

from rgdesk.core.config import Environment
from rgdesk.core.history import HistoryLedger
from rgdesk.core.types import RawMatch, SearchRequest

HOME = "/home/user"
APP_DIR = "/home/user/.config/rgdesk"


class MemoryFileSystem:
    """
    In-memory ``FileSystem`` for tests.

    Failures are injected per operation and path prefix with ``fail``; the
    matching operation then raises the given exception instead of running.
    """

    def __init__(self, home: str | None = HOME) -> None:
        self.home = home
        self.files: dict[str, str] = {}
        self.dirs: set[str] = {"/"}
        self.failures: list[tuple[str, str, BaseException]] = []
        self.writes: list[str] = []
        self.removed: list[str] = []
        if home:
            self.make_dirs(home)

    def fail(self, operation: str, prefix: str, exc: BaseException) -> None:
        self.failures.append((operation, prefix, exc))

    def _check(self, operation: str, path: str) -> None:
        for op, prefix, exc in self.failures:
            if op == operation and path.startswith(prefix):
                raise exc

    def read_text(self, path: str) -> str:
        self._check("read", path)
        if path in self.dirs:
            raise IsADirectoryError(f"Is a directory: '{path}'")
        if path not in self.files:
            raise FileNotFoundError(f"No such file or directory: '{path}'")
        return self.files[path]

    def write_text(self, path: str, content: str) -> None:
        self._check("write", path)
        parent = posixpath.dirname(path)
        if parent and parent not in self.dirs:
            raise FileNotFoundError(f"No such file or directory: '{path}'")
        self.files[path] = content
        self.writes.append(path)

    def exists(self, path: str) -> bool:
        self._check("exists", path)
        return path in self.files or path in self.dirs

    def make_dirs(self, path: str) -> None:
        self._check("mkdir", path)
        current = path
        while current and current not in self.dirs:
            self.dirs.add(current)
            current = posixpath.dirname(current)

    def remove(self, path: str) -> None:
        self._check("remove", path)
        self.files.pop(path, None)
        self.removed.append(path)

    def join(self, *segments: str) -> str:
        if not segments:
            raise ValueError("nothing to join")
        return posixpath.join(*segments)

    def home_dir(self) -> str:
        if self.home is None:
            raise RuntimeError("no home directory")
        return self.home


class ScriptedEngine:
    """Search engine returning canned matches or raising a canned error."""

    def __init__(self, matches: list[RawMatch] | None = None, error: BaseException | None = None):
        self.matches = matches or []
        self.error = error
        self.requests: list[SearchRequest] = []

    def search(self, request: SearchRequest) -> list[RawMatch]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.matches)


class FakeClock:
    """Callable clock in seconds, moved forward explicitly."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_match(file: str = "src/main.py", line: int = 3, content: str = "# TODO: fix", match: str = "TODO") -> RawMatch:
    return RawMatch(file=file, line=line, column=content.find(match) + 1, content=content, match_text=match)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep host settings out of tests."""
    monkeypatch.delenv("RGDESK_CONFIG_DIR", raising=False)
    monkeypatch.delenv("RGDESK_DARK_MODE", raising=False)


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def environment() -> Environment:
    return Environment(home_dir=HOME, prefers_dark=False, locale="en-US")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine() -> ScriptedEngine:
    return ScriptedEngine([make_match()])


@pytest.fixture
def ledger(memory_fs, clock) -> Iterator[HistoryLedger]:
    ledger = HistoryLedger(memory_fs, default_dir=lambda: APP_DIR, clock=clock)
    yield ledger
    ledger.close()


@pytest.fixture
def fs_factory():
    return MemoryFileSystem


@pytest.fixture
def engine_factory():
    return ScriptedEngine


@pytest.fixture
def match_factory():
    return make_match
