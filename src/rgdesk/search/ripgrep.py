"""
Ripgrep-backed search engine.

The matching itself is done by the ``rg`` executable; this module only
builds the command line, runs it, and turns its ``--json`` event stream into
``RawMatch`` records (one per submatch, like ``--vimgrep`` would print).

Exit status handling follows ripgrep: status 1 with nothing on stderr means
"no matches" and yields an empty list; any other failure raises
``EngineError`` with ripgrep's own message.
"""

from __future__ import annotations

import base64
import subprocess
from typing import Any, Protocol

import orjson

from ..core.types import RawMatch, SearchRequest
from ..utils.error_handling import EngineError

MAX_RESULTS = 10_000


class SearchEngine(Protocol):
    """Anything that can answer a ``SearchRequest``."""

    def search(self, request: SearchRequest) -> list[RawMatch]: ...


def _text(field: dict[str, Any] | None) -> str:
    """Decode a ripgrep ``{"text": ...}`` / ``{"bytes": ...}`` field."""
    if not field:
        return ""
    if "text" in field:
        return str(field["text"])
    return base64.b64decode(field.get("bytes", "")).decode("utf-8", errors="replace")


class RipgrepEngine:
    """
    Run searches through ripgrep.

    Args:
        executable: Name or path of the ``rg`` binary
        max_results: Stop collecting after this many matches
        timeout: Seconds to wait for ripgrep, None for no limit
    """

    def __init__(
        self,
        executable: str = "rg",
        max_results: int = MAX_RESULTS,
        timeout: float | None = None,
    ) -> None:
        self.executable = executable
        self.max_results = max_results
        self.timeout = timeout

    def build_command(self, request: SearchRequest) -> list[str]:
        cmd = [self.executable, "--json"]
        if request.case_insensitive:
            cmd.append("-i")
        if request.whole_word:
            cmd.append("-w")
        if not request.regex:
            cmd.append("-F")
        if not request.ignore_hidden:
            cmd.append("--hidden")
        if request.max_depth > 0:
            cmd.append(f"--max-depth={request.max_depth}")
        for file_type in request.include_types:
            cmd.extend(["-t", file_type])
        for file_type in request.exclude_types:
            cmd.extend(["-T", file_type])
        cmd.extend(["-e", request.pattern, "--", request.path])
        return cmd

    def parse_output(self, stdout: str) -> list[RawMatch]:
        """Turn ripgrep's JSON lines into match records, capped at ``max_results``."""
        results: list[RawMatch] = []
        for line in stdout.splitlines():
            if not line.strip():
                continue
            try:
                event = orjson.loads(line)
            except orjson.JSONDecodeError:
                continue
            if event.get("type") != "match":
                continue

            data = event.get("data", {})
            file = _text(data.get("path"))
            line_number = data.get("line_number") or 0
            content = _text(data.get("lines")).rstrip("\r\n")

            for submatch in data.get("submatches", []):
                if len(results) >= self.max_results:
                    return results
                results.append(
                    RawMatch(
                        file=file,
                        line=line_number,
                        column=submatch.get("start", 0) + 1,
                        content=content,
                        match_text=_text(submatch.get("match")),
                    )
                )
        return results

    def search(self, request: SearchRequest) -> list[RawMatch]:
        """
        Run one search.

        Raises:
            EngineError: If ripgrep cannot be started, times out, or reports
                an error
        """
        cmd = self.build_command(request)
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise EngineError(
                f"ripgrep executable not found: {self.executable}", context={"command": cmd}
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise EngineError(
                f"ripgrep timed out after {self.timeout}s", context={"command": cmd}
            ) from exc
        except OSError as exc:
            raise EngineError(f"failed to run ripgrep: {exc}", context={"command": cmd}) from exc

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            if stderr:
                raise EngineError(stderr, context={"returncode": completed.returncode})
            return []

        return self.parse_output(completed.stdout or "")
