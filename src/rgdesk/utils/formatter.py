"""
Output formatting module for rgdesk.

Renders search results, history entries and statistics for the command line.
Results can be printed as plain text (one ``file:line:column:content`` line
per match, like ``rg --vimgrep``) or as JSON; history is shown as a ``rich``
table.

Key Functions:
    format_result: Format search results in the requested output format
    to_json_bytes: Fast JSON serialization using orjson
    format_text: Plain text formatting
    render_history_table: Rich table of history entries
    render_stats: Rich summary of history statistics

Example:
    >>> from rgdesk.utils.formatter import OutputFormat, format_result
    >>>
    >>> print(format_result(session.results, OutputFormat.JSON))
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from enum import Enum
from typing import Any

import orjson
from rich.console import Console
from rich.table import Table

from ..core.types import SearchHistoryEntry, SearchResult


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


def format_timestamp(timestamp_ms: int) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(timestamp_ms / 1000))


def to_json_bytes(results: Sequence[SearchResult]) -> bytes:
    """
    Convert search results to JSON bytes using orjson.

    Args:
        results: Normalized search results

    Returns:
        JSON-encoded bytes with pretty formatting (indented)
    """
    payload = {
        "items": [
            {
                "file": r.file,
                "line": r.line,
                "column": r.column,
                "content": r.content,
                "match": r.match,
            }
            for r in results
        ],
        "count": len(results),
    }
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)


def format_text(results: Sequence[SearchResult]) -> str:
    """Format results as ``file:line:column:content`` lines."""
    return "\n".join(f"{r.file}:{r.line}:{r.column}:{r.content}" for r in results)


def format_result(results: Sequence[SearchResult], fmt: OutputFormat) -> str:
    """Format search results according to the specified output format."""
    if fmt == OutputFormat.JSON:
        return to_json_bytes(results).decode("utf-8")
    return format_text(results)


def _describe_options(entry: SearchHistoryEntry) -> str:
    opts = entry.options
    flags = []
    if opts.case_insensitive:
        flags.append("-i")
    if opts.whole_word:
        flags.append("-w")
    if opts.regex:
        flags.append("regex")
    if not opts.ignore_hidden:
        flags.append("hidden")
    if opts.max_depth:
        flags.append(f"depth={opts.max_depth}")
    flags.extend(f"+{t}" for t in opts.include_types)
    flags.extend(f"-{t}" for t in opts.exclude_types)
    return " ".join(flags)


def render_history_table(
    entries: Sequence[SearchHistoryEntry], console: Console | None = None
) -> None:
    """Print history entries, most recent first, as a rich table."""
    if console is None:
        console = Console()
    table = Table(title="Search History")
    table.add_column("When", style="dim", no_wrap=True)
    table.add_column("Pattern", style="bold")
    table.add_column("Path")
    table.add_column("Options", style="cyan")
    for entry in entries:
        table.add_row(
            format_timestamp(entry.timestamp), entry.pattern, entry.path, _describe_options(entry)
        )
    console.print(table)


def render_stats(stats: dict[str, Any], console: Console | None = None) -> None:
    """Print the summary returned by ``HistoryLedger.get_stats``."""
    if console is None:
        console = Console()
    console.print("[bold]Search History Statistics[/bold]")
    console.print(f"Total searches: {stats['total_searches']}")
    console.print(f"Unique patterns: {stats['unique_patterns']}")
    console.print(f"Unique paths: {stats['unique_paths']}")
    date_range = stats.get("date_range")
    if date_range:
        console.print(
            f"Date range: {format_timestamp(date_range['earliest'])}"
            f" - {format_timestamp(date_range['latest'])}"
        )
