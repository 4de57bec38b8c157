"""
Command-line interface for rgdesk.

This module provides the CLI commands for driving rgdesk from a terminal. Each
command opens an ``AppContext`` on the configured directory, runs the
startup sequence, performs its work and flushes pending history writes on
exit.

Main Commands:
    search: Run a search and print the matches
    history: Show, filter, clean up or clear the search history
    history-path: Move the history file or revert to the default location
    config: Show or update the persisted configuration
    preview: Print a file the way the preview pane shows it

Example Usage:
    Case-insensitive literal search:
        $ rgdesk search "todo" --path ~/src -i

    Regex search restricted to Python files, as JSON:
        $ rgdesk search "def \\w+_handler" --regex --type py --format json

    History:
        $ rgdesk history --limit 10
        $ rgdesk history --stats

For more information, run: rgdesk --help
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
import orjson

from .. import __version__
from ..core.api import AppContext
from ..core.types import SearchOptions
from ..utils.formatter import OutputFormat, format_result, render_history_table, render_stats
from ..utils.logging_config import LogFormat, LogLevel, configure_logging


def _open_app(ctx: click.Context) -> AppContext:
    """Build and start the application context on first use."""
    obj: dict[str, Any] = ctx.ensure_object(dict)
    app = obj.get("app")
    if app is None:
        app = AppContext(
            fs=obj.get("fs"),
            engine=obj.get("engine"),
            environment=obj.get("environment"),
            config_dir=obj.get("config_dir"),
        )
        app.startup()
        obj["app"] = app

        def close() -> None:
            obj.pop("app", None)
            app.close()

        ctx.call_on_close(close)
    return app


@click.group()
@click.version_option(version=__version__, prog_name="rgdesk")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    envvar="RGDESK_CONFIG_DIR",
    help="Directory holding config.json and the default history file",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--log-level",
    type=click.Choice([lvl.value for lvl in LogLevel]),
    default=LogLevel.WARNING.value,
    help="Log level",
)
@click.option("--log-file", help="Log file path")
@click.option(
    "--log-format",
    type=click.Choice([fmt.value for fmt in LogFormat]),
    default=LogFormat.SIMPLE.value,
    help="Log format",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_dir: str | None,
    debug: bool,
    log_level: str,
    log_file: str | None,
    log_format: str,
) -> None:
    """rgdesk - ripgrep searches with persisted configuration and history"""
    if debug:
        log_level = LogLevel.DEBUG.value

    try:
        configure_logging(
            level=LogLevel(log_level),
            format_type=LogFormat(log_format),
            log_file=Path(log_file) if log_file else None,
            enable_file=bool(log_file),
            enable_console=True,
        )
    except (OSError, ValueError) as e:
        click.echo(f"Error configuring logging: {e}", err=True)
        sys.exit(1)

    obj = ctx.ensure_object(dict)
    if config_dir:
        obj["config_dir"] = config_dir


@cli.command("search")
@click.argument("pattern")
@click.option("--path", help="Directory or file to search (default: configured search path)")
@click.option("-i", "--ignore-case", "case_insensitive", is_flag=True, help="Case-insensitive match")
@click.option("-w", "--word", "whole_word", is_flag=True, help="Only match whole words")
@click.option("--regex", is_flag=True, help="Treat PATTERN as a regular expression")
@click.option("--hidden", is_flag=True, help="Also search hidden files and directories")
@click.option("--max-depth", type=click.IntRange(min=0), default=0, help="Maximum depth, 0 = unlimited")
@click.option("--type", "include_types", multiple=True, help="Only search files of this type")
@click.option("--type-not", "exclude_types", multiple=True, help="Do not search files of this type")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format",
)
@click.option("--filter", "filter_text", help="Only show matches whose file or line contains TEXT")
@click.pass_context
def search_cmd(
    ctx: click.Context,
    pattern: str,
    path: str | None,
    case_insensitive: bool,
    whole_word: bool,
    regex: bool,
    hidden: bool,
    max_depth: int,
    include_types: tuple[str, ...],
    exclude_types: tuple[str, ...],
    fmt: str,
    filter_text: str | None,
) -> None:
    """Search PATTERN with ripgrep and record the search in history."""
    app = _open_app(ctx)
    options = SearchOptions(
        case_insensitive=case_insensitive,
        whole_word=whole_word,
        regex=regex,
        ignore_hidden=not hidden,
        include_types=include_types,
        exclude_types=exclude_types,
        max_depth=max_depth,
    )
    search_path = path or app.session.path or "."
    session = app.search(pattern, path=search_path, options=options)

    if session.error:
        click.echo(session.error, err=True)
        sys.exit(1)

    results = session.filter_results(filter_text or "")
    output = format_result(results, OutputFormat(fmt))
    if output:
        click.echo(output)


@cli.command("history")
@click.option("--limit", type=click.IntRange(min=1), default=20, help="Number of entries to show")
@click.option("--pattern", help="Only show entries whose pattern contains TEXT")
@click.option("--clear", is_flag=True, help="Remove every history entry")
@click.option("--cleanup", is_flag=True, help="Drop expired entries now")
@click.option("--stats", is_flag=True, help="Show history statistics")
@click.pass_context
def history_cmd(
    ctx: click.Context,
    limit: int,
    pattern: str | None,
    clear: bool,
    cleanup: bool,
    stats: bool,
) -> None:
    """Show and maintain the search history."""
    app = _open_app(ctx)
    ledger = app.ledger

    if clear:
        ledger.clear()
        if not ledger.flush():
            click.echo("Failed to clear history", err=True)
            sys.exit(1)
        click.echo("History cleared")
        return

    if cleanup:
        removed = ledger.cleanup()
        click.echo(f"Removed {removed} expired entries, {len(ledger)} remain")
        return

    if stats:
        render_stats(ledger.get_stats())
        return

    if pattern:
        entries = ledger.search_history(pattern, limit)
    else:
        entries = ledger.get_history(limit)

    if not entries:
        click.echo("No search history found.")
        return
    render_history_table(entries)


@cli.command("history-path")
@click.argument("path", required=False)
@click.pass_context
def history_path_cmd(ctx: click.Context, path: str | None) -> None:
    """Store history under PATH, or in the default location when omitted."""
    app = _open_app(ctx)
    result = app.set_history_path(path)
    click.echo(result.message, err=not result.success)
    if not result.success:
        sys.exit(1)


@cli.group("config")
def config_group() -> None:
    """Show or update the persisted configuration."""


@config_group.command("show")
@click.pass_context
def config_show_cmd(ctx: click.Context) -> None:
    """Print the configuration as JSON."""
    app = _open_app(ctx)
    click.echo(orjson.dumps(app.config.to_dict(), option=orjson.OPT_INDENT_2).decode("utf-8"))


@config_group.command("set-default-path")
@click.argument("path")
@click.pass_context
def config_set_default_path_cmd(ctx: click.Context, path: str) -> None:
    """Set the directory searches start in."""
    app = _open_app(ctx)
    if not app.config_store.update_default_search_path(path):
        click.echo("Failed to save configuration", err=True)
        sys.exit(1)
    click.echo(f"Default search path set to {path}")


@config_group.command("set-user")
@click.option("--dark", is_flag=True, help="Use the dark color scheme")
@click.option("--light", is_flag=True, help="Use the light color scheme")
@click.option("--language", help="Interface language, e.g. en-US")
@click.pass_context
def config_set_user_cmd(ctx: click.Context, dark: bool, light: bool, language: str | None) -> None:
    """Update user preferences."""
    if dark and light:
        click.echo("--dark and --light cannot be used together", err=True)
        sys.exit(1)
    dark_mode = True if dark else False if light else None
    if dark_mode is None and language is None:
        click.echo("Nothing to update; pass --dark, --light or --language", err=True)
        sys.exit(1)
    app = _open_app(ctx)
    if not app.config_store.update_user_config(dark_mode=dark_mode, language=language):
        click.echo("Failed to save configuration", err=True)
        sys.exit(1)
    user = app.config.user_config
    click.echo(f"darkMode={str(user.dark_mode).lower()} language={user.language}")


@cli.command("preview")
@click.argument("file")
@click.pass_context
def preview_cmd(ctx: click.Context, file: str) -> None:
    """Print FILE, or the reason it cannot be shown."""
    app = _open_app(ctx)
    click.echo(app.preview.load_file_content(file))


def main() -> None:
    cli(prog_name="rgdesk")


if __name__ == "__main__":
    main()
