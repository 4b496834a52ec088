"""CLI command: ogpeek URL."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import NoReturn

import click
import structlog

from ogpeek import __version__
from ogpeek.config import load_config, resolve_config_path
from ogpeek.errors import ConfigError, FetchError, InvalidInputError, OgPeekError
from ogpeek.formatter import (
    format_error,
    format_error_json,
    format_image_outcome,
    format_metadata,
    format_result_json,
    format_timing,
)
from ogpeek.preview import PreviewRequest, run_preview
from ogpeek.urls import validate_url

logger = structlog.get_logger()

_EPILOG = """\b
Examples:
  ogpeek https://example.com
  ogpeek http://localhost:3000 --kitty
  ogpeek https://example.com --image-only --time

If an og:image is found, its absolute URL is copied to the clipboard.
"""


def _fail(
    error: OgPeekError,
    *,
    json_mode: bool,
    color: bool | None = None,
    hint: str | None = None,
) -> NoReturn:
    """Report *error* as JSON on stdout or as text on stderr, then exit 1."""
    if json_mode:
        click.echo(format_error_json(error), color=color)
    else:
        click.echo(format_error(error.message), err=True, color=color)
        click.echo(f"Resolution: {error.resolution}", err=True, color=color)
        if hint:
            click.echo(hint, err=True, color=color)
    raise SystemExit(1)


@click.command(
    epilog=_EPILOG,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("url", required=False)
@click.option(
    "--time", "-t", "show_timing", is_flag=True, help="Show step timings."
)
@click.option(
    "--kitty",
    "-k",
    "inline",
    is_flag=True,
    help="Render og:image inline (kitty terminal), then copy its URL.",
)
@click.option(
    "--image-only",
    "-i",
    is_flag=True,
    help="Skip the metadata listing; only handle the image.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.ogpeek/config.toml).",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr.")
@click.version_option(version=__version__, prog_name="ogpeek")
def preview(
    url: str | None,
    show_timing: bool,
    inline: bool,
    image_only: bool,
    as_json: bool,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Fetch and display OpenGraph metadata from a web page or local server."""
    from ogpeek.cli import configure_logging

    try:
        url = validate_url(url)
    except InvalidInputError as exc:
        _fail(exc, json_mode=as_json, hint="Run 'ogpeek --help' for usage.")

    try:
        config = load_config(config_path)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        path = resolve_config_path(config_path)
        logger.error("config_load_failed", path=str(path), error=str(exc))
        _fail(ConfigError(f"Invalid config {path}: {exc}"), json_mode=as_json)
    configure_logging("debug" if verbose else config.logging.level)

    json_mode = as_json or config.output.format == "json"
    color = None if config.output.color else False
    request = PreviewRequest(
        inline=inline, image_only=image_only, show_timing=show_timing
    )

    def echo(message: str = "", *, err: bool = False) -> None:
        click.echo(message, err=err, color=color)

    if not json_mode and not image_only:
        echo(f"\nFetching OpenGraph data from: {url}...")

    try:
        result = run_preview(url, request, config=config)
    except FetchError as exc:
        _fail(exc, json_mode=json_mode, color=color)
    except Exception as exc:  # noqa: BLE001
        logger.error("preview_failed", url=url, error=str(exc))
        echo(format_error(str(exc) or type(exc).__name__), err=True)
        raise SystemExit(1) from None

    if json_mode:
        echo(format_result_json(result))
        return

    if not result.has_metadata:
        echo(format_error("No OpenGraph metadata found on this page."))
        return

    # In image-only mode stdout carries just the image URL
    notes_to_err = image_only

    if not image_only:
        echo(format_metadata(result.metadata, url))

    if result.image_warning:
        echo(format_error(result.image_warning, label="Warning"), err=notes_to_err)

    if image_only:
        if result.image_url:
            echo(result.image_url)
        elif not result.image_warning:
            echo("No og:image found on this page.", err=True)

    if result.image is not None:
        for line in format_image_outcome(result.image):
            echo(line, err=notes_to_err)

    if result.timing is not None:
        echo(format_timing(result.timing), err=notes_to_err)
