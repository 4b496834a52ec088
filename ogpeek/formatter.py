"""Preview output formatting — shared text and JSON renderers.

Text output is coloured with ``click.style``; ``click.echo`` strips the
ANSI codes again when stdout is not a terminal.
"""

from __future__ import annotations

import json

import click

from ogpeek.errors import OgPeekError
from ogpeek.extractor import STANDARD_KEYS, OpenGraphData
from ogpeek.preview import (
    FallbackReason,
    ImageOutcome,
    PreviewResult,
    RenderStatus,
    TimingReport,
)

_RULE = "=" * 50

# Display labels for the well-known keys, in display order
_LABELS: dict[str, str] = {
    "title": "Title",
    "description": "Description",
    "image": "Image",
    "url": "URL",
    "type": "Type",
    "siteName": "Site Name",
    "locale": "Locale",
}


def _field(label: str, value: str) -> str:
    return f"{click.style(label + ':', fg='green')} {value}"


def format_metadata(data: OpenGraphData, url: str) -> str:
    """Format extracted metadata as a coloured text block."""
    lines: list[str] = [
        "",
        click.style("OpenGraph Preview", fg="cyan", bold=True),
        click.style(_RULE, dim=True),
        "",
        f"{click.style('URL:', bold=True)} {click.style(url, fg='blue')}",
        "",
    ]

    values = data.to_dict()
    for key in STANDARD_KEYS:
        value = values.get(key)
        if value:
            lines.append(_field(_LABELS[key], value))

    other_keys = [key for key in values if key not in STANDARD_KEYS]
    if other_keys:
        lines.append("")
        lines.append(click.style("Other Properties:", fg="yellow"))
        for key in other_keys:
            lines.append(_field(key, values[key]))

    lines.append("")
    lines.append(click.style(_RULE, dim=True))
    return "\n".join(lines)


def format_image_outcome(outcome: ImageOutcome) -> list[str]:
    """Describe what happened to the image, one message per line."""
    ok = click.style("✓", fg="green")
    lines: list[str] = []
    render = outcome.render

    if render is not None and render.status is RenderStatus.RENDERED:
        if outcome.copied:
            lines.append(
                f"{ok} Image rendered ({render.elapsed_ms:.0f}ms) "
                f"and URL copied to clipboard ({outcome.clipboard_ms or 0:.0f}ms)"
            )
        else:
            lines.append(f"{ok} Image rendered ({render.elapsed_ms:.0f}ms)")
    elif outcome.reason is FallbackReason.NON_INTERACTIVE:
        lines.append(
            click.style("Note: ", fg="yellow")
            + "Image display requires an interactive terminal."
        )
    elif outcome.reason is FallbackReason.RENDER_ERROR:
        error = render.error if render is not None else "unknown error"
        lines.append(click.style("Warning: ", fg="yellow") + f"{error}")
    elif outcome.reason is FallbackReason.UNSUPPORTED_TERMINAL:
        lines.append(
            click.style("Note: ", fg="yellow")
            + "Terminal does not support inline images (kitty required)."
        )

    needs_copy_line = render is None or render.status is not RenderStatus.RENDERED
    if outcome.copied and needs_copy_line:
        lines.append(f"{ok} Image URL copied to clipboard")
    if outcome.clipboard_error:
        lines.append(format_error(outcome.clipboard_error, label="Warning"))
    return lines


def format_timing(report: TimingReport) -> str:
    """Format a performance block; steps that did not run are omitted."""
    rows = [
        ("Fetch", report.fetch_ms),
        ("Parse", report.extract_ms),
        ("Render", report.render_ms),
        ("Clipboard", report.clipboard_ms),
        ("Total", report.total_ms),
    ]
    lines = [click.style("Performance", fg="magenta", bold=True)]
    for label, value in rows:
        if value is not None:
            lines.append(f"  {label + ':':<11}{value:>9.2f} ms")
    return "\n".join(lines)


def format_result_json(result: PreviewResult) -> str:
    """Format a whole preview result as a JSON document."""
    doc: dict[str, object] = {
        "url": result.url,
        "metadata": result.metadata.to_dict(),
    }
    if result.image_url is not None:
        doc["image_url"] = result.image_url
    if result.image_warning:
        doc["warnings"] = [result.image_warning]
    if result.image is not None:
        image = result.image
        doc["image"] = {
            "action": (
                image.render.status.value
                if image.render is not None
                else ("copied" if image.copied else "failed")
            ),
            "reason": image.reason.value,
            "copied": image.copied,
            "render_error": image.render.error if image.render else None,
            "clipboard_error": image.clipboard_error,
        }
    if result.timing is not None:
        doc["timing"] = result.timing.to_dict()
    return json.dumps(doc, indent=2, ensure_ascii=False)


def format_error(message: str, *, label: str = "Error") -> str:
    """Format a one-line error or warning."""
    color = "magenta" if label == "Error" else "yellow"
    return f"{click.style(label + ':', fg=color, bold=True)} {message}"


def format_error_json(error: OgPeekError) -> str:
    """Format a structured error as a JSON document."""
    return json.dumps(error.to_dict(), indent=2, ensure_ascii=False)
