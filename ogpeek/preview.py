"""Preview orchestration — fetch, extract, then show or copy the image.

The image step is an explicit fallback chain. Every edge produces a
tagged :class:`ImageOutcome` instead of an exception:

- inline requested, terminal supported, render ok → ``rendered`` + copy
- inline requested, render raised ``non_interactive`` → copy
- inline requested, any other render error → copy
- inline requested, terminal unsupported → copy
- inline not requested → copy

A clipboard failure is recorded on the outcome and never aborts the run.
Only :class:`~ogpeek.errors.FetchError` propagates to the caller.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import StrEnum

import httpx
import structlog

from ogpeek.clipboard import copy_to_clipboard
from ogpeek.config import Config
from ogpeek.errors import ClipboardError, RenderError, RenderErrorKind
from ogpeek.extractor import OpenGraphData, extract_metadata
from ogpeek.fetcher import FetchResult, fetch_html
from ogpeek.terminal import KittyRenderer
from ogpeek.types import ClipboardWriter, ImageRenderer
from ogpeek.urls import resolve_image_url

logger = structlog.get_logger()


class RenderStatus(StrEnum):
    """Result of an inline image display attempt."""

    RENDERED = "rendered"
    CLIPBOARD_FALLBACK = "clipboard_fallback"
    FAILED = "failed"


class FallbackReason(StrEnum):
    """Why the image ended up on the clipboard instead of the screen."""

    NONE = "none"
    NOT_REQUESTED = "not_requested"
    UNSUPPORTED_TERMINAL = "unsupported_terminal"
    NON_INTERACTIVE = "non_interactive"
    RENDER_ERROR = "render_error"


@dataclass(frozen=True)
class PreviewRequest:
    """What the user asked for."""

    inline: bool = False
    image_only: bool = False
    show_timing: bool = False


@dataclass(frozen=True)
class RenderOutcome:
    """Tagged result of one render attempt."""

    status: RenderStatus
    elapsed_ms: float = 0.0
    error: str | None = None
    error_kind: RenderErrorKind | None = None


@dataclass(frozen=True)
class ImageOutcome:
    """Everything that happened to the resolved image URL."""

    image_url: str
    reason: FallbackReason
    render: RenderOutcome | None = None
    copied: bool = False
    clipboard_ms: float | None = None
    clipboard_error: str | None = None


@dataclass(frozen=True)
class TimingReport:
    """Step durations in milliseconds; ``None`` means the step did not run."""

    fetch_ms: float | None = None
    extract_ms: float | None = None
    render_ms: float | None = None
    clipboard_ms: float | None = None
    total_ms: float | None = None

    def to_dict(self) -> dict[str, float]:
        values = {
            "fetch_ms": self.fetch_ms,
            "extract_ms": self.extract_ms,
            "render_ms": self.render_ms,
            "clipboard_ms": self.clipboard_ms,
            "total_ms": self.total_ms,
        }
        return {k: round(v, 2) for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class PreviewResult:
    """Outcome of a whole preview run."""

    url: str
    request: PreviewRequest
    metadata: OpenGraphData
    fetch: FetchResult
    image_url: str | None = None
    image_warning: str | None = None
    image: ImageOutcome | None = None
    timing: TimingReport | None = None

    @property
    def has_metadata(self) -> bool:
        return not self.metadata.is_empty


def _copy(
    image_url: str,
    copier: ClipboardWriter,
    reason: FallbackReason,
    render: RenderOutcome | None = None,
) -> ImageOutcome:
    """Copy *image_url*; a failed write is recorded, not raised."""
    try:
        elapsed = copier(image_url)
    except ClipboardError as exc:
        return ImageOutcome(
            image_url=image_url,
            reason=reason,
            render=render,
            copied=False,
            clipboard_error=str(exc),
        )
    return ImageOutcome(
        image_url=image_url,
        reason=reason,
        render=render,
        copied=True,
        clipboard_ms=elapsed,
    )


def handle_image(
    image_url: str,
    *,
    inline: bool,
    renderer: ImageRenderer,
    copier: ClipboardWriter = copy_to_clipboard,
) -> ImageOutcome:
    """Run the render → clipboard fallback chain for a resolved image URL."""
    if not inline:
        return _copy(image_url, copier, FallbackReason.NOT_REQUESTED)

    if not renderer.is_supported():
        logger.debug("render_unsupported_terminal")
        return _copy(image_url, copier, FallbackReason.UNSUPPORTED_TERMINAL)

    render_start = time.monotonic()
    try:
        render_ms = renderer.render(image_url)
    except RenderError as exc:
        failed_ms = (time.monotonic() - render_start) * 1000
        reason = (
            FallbackReason.NON_INTERACTIVE
            if exc.kind is RenderErrorKind.NON_INTERACTIVE
            else FallbackReason.RENDER_ERROR
        )
        logger.info("render_fallback", kind=exc.kind.value, reason=reason.value)
        outcome = _copy(
            image_url,
            copier,
            reason,
            RenderOutcome(
                status=RenderStatus.CLIPBOARD_FALLBACK,
                elapsed_ms=failed_ms,
                error=str(exc),
                error_kind=exc.kind,
            ),
        )
        if not outcome.copied:
            # Neither the render nor the fallback worked
            return ImageOutcome(
                image_url=outcome.image_url,
                reason=outcome.reason,
                render=RenderOutcome(
                    status=RenderStatus.FAILED,
                    elapsed_ms=failed_ms,
                    error=str(exc),
                    error_kind=exc.kind,
                ),
                copied=False,
                clipboard_error=outcome.clipboard_error,
            )
        return outcome

    return _copy(
        image_url,
        copier,
        FallbackReason.NONE,
        RenderOutcome(status=RenderStatus.RENDERED, elapsed_ms=render_ms),
    )


def run_preview(
    url: str,
    request: PreviewRequest,
    *,
    config: Config | None = None,
    client: httpx.Client | None = None,
    renderer: ImageRenderer | None = None,
    copier: ClipboardWriter = copy_to_clipboard,
) -> PreviewResult:
    """Fetch *url*, extract its metadata and handle its preview image.

    Args:
        url: Validated page URL.
        request: Flags for inline rendering, image-only and timing.
        config: Loaded configuration. Defaults to :class:`Config`.
        client: Optional HTTP client (tests inject a mock transport).
        renderer: Inline image renderer. Defaults to :class:`KittyRenderer`.
        copier: Clipboard writer.

    Returns:
        PreviewResult describing every step that ran.

    Raises:
        FetchError: If the page cannot be fetched.
    """
    cfg = config or Config()
    start = time.monotonic()

    fetched = fetch_html(url, config=cfg.fetch, client=client)

    extract_start = time.monotonic()
    metadata = extract_metadata(fetched.html)
    extract_ms = (time.monotonic() - extract_start) * 1000

    image_url: str | None = None
    image_warning: str | None = None
    image: ImageOutcome | None = None

    if metadata.image:
        image_url = resolve_image_url(metadata.image, url)
        if image_url is None:
            image_warning = f"Could not resolve image URL: {metadata.image}"
            logger.warning("image_url_unresolved", image=metadata.image, page=url)

    if image_url is not None:
        image = handle_image(
            image_url,
            inline=request.inline,
            renderer=renderer or KittyRenderer(cfg.render),
            copier=copier,
        )

    timing: TimingReport | None = None
    if request.show_timing:
        timing = TimingReport(
            fetch_ms=fetched.elapsed_ms,
            extract_ms=extract_ms,
            render_ms=(
                image.render.elapsed_ms
                if image is not None and image.render is not None
                else None
            ),
            clipboard_ms=image.clipboard_ms if image is not None else None,
            total_ms=(time.monotonic() - start) * 1000,
        )

    logger.debug(
        "preview_complete",
        url=url,
        keys=len(metadata),
        image=image.reason.value if image is not None else None,
    )
    return PreviewResult(
        url=url,
        request=request,
        metadata=metadata,
        fetch=fetched,
        image_url=image_url,
        image_warning=image_warning,
        image=image,
        timing=timing,
    )
