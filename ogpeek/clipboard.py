"""System clipboard writes via pyperclip."""

from __future__ import annotations

import time

import pyperclip
import structlog

from ogpeek.errors import ClipboardError

logger = structlog.get_logger()


def copy_to_clipboard(text: str) -> float:
    """Copy *text* to the system clipboard.

    Returns:
        Elapsed milliseconds.

    Raises:
        ClipboardError: If no clipboard backend is available or the
            write fails.
    """
    start = time.monotonic()
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        logger.warning("clipboard_write_failed", error=str(exc))
        raise ClipboardError(
            f"Failed to copy image URL to clipboard: {exc}"
        ) from exc
    elapsed = (time.monotonic() - start) * 1000
    logger.debug("clipboard_write", chars=len(text), elapsed_ms=round(elapsed, 1))
    return elapsed
