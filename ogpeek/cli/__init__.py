"""ogpeek CLI — Click command and logging setup.

- ``preview`` — the ``ogpeek URL`` command itself (fetch, extract,
  render or copy the image, report)
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "warning") -> None:
    """Configure structlog to write to stderr, filtered at *level*.

    stdout is reserved for the preview itself so it can be piped.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        # Resolve sys.stderr per logger so redirected streams are honoured
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )


# Configure structlog once at CLI entry
configure_logging()

from ogpeek.cli.preview import preview  # noqa: E402

cli = preview

__all__ = ["cli", "configure_logging", "preview"]
