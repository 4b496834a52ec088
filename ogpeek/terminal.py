"""Inline image rendering through the kitty graphics protocol.

Images are drawn by kitty's ``icat`` kitten, run as a subprocess with
an argument list (never a shell string) so an attacker-controlled
``og:image`` value cannot inject commands.
"""

from __future__ import annotations

import os
import subprocess
import sys
import time
from collections.abc import Mapping
from typing import TextIO

import structlog

from ogpeek.config import RenderConfig
from ogpeek.errors import RenderError, RenderErrorKind

logger = structlog.get_logger()

# stderr fragments icat prints when it cannot reach a controlling terminal
_NON_INTERACTIVE_MARKERS: tuple[str, ...] = (
    "controlling terminal",
    "/dev/tty",
    "no such device",
    "not a tty",
)


def is_kitty_terminal(environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` if the environment identifies a kitty terminal."""
    env = os.environ if environ is None else environ
    return env.get("TERM") == "xterm-kitty" or bool(env.get("KITTY_WINDOW_ID"))


class KittyRenderer:
    """Draw remote images inline with ``kitty +kitten icat``.

    Usage:
        renderer = KittyRenderer(config.render)
        if renderer.is_supported():
            elapsed_ms = renderer.render("https://example.com/og.png")
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        *,
        stream: TextIO | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config or RenderConfig()
        self._stream = stream
        self._environ = environ

    def build_command(self, image_url: str) -> list[str]:
        """Return the argument list used to draw *image_url*."""
        cmd = [self._config.helper, "+kitten", "icat", "--align", self._config.align]
        if self._config.scale_up:
            cmd.append("--scale-up")
        cmd.append(image_url)
        return cmd

    def is_supported(self) -> bool:
        """Output is an interactive terminal AND the terminal is kitty."""
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            interactive = stream.isatty()
        except (AttributeError, ValueError):
            # Closed or replaced streams behave as non-interactive
            interactive = False
        if not interactive:
            return False
        return is_kitty_terminal(self._environ)

    def render(self, image_url: str) -> float:
        """Draw *image_url* in the terminal.

        Returns:
            Elapsed milliseconds.

        Raises:
            RenderError: ``binary_not_found`` when the helper is not on
                PATH, ``non_interactive`` when it cannot attach to a
                terminal, ``render_failed`` otherwise.
        """
        cmd = self.build_command(image_url)
        start = time.monotonic()
        logger.debug("render_start", helper=self._config.helper, url=image_url)
        try:
            # stdin/stdout stay on the terminal; stderr is captured so the
            # failure can be classified.
            result = subprocess.run(
                cmd,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self._config.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            logger.info("render_binary_not_found", helper=self._config.helper)
            raise RenderError(
                f"{self._config.helper} binary not found in PATH",
                kind=RenderErrorKind.BINARY_NOT_FOUND,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            logger.warning("render_timeout", timeout=self._config.timeout)
            raise RenderError(
                f"Failed to render image with {self._config.helper}: "
                f"timed out after {self._config.timeout:g}s",
                kind=RenderErrorKind.RENDER_FAILED,
            ) from exc
        except OSError as exc:
            logger.warning("render_os_error", error=str(exc))
            raise RenderError(
                f"Failed to render image with {self._config.helper}: {exc}",
                kind=RenderErrorKind.RENDER_FAILED,
            ) from exc

        stderr = (result.stderr or "").strip()
        if result.returncode != 0:
            lowered = stderr.lower()
            if any(marker in lowered for marker in _NON_INTERACTIVE_MARKERS):
                logger.info("render_non_interactive", returncode=result.returncode)
                raise RenderError(
                    "Kitty image display requires an interactive terminal",
                    kind=RenderErrorKind.NON_INTERACTIVE,
                )
            if stderr:
                sys.stderr.write(stderr + "\n")
            logger.warning(
                "render_failed",
                returncode=result.returncode,
                stderr=stderr[:200],
            )
            detail = (
                stderr.splitlines()[-1]
                if stderr
                else f"exit code {result.returncode}"
            )
            raise RenderError(
                f"Failed to render image with {self._config.helper}: {detail}",
                kind=RenderErrorKind.RENDER_FAILED,
            )

        if stderr:
            sys.stderr.write(stderr + "\n")
        # Newline after the image so following output starts below it
        sys.stdout.write("\n")
        sys.stdout.flush()

        elapsed = (time.monotonic() - start) * 1000
        logger.debug("render_complete", elapsed_ms=round(elapsed, 1))
        return elapsed
