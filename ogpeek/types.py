"""Shared Protocol types for ogpeek.

Defines the structural interfaces the preview orchestrator depends on,
so tests and alternative backends can stand in for the kitty renderer
and the system clipboard without subclassing.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# ── Image renderer protocol ─────────────────────────────────────────


@runtime_checkable
class ImageRenderer(Protocol):
    """Structural interface for inline terminal image renderers.

    :class:`ogpeek.terminal.KittyRenderer` satisfies this protocol.
    """

    def is_supported(self) -> bool:
        """Return ``True`` if the current terminal can show images."""
        ...

    def render(self, image_url: str) -> float:
        """Draw *image_url* inline and return elapsed milliseconds.

        Raises:
            ogpeek.errors.RenderError: on any failure.
        """
        ...


# ── Clipboard protocol ─────────────────────────────────────────────


class ClipboardWriter(Protocol):
    """Callable that copies text and returns elapsed milliseconds.

    Raises :class:`ogpeek.errors.ClipboardError` on failure.
    """

    def __call__(self, text: str) -> float: ...  # noqa: D102
