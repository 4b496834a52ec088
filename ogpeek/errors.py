"""Structured error codes and error handling.

Every failure the CLI can report carries a stable code, a category,
and a resolution hint so text and JSON output stay consistent.
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ErrorCategory(StrEnum):
    """Error category classification."""

    INPUT = "INPUT"
    NETWORK = "NETWORK"
    RENDER = "RENDER"
    CLIPBOARD = "CLIPBOARD"
    CONFIG = "CONFIG"


class OgPeekError(Exception):
    """Base class for structured ogpeek errors."""

    code: ClassVar[str] = "OGPEEK_E000"
    category: ClassVar[ErrorCategory] = ErrorCategory.INPUT
    resolution: ClassVar[str] = ""

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": self.code,
                "category": self.category.value,
                "message": self.message,
                "resolution": self.resolution,
            },
        }

    def format(self) -> str:
        return f"Error [{self.code}]: {self.message}\nResolution: {self.resolution}"


class InvalidInputError(OgPeekError):
    """Raised for a missing or malformed URL, before any network call."""

    code = "OGPEEK_E001"
    category = ErrorCategory.INPUT
    resolution = "Pass a single URL starting with http:// or https://"


class FetchError(OgPeekError):
    """Raised when the page cannot be retrieved."""

    code = "OGPEEK_E002"
    category = ErrorCategory.NETWORK
    resolution = "Check the URL and your network connection, then retry"

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.timed_out = timed_out


class RenderErrorKind(StrEnum):
    """Why an inline image render failed."""

    BINARY_NOT_FOUND = "binary_not_found"
    NON_INTERACTIVE = "non_interactive"
    RENDER_FAILED = "render_failed"


class RenderError(OgPeekError):
    """Raised by the terminal renderer; always handled by falling back."""

    code = "OGPEEK_E003"
    category = ErrorCategory.RENDER
    resolution = "Run inside an interactive kitty terminal with kitty on PATH"

    def __init__(self, message: str, *, kind: RenderErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


class ClipboardError(OgPeekError):
    """Raised when the system clipboard cannot be written."""

    code = "OGPEEK_E004"
    category = ErrorCategory.CLIPBOARD
    resolution = (
        "Install a clipboard backend (xclip, xsel or wl-clipboard on Linux)"
    )


class ConfigError(OgPeekError):
    """Raised when the config file cannot be read or parsed."""

    code = "OGPEEK_E005"
    category = ErrorCategory.CONFIG
    resolution = "Fix the TOML syntax or point --config at a readable file"
