"""URL validation and resolution.

The page URL is checked locally before any network request is made.
Localhost and private addresses are allowed on purpose: previewing a
local development server is a primary use case.
"""

from __future__ import annotations

from urllib.parse import urljoin, urlparse

import structlog

from ogpeek.errors import InvalidInputError

logger = structlog.get_logger()

# Maximum URL length to prevent abuse
MAX_URL_LENGTH = 4096

_ALLOWED_PREFIXES = ("http://", "https://")
_ALLOWED_SCHEMES = frozenset({"http", "https"})


def validate_url(url: str | None) -> str:
    """Validate a page URL given on the command line.

    Args:
        url: URL string to validate.

    Returns:
        The validated URL (unchanged).

    Raises:
        InvalidInputError: If the URL is missing, too long, not
            http(s), has no host, or has an invalid port.
    """
    if not url:
        raise InvalidInputError("No URL provided.")

    if len(url) > MAX_URL_LENGTH:
        raise InvalidInputError(f"URL exceeds maximum length of {MAX_URL_LENGTH}")

    if not url.startswith(_ALLOWED_PREFIXES):
        raise InvalidInputError("Invalid URL. Must start with http:// or https://")

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        _ = parsed.port  # raises on a non-numeric or out-of-range port
    except ValueError as exc:
        raise InvalidInputError(f"Invalid URL: {exc}") from exc
    if not hostname:
        raise InvalidInputError("Invalid URL. No hostname found")

    return url


def resolve_image_url(image: str, page_url: str) -> str | None:
    """Resolve an ``og:image`` value against the page it came from.

    Args:
        image: Raw ``og:image`` content (absolute, relative or
            protocol-relative).
        page_url: The URL of the page (used to resolve relative paths).

    Returns:
        Absolute HTTP(S) image URL, or None if it cannot be resolved.
    """
    href = image.strip()
    if not href:
        return None

    try:
        resolved = urljoin(page_url, href)
        parsed = urlparse(resolved)
        hostname = parsed.hostname
        _ = parsed.port
    except ValueError as exc:
        logger.debug("image_url_unparseable", image=image, error=str(exc))
        return None

    # Only accept HTTP(S) image URLs
    if parsed.scheme not in _ALLOWED_SCHEMES or not hostname:
        logger.debug("image_url_rejected", image=image, resolved=resolved)
        return None

    return resolved
