"""HTML fetcher — a single bounded HTTP GET per invocation."""

from __future__ import annotations

import ssl
import time
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

from ogpeek.config import FetchConfig
from ogpeek.errors import FetchError

logger = structlog.get_logger()

# Well-known system CA bundle paths (Linux / macOS)
_SYSTEM_CA_PATHS: list[str] = [
    "/etc/ssl/certs/ca-certificates.crt",   # Debian/Ubuntu
    "/etc/pki/tls/certs/ca-bundle.crt",     # RHEL/CentOS
    "/etc/ssl/cert.pem",                    # Alpine/macOS
    "/etc/pki/ca-trust/extracted/pem/tls-ca-bundle.pem",  # Fedora
]


@dataclass(frozen=True)
class FetchResult:
    """Raw page markup plus how long it took to get it."""

    url: str  # final URL after redirects
    html: str
    status_code: int
    elapsed_ms: float


def create_ssl_context() -> ssl.SSLContext | bool:
    """Create an SSL context that tries system CA bundles first.

    Returns an ``ssl.SSLContext`` loaded from the first available system
    CA bundle, or ``True`` (httpx default verify) if none found.
    """
    for ca_path in _SYSTEM_CA_PATHS:
        if Path(ca_path).is_file():
            return ssl.create_default_context(cafile=ca_path)
    # Fallback: let httpx use its bundled certifi
    return True


def create_client(config: FetchConfig) -> httpx.Client:
    """Build the HTTP client used for page fetches."""
    return httpx.Client(
        headers={"User-Agent": config.user_agent},
        follow_redirects=True,
        timeout=config.timeout,
        verify=create_ssl_context(),
    )


def fetch_html(
    url: str,
    *,
    config: FetchConfig | None = None,
    client: httpx.Client | None = None,
) -> FetchResult:
    """Fetch *url* and return its body as text.

    No retries: a single failed attempt surfaces immediately. The body
    is streamed so both the total-time deadline and the size limit are
    enforced while reading, not after the whole response is buffered.

    Args:
        url: Page URL (already validated).
        config: Fetch settings. Defaults to :class:`FetchConfig`.
        client: Optional pre-built client; it is left open for the
            caller. When omitted a client is created and closed here.

    Returns:
        FetchResult with the decoded body.

    Raises:
        FetchError: On network error, timeout, non-2xx status, or an
            oversized body.
    """
    cfg = config or FetchConfig()
    owns_client = client is None
    http = client if client is not None else create_client(cfg)

    logger.debug("fetch_start", url=url, timeout=cfg.timeout)
    start = time.monotonic()
    deadline = start + cfg.timeout
    try:
        with http.stream("GET", url, timeout=cfg.timeout) as resp:
            _check_response(resp, url, cfg)
            body = _read_body(resp, url, cfg, deadline)
            html = body.decode(resp.encoding or "utf-8", errors="replace")
            final_url = str(resp.url)
            status_code = resp.status_code
    except httpx.TimeoutException as exc:
        logger.warning("fetch_timeout", url=url, timeout=cfg.timeout)
        raise _timeout_error(url, cfg) from exc
    except httpx.HTTPError as exc:
        logger.warning("fetch_network_error", url=url, error=str(exc))
        raise FetchError(
            f"Failed to fetch URL {url}: {str(exc) or type(exc).__name__}",
            url=url,
        ) from exc
    except httpx.InvalidURL as exc:
        logger.warning("fetch_invalid_url", url=url, error=str(exc))
        raise FetchError(f"Failed to fetch URL {url}: {exc}", url=url) from exc
    finally:
        if owns_client:
            http.close()

    elapsed = _elapsed(start)
    logger.debug(
        "fetch_complete",
        url=url,
        final_url=final_url,
        status=status_code,
        size=len(body),
        elapsed_ms=round(elapsed, 1),
    )
    return FetchResult(
        url=final_url,
        html=html,
        status_code=status_code,
        elapsed_ms=elapsed,
    )


def _check_response(resp: httpx.Response, url: str, cfg: FetchConfig) -> None:
    """Reject non-2xx statuses and oversized declared bodies before reading."""
    if not resp.is_success:
        logger.warning("fetch_http_error", url=url, status=resp.status_code)
        raise FetchError(
            f"Failed to fetch URL: HTTP error! status: {resp.status_code}",
            url=url,
            status_code=resp.status_code,
        )

    content_length = resp.headers.get("content-length")
    if content_length is not None:
        try:
            declared = int(content_length)
        except ValueError:
            declared = 0  # malformed Content-Length, proceed with body check
        if declared > cfg.max_response_bytes:
            logger.warning(
                "fetch_response_too_large_header",
                url=url,
                content_length=declared,
            )
            raise _too_large_error(url, declared, resp.status_code)


def _read_body(
    resp: httpx.Response, url: str, cfg: FetchConfig, deadline: float
) -> bytes:
    """Read the body chunk by chunk within *deadline* and the size limit."""
    chunks: list[bytes] = []
    size = 0
    for chunk in resp.iter_bytes():
        size += len(chunk)
        if size > cfg.max_response_bytes:
            logger.warning("fetch_response_too_large", url=url, size=size)
            raise _too_large_error(url, size, resp.status_code)
        if time.monotonic() > deadline:
            logger.warning("fetch_timeout", url=url, timeout=cfg.timeout, size=size)
            raise _timeout_error(url, cfg)
        chunks.append(chunk)
    return b"".join(chunks)


def _timeout_error(url: str, cfg: FetchConfig) -> FetchError:
    return FetchError(
        f"Failed to fetch URL: request to {url} timed out after {cfg.timeout:g}s",
        url=url,
        timed_out=True,
    )


def _too_large_error(url: str, size: int, status_code: int) -> FetchError:
    return FetchError(
        f"Failed to fetch URL: response too large ({size} bytes)",
        url=url,
        status_code=status_code,
    )


def _elapsed(start: float) -> float:
    """Calculate elapsed milliseconds."""
    return (time.monotonic() - start) * 1000
