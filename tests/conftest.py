"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

SAMPLE_HTML = """<html><head>
<title>Fallback Title</title>
<meta name="description" content="Fallback description">
<meta property="og:title" content="Example Site">
<meta property="og:image" content="/img.png">
<meta property="og:site_name" content="Example">
<meta property="og:image:width" content="1200">
</head><body><p>Hello</p></body></html>"""


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config loading at an empty temp dir and drop OGPEEK_* env vars."""
    import os

    for key in list(os.environ):
        if key.startswith("OGPEEK_"):
            monkeypatch.delenv(key)
    config_path = tmp_path / "ogpeek" / "config.toml"
    monkeypatch.setenv("OGPEEK_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def make_client() -> Callable[..., httpx.Client]:
    """Build an ``httpx.Client`` backed by a MockTransport."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        *,
        status: int = 200,
        text: str = SAMPLE_HTML,
    ) -> httpx.Client:
        if handler is None:

            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(
                    status, text=text, headers={"content-type": "text/html"}
                )

        return httpx.Client(transport=httpx.MockTransport(handler))

    return _make
