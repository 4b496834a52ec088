"""Tests for ogpeek.fetcher — bounded HTTP fetch and error mapping."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from unittest.mock import patch

import httpx
import pytest

from ogpeek.config import FetchConfig
from ogpeek.errors import FetchError
from ogpeek.fetcher import FetchResult, create_ssl_context, fetch_html


class _DripStream(httpx.SyncByteStream):
    """Response body that yields small chunks with a pause before each."""

    def __init__(self, chunks: int, delay: float, size: int = 1) -> None:
        self.chunks = chunks
        self.delay = delay
        self.size = size
        self.sent = 0

    def __iter__(self) -> Iterator[bytes]:
        for _ in range(self.chunks):
            time.sleep(self.delay)
            self.sent += 1
            yield b"x" * self.size


class TestFetchHtml:
    def test_success(self, make_client: Callable[..., httpx.Client]) -> None:
        result = fetch_html("https://example.com", client=make_client(text="<p>hi</p>"))
        assert isinstance(result, FetchResult)
        assert result.html == "<p>hi</p>"
        assert result.status_code == 200
        assert result.elapsed_ms >= 0

    def test_sends_user_agent(self) -> None:
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["ua"] = request.headers.get("user-agent", "")
            return httpx.Response(200, text="ok")

        config = FetchConfig(user_agent="ogpeek-test/1.0")
        client = httpx.Client(
            transport=httpx.MockTransport(handler),
            headers={"User-Agent": config.user_agent},
        )
        fetch_html("https://example.com", config=config, client=client)
        assert seen["ua"] == "ogpeek-test/1.0"

    def test_404_includes_status(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        with pytest.raises(FetchError, match="404") as info:
            fetch_html("https://example.com/missing", client=make_client(status=404))
        assert info.value.status_code == 404
        assert info.value.timed_out is False
        assert info.value.url == "https://example.com/missing"

    def test_500(self, make_client: Callable[..., httpx.Client]) -> None:
        with pytest.raises(FetchError, match="status: 500"):
            fetch_html("https://example.com", client=make_client(status=500))

    def test_timeout(self, make_client: Callable[..., httpx.Client]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(FetchError, match="timed out") as info:
            fetch_html("https://slow.example.com", client=make_client(handler))
        assert info.value.timed_out is True
        assert info.value.status_code is None

    def test_connect_error(self, make_client: Callable[..., httpx.Client]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(FetchError, match="Connection refused") as info:
            fetch_html("https://down.example.com", client=make_client(handler))
        assert "https://down.example.com" in str(info.value)
        assert info.value.timed_out is False

    def test_declared_size_limit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=b"x" * 10, headers={"content-length": "999999999"}
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(FetchError, match="too large"):
            fetch_html("https://example.com", client=client)

    def test_body_size_limit(self, make_client: Callable[..., httpx.Client]) -> None:
        config = FetchConfig(max_response_bytes=1024)
        client = make_client(text="a" * 2048)
        with pytest.raises(FetchError, match="too large"):
            fetch_html("https://example.com", config=config, client=client)

    def test_slow_body_hits_total_deadline(self) -> None:
        # Each chunk arrives well within a per-read timeout, but the
        # whole body takes longer than the configured total.
        stream = _DripStream(chunks=8, delay=0.1)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=stream)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        config = FetchConfig(timeout=0.25)
        with pytest.raises(FetchError, match="timed out") as info:
            fetch_html("https://drip.example.com", config=config, client=client)
        assert info.value.timed_out is True
        assert stream.sent < 8

    def test_streamed_size_limit_stops_reading(self) -> None:
        stream = _DripStream(chunks=100, delay=0, size=512)

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=stream)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        config = FetchConfig(max_response_bytes=1024)
        with pytest.raises(FetchError, match="too large"):
            fetch_html("https://big.example.com", config=config, client=client)
        assert stream.sent == 3

    def test_decodes_declared_charset(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content="<title>café</title>".encode("latin-1"),
                headers={"content-type": "text/html; charset=iso-8859-1"},
            )

        client = httpx.Client(transport=httpx.MockTransport(handler))
        assert "café" in fetch_html("https://example.com", client=client).html

    def test_invalid_url_mapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.InvalidURL("Invalid port: '99999'")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(FetchError, match="Invalid port"):
            fetch_html("https://example.com", client=client)

    def test_injected_client_left_open(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        client = make_client()
        fetch_html("https://example.com", client=client)
        assert not client.is_closed

    def test_owned_client_closed(
        self, make_client: Callable[..., httpx.Client]
    ) -> None:
        client = make_client(status=404)
        with patch("ogpeek.fetcher.create_client", return_value=client):
            with pytest.raises(FetchError):
                fetch_html("https://example.com")
        assert client.is_closed


class TestCreateSslContext:
    def test_falls_back_to_default(self) -> None:
        with patch("ogpeek.fetcher._SYSTEM_CA_PATHS", []):
            assert create_ssl_context() is True
