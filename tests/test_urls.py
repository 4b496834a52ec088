"""Tests for ogpeek.urls — input validation and image URL resolution."""

from __future__ import annotations

import pytest

from ogpeek.errors import InvalidInputError
from ogpeek.urls import MAX_URL_LENGTH, resolve_image_url, validate_url


class TestValidateUrl:
    def test_https(self) -> None:
        assert validate_url("https://example.com") == "https://example.com"

    def test_localhost_allowed(self) -> None:
        assert validate_url("http://localhost:3000") == "http://localhost:3000"

    @pytest.mark.parametrize("url", [None, ""])
    def test_missing(self, url: str | None) -> None:
        with pytest.raises(InvalidInputError, match="No URL provided"):
            validate_url(url)

    @pytest.mark.parametrize(
        "url", ["example.com", "ftp://example.com", "file:///etc/passwd"]
    )
    def test_wrong_scheme(self, url: str) -> None:
        with pytest.raises(InvalidInputError, match="http:// or https://"):
            validate_url(url)

    def test_no_host(self) -> None:
        with pytest.raises(InvalidInputError, match="hostname"):
            validate_url("https://")

    @pytest.mark.parametrize(
        "url", ["https://example.com:99999", "http://localhost:port/"]
    )
    def test_bad_port(self, url: str) -> None:
        with pytest.raises(InvalidInputError, match="Invalid URL"):
            validate_url(url)

    def test_valid_port(self) -> None:
        assert validate_url("http://127.0.0.1:65535/") == "http://127.0.0.1:65535/"

    def test_too_long(self) -> None:
        with pytest.raises(InvalidInputError, match="maximum length"):
            validate_url("https://example.com/" + "a" * MAX_URL_LENGTH)


class TestResolveImageUrl:
    def test_root_relative(self) -> None:
        assert (
            resolve_image_url("/img.png", "https://example.com")
            == "https://example.com/img.png"
        )

    def test_path_relative(self) -> None:
        assert (
            resolve_image_url("img/a.png", "https://example.com/blog/post")
            == "https://example.com/blog/img/a.png"
        )

    def test_protocol_relative(self) -> None:
        assert (
            resolve_image_url("//cdn.example.net/a.png", "https://example.com")
            == "https://cdn.example.net/a.png"
        )

    def test_absolute_unchanged(self) -> None:
        url = "https://cdn.example.net/a.png?x=1"
        assert resolve_image_url(url, "https://example.com") == url

    @pytest.mark.parametrize(
        "image", ["javascript:alert(1)", "data:image/png;base64,AAAA", "   "]
    )
    def test_rejected(self, image: str) -> None:
        assert resolve_image_url(image, "https://example.com") is None

    def test_unparseable(self) -> None:
        assert resolve_image_url("http://[::1", "https://example.com") is None

    def test_bad_port(self) -> None:
        image = "https://cdn.example.net:70000/a.png"
        assert resolve_image_url(image, "https://example.com") is None
