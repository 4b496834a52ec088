"""Tests for ogpeek.clipboard."""

from __future__ import annotations

from unittest.mock import patch

import pyperclip
import pytest

from ogpeek.clipboard import copy_to_clipboard
from ogpeek.errors import ClipboardError, ErrorCategory


def test_copy_success() -> None:
    with patch("ogpeek.clipboard.pyperclip.copy") as copy:
        elapsed = copy_to_clipboard("https://example.com/img.png")
    copy.assert_called_once_with("https://example.com/img.png")
    assert elapsed >= 0


def test_copy_failure_wrapped() -> None:
    err = pyperclip.PyperclipException("could not find a copy/paste mechanism")
    with patch("ogpeek.clipboard.pyperclip.copy", side_effect=err):
        with pytest.raises(ClipboardError, match="copy/paste mechanism") as info:
            copy_to_clipboard("https://example.com/img.png")
    assert info.value.category is ErrorCategory.CLIPBOARD
