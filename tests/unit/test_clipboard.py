"""Tests for clipboard backends and transfer().

pywin32 is not importable off Windows, so Win32Clipboard is exercised
against a fake ``win32clipboard`` module placed in sys.modules.
"""

from __future__ import annotations

import io
import sys
from types import SimpleNamespace
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from cclip.clipboard import (
    ClipboardFormat,
    PyperclipClipboard,
    StreamSink,
    Win32Clipboard,
    get_clipboard,
    transfer,
)
from cclip.errors import ClipboardError

if TYPE_CHECKING:
    from collections.abc import Generator

CF_UNICODETEXT = 13
CF_HTML = 0xC0DE


class _Win32Error(Exception):
    """Stand-in for pywintypes.error."""


def _fake_win32() -> dict[str, object]:
    clip = MagicMock()
    clip.error = _Win32Error
    clip.RegisterClipboardFormat.return_value = CF_HTML
    con = SimpleNamespace(CF_UNICODETEXT=CF_UNICODETEXT)
    return {"win32clipboard": clip, "win32con": con}


@pytest.fixture
def win32() -> Generator[MagicMock]:
    modules = _fake_win32()
    with patch.dict(sys.modules, modules):
        yield modules["win32clipboard"]


# ---------------------------------------------------------------------------
# Win32Clipboard
# ---------------------------------------------------------------------------
class TestWin32Clipboard:
    """Open / empty / set / close sequence and its failure stages."""

    def test_copy_text(self, win32: MagicMock) -> None:
        Win32Clipboard().copy_text("héllo")
        assert [c[0] for c in win32.method_calls] == [
            "OpenClipboard",
            "EmptyClipboard",
            "SetClipboardData",
            "CloseClipboard",
        ]
        win32.SetClipboardData.assert_called_once_with(CF_UNICODETEXT, "héllo")

    def test_copy_html_registers_format_once(self, win32: MagicMock) -> None:
        clipboard = Win32Clipboard()
        clipboard.copy_html(b"Version:0.9")
        clipboard.copy_html(b"Version:0.9")
        win32.RegisterClipboardFormat.assert_called_once_with("HTML Format")
        win32.SetClipboardData.assert_called_with(CF_HTML, b"Version:0.9")

    def test_open_failure(self, win32: MagicMock) -> None:
        win32.OpenClipboard.side_effect = _Win32Error("busy")
        with pytest.raises(ClipboardError) as exc_info:
            Win32Clipboard().copy_text("x")
        assert exc_info.value.stage == "open"
        win32.CloseClipboard.assert_not_called()

    @pytest.mark.parametrize(
        ("method", "stage"),
        [("EmptyClipboard", "empty"), ("SetClipboardData", "set")],
    )
    def test_failure_after_open_still_closes(
        self,
        win32: MagicMock,
        method: str,
        stage: str,
    ) -> None:
        getattr(win32, method).side_effect = _Win32Error("denied")
        with pytest.raises(ClipboardError, match=f"stage: {stage}") as exc_info:
            Win32Clipboard().copy_text("x")
        assert exc_info.value.stage == stage
        win32.CloseClipboard.assert_called_once()

    def test_register_failure(self, win32: MagicMock) -> None:
        win32.RegisterClipboardFormat.side_effect = _Win32Error("no")
        with pytest.raises(ClipboardError) as exc_info:
            Win32Clipboard().copy_html(b"x")
        assert exc_info.value.stage == "register"
        win32.OpenClipboard.assert_not_called()


# ---------------------------------------------------------------------------
# PyperclipClipboard
# ---------------------------------------------------------------------------
class TestPyperclipClipboard:
    def test_copy_text(self) -> None:
        with patch("pyperclip.copy") as copy:
            PyperclipClipboard().copy_text("hello")
        copy.assert_called_once_with("hello")

    def test_copy_failure(self) -> None:
        import pyperclip

        with (
            patch("pyperclip.copy", side_effect=pyperclip.PyperclipException("none")),
            pytest.raises(ClipboardError, match="none"),
        ):
            PyperclipClipboard().copy_text("hello")

    def test_html_unsupported(self) -> None:
        with pytest.raises(ClipboardError, match="HTML Format"):
            PyperclipClipboard().copy_html(b"Version:0.9")


# ---------------------------------------------------------------------------
# StreamSink, get_clipboard, transfer
# ---------------------------------------------------------------------------
class TestStreamSink:
    def test_text_encoded(self) -> None:
        out = io.BytesIO()
        StreamSink(out).copy_text("grüße")
        assert out.getvalue() == "grüße".encode()

    def test_text_custom_encoding(self) -> None:
        out = io.BytesIO()
        StreamSink(out, "cp1252").copy_text("€")
        assert out.getvalue() == b"\x80"

    def test_html_written_verbatim(self) -> None:
        out = io.BytesIO()
        StreamSink(out).copy_html(b"\x00raw")
        assert out.getvalue() == b"\x00raw"


def test_get_clipboard_windows(win32: MagicMock) -> None:
    assert isinstance(get_clipboard("win32"), Win32Clipboard)


def test_get_clipboard_elsewhere() -> None:
    assert isinstance(get_clipboard("linux"), PyperclipClipboard)


class TestTransfer:
    def test_text(self) -> None:
        sink = MagicMock()
        transfer(sink, ClipboardFormat.UNICODE_TEXT, "text")
        sink.copy_text.assert_called_once_with("text")
        sink.copy_html.assert_not_called()

    def test_html(self) -> None:
        sink = MagicMock()
        transfer(sink, ClipboardFormat.HTML, b"fragment")
        sink.copy_html.assert_called_once_with(b"fragment")

    @pytest.mark.parametrize(
        ("clipboard_format", "data"),
        [(ClipboardFormat.HTML, "str"), (ClipboardFormat.UNICODE_TEXT, b"bytes")],
    )
    def test_type_mismatch(
        self,
        clipboard_format: ClipboardFormat,
        data: str | bytes,
    ) -> None:
        with pytest.raises(TypeError, match="payload must be"):
            transfer(MagicMock(), clipboard_format, data)
