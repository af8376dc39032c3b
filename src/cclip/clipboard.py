"""Clipboard transfer.

On Windows the payload goes through ``win32clipboard`` (pywin32) in the
usual open / empty / set / close sequence, which supports both plain
Unicode text and the registered "HTML Format".  Elsewhere ``pyperclip``
handles plain text only.  ``StreamSink`` writes the payload to a stream
instead, for ``--stdout``.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import IO, Protocol

from cclip.errors import ClipboardError
from cclip.markup.fragment import HTML_CLIPBOARD_FORMAT

logger = logging.getLogger(__name__)


class ClipboardFormat(Enum):
    """Payload formats cclip can place on the clipboard."""

    UNICODE_TEXT = "unicode_text"
    HTML = "html"


class ClipboardSink(Protocol):
    """Anything that can receive a finished payload."""

    def copy_text(self, text: str) -> None: ...

    def copy_html(self, fragment: bytes) -> None: ...


class Win32Clipboard:
    """Windows clipboard through pywin32."""

    def __init__(self) -> None:
        import win32clipboard
        import win32con

        self._clip = win32clipboard
        self._unicode_format = win32con.CF_UNICODETEXT
        self._html_format: int | None = None

    def _register_html(self) -> int:
        if self._html_format is None:
            try:
                self._html_format = self._clip.RegisterClipboardFormat(
                    HTML_CLIPBOARD_FORMAT
                )
            except self._clip.error as exc:
                msg = f"Could not register clipboard format {HTML_CLIPBOARD_FORMAT!r}"
                raise ClipboardError(msg, "register") from exc
        return self._html_format

    def _set(self, clipboard_format: int, data: str | bytes) -> None:
        try:
            self._clip.OpenClipboard()
        except self._clip.error as exc:
            msg = "Could not open the clipboard"
            raise ClipboardError(msg, "open") from exc
        try:
            try:
                self._clip.EmptyClipboard()
            except self._clip.error as exc:
                msg = "Could not empty the clipboard"
                raise ClipboardError(msg, "empty") from exc
            try:
                self._clip.SetClipboardData(clipboard_format, data)
            except self._clip.error as exc:
                msg = "Could not set clipboard data"
                raise ClipboardError(msg, "set") from exc
        finally:
            self._clip.CloseClipboard()

    def copy_text(self, text: str) -> None:
        logger.debug("Setting CF_UNICODETEXT (%d characters)", len(text))
        self._set(self._unicode_format, text)

    def copy_html(self, fragment: bytes) -> None:
        clipboard_format = self._register_html()
        logger.debug("Setting %s (%d bytes)", HTML_CLIPBOARD_FORMAT, len(fragment))
        self._set(clipboard_format, fragment)


class PyperclipClipboard:
    """Plain-text clipboard through pyperclip."""

    def __init__(self) -> None:
        import pyperclip

        self._pyperclip = pyperclip

    def copy_text(self, text: str) -> None:
        try:
            self._pyperclip.copy(text)
        except self._pyperclip.PyperclipException as exc:
            raise ClipboardError(str(exc), "set") from exc

    def copy_html(self, fragment: bytes) -> None:  # noqa: ARG002
        msg = f"{HTML_CLIPBOARD_FORMAT!r} needs the Windows clipboard"
        raise ClipboardError(msg, "set")


class StreamSink:
    """Write payloads to a binary stream instead of the clipboard."""

    def __init__(self, stream: IO[bytes], encoding: str = "utf-8") -> None:
        self._stream = stream
        self._encoding = encoding

    def copy_text(self, text: str) -> None:
        self._stream.write(text.encode(self._encoding))
        self._stream.flush()

    def copy_html(self, fragment: bytes) -> None:
        self._stream.write(fragment)
        self._stream.flush()


def get_clipboard(platform: str | None = None) -> ClipboardSink:
    """Return the clipboard backend for *platform* (default: this one)."""
    platform = platform or sys.platform
    if platform == "win32":
        return Win32Clipboard()
    return PyperclipClipboard()


def transfer(
    sink: ClipboardSink,
    clipboard_format: ClipboardFormat,
    data: str | bytes,
) -> None:
    """Hand *data* to *sink* in *clipboard_format*."""
    if clipboard_format is ClipboardFormat.HTML:
        if not isinstance(data, bytes):
            msg = "HTML payload must be bytes"
            raise TypeError(msg)
        sink.copy_html(data)
    else:
        if not isinstance(data, str):
            msg = "Unicode text payload must be str"
            raise TypeError(msg)
        sink.copy_text(data)
