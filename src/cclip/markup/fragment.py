"""Serialize annotated text into an "HTML Format" clipboard fragment.

The fragment starts with an ASCII header that records byte offsets into the
fragment itself::

    Version:0.9\\r\\n
    StartHTML:0000000105\\r\\n
    EndHTML:##########\\r\\n
    StartFragment:0000000139\\r\\n
    EndFragment:##########\\r\\n
    <html><body>\\r\\n<!--StartFragment-->...body...<!--EndFragment-->\\r\\n</body></html>

``StartHTML`` and ``StartFragment`` depend only on the template and are
resolved when the template is built.  ``EndHTML`` and ``EndFragment`` depend
on the body, so the header is written with zeroed fields and patched once
the body has been emitted.

Architecture:
    Measure-then-emit.  The measure pass sizes the encoded text and every
    glyph (failing early on unsupported glyphs or unencodable text), then one
    ``bytearray`` of exactly that size is allocated and filled through a
    bounded writer.  Any disagreement between measured and written sizes is a
    ``SizeMismatchError``.
"""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass
from itertools import groupby
from operator import attrgetter
from typing import TYPE_CHECKING

from cclip.errors import AllocationFailedError, EncodingFailedError, SizeMismatchError
from cclip.markup.glyphs import glyph_for_annotation
from cclip.markup.model import Annotation, AnnotationKind, AnnotationSet

if TYPE_CHECKING:
    from cclip.markup.model import TextBuffer

logger = logging.getLogger(__name__)

HTML_CLIPBOARD_FORMAT = "HTML Format"

FIELD_WIDTH = 10
_VERSION = "0.9"
_FIELD_PLACEHOLDER = "0" * FIELD_WIDTH
_FRAGMENT_OPEN = "<html><body>\r\n<!--StartFragment-->"
_FRAGMENT_CLOSE = "<!--EndFragment-->\r\n</body></html>"


# ---------------------------------------------------------------------------
# Format constant
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FragmentFormat:
    """Header/footer template and the offsets derived from it.

    Offsets and lengths are computed from the literal template text, so
    editing the template cannot leave them stale.

    Attributes:
        header: Header bytes with StartHTML/StartFragment resolved and the
            End fields zeroed, ending with the opening boundary marker.
        footer: Closing boundary marker plus closing tags.
        end_html_offset: Byte offset of the EndHTML digits in *header*.
        end_fragment_offset: Byte offset of the EndFragment digits in *header*.
        start_html: Value written to StartHTML.
        start_fragment: Value written to StartFragment.
    """

    header: bytes
    footer: bytes
    end_html_offset: int
    end_fragment_offset: int
    start_html: int
    start_fragment: int

    @property
    def footer_len(self) -> int:
        return len(self.footer)


def _field(value: int) -> str:
    text = f"{value:0{FIELD_WIDTH}d}"
    if len(text) != FIELD_WIDTH:
        msg = f"{value} does not fit in a {FIELD_WIDTH}-digit header field"
        raise ValueError(msg)
    return text


def build_fragment_format() -> FragmentFormat:
    """Lay out the header template and resolve its constant fields."""

    def fields(start_html: str, start_fragment: str) -> str:
        return (
            f"Version:{_VERSION}\r\n"
            f"StartHTML:{start_html}\r\n"
            f"EndHTML:{_FIELD_PLACEHOLDER}\r\n"
            f"StartFragment:{start_fragment}\r\n"
            f"EndFragment:{_FIELD_PLACEHOLDER}\r\n"
        )

    # Field widths are fixed, so the placeholder layout has the final length.
    fields_len = len(fields(_FIELD_PLACEHOLDER, _FIELD_PLACEHOLDER))
    start_html = fields_len
    start_fragment = fields_len + len(_FRAGMENT_OPEN)

    header = fields(_field(start_html), _field(start_fragment)) + _FRAGMENT_OPEN
    return FragmentFormat(
        header=header.encode("ascii"),
        footer=_FRAGMENT_CLOSE.encode("ascii"),
        end_html_offset=header.index("EndHTML:") + len("EndHTML:"),
        end_fragment_offset=header.index("EndFragment:") + len("EndFragment:"),
        start_html=start_html,
        start_fragment=start_fragment,
    )


FRAGMENT_FORMAT = build_fragment_format()


# ---------------------------------------------------------------------------
# Header parsing
# ---------------------------------------------------------------------------

_HEADER_LINE = re.compile(rb"([A-Za-z]+):([^\r\n]*)\r\n")


@dataclass(frozen=True, slots=True)
class FragmentHeader:
    """Decoded header fields of a fragment."""

    version: str
    start_html: int
    end_html: int
    start_fragment: int
    end_fragment: int


def parse_header(data: bytes) -> FragmentHeader:
    """Read the version tag and the four offset fields from *data*.

    Raises:
        ValueError: A required field is missing or not a decimal number.
    """
    values: dict[str, str] = {}
    pos = 0
    while match := _HEADER_LINE.match(data, pos):
        values[match.group(1).decode("ascii")] = match.group(2).decode("ascii")
        pos = match.end()

    required = ("Version", "StartHTML", "EndHTML", "StartFragment", "EndFragment")
    missing = [name for name in required if name not in values]
    if missing:
        msg = f"Fragment header missing fields: {', '.join(missing)}"
        raise ValueError(msg)

    def number(name: str) -> int:
        raw = values[name]
        if not raw.isdigit():
            msg = f"Fragment header field {name} is not a decimal number: {raw!r}"
            raise ValueError(msg)
        return int(raw)

    return FragmentHeader(
        version=values["Version"],
        start_html=number("StartHTML"),
        end_html=number("EndHTML"),
        start_fragment=number("StartFragment"),
        end_fragment=number("EndFragment"),
    )


# ---------------------------------------------------------------------------
# Bounded writer
# ---------------------------------------------------------------------------


class _BoundedWriter:
    """Sequential writer over a pre-sized buffer that refuses to overflow."""

    __slots__ = ("_buf", "_cursor")

    def __init__(self, buf: bytearray) -> None:
        self._buf = buf
        self._cursor = 0

    def write(self, data: bytes) -> None:
        end = self._cursor + len(data)
        if end > len(self._buf):
            raise SizeMismatchError("serialize", len(self._buf), end)
        self._buf[self._cursor : end] = data
        self._cursor = end

    def finish(self) -> None:
        if self._cursor != len(self._buf):
            raise SizeMismatchError("serialize", len(self._buf), self._cursor)


# ---------------------------------------------------------------------------
# Measure and emit
# ---------------------------------------------------------------------------


def _check_encoding(encoding: str) -> None:
    """The header and glyphs are ASCII; the body encoding must agree with it."""
    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        msg = f"Unknown fragment encoding {encoding!r}"
        raise EncodingFailedError(msg) from exc
    if "<a>".encode(encoding) != b"<a>":
        msg = f"Fragment encoding {encoding!r} is not ASCII-compatible"
        raise EncodingFailedError(msg)


def _encode(text: str, encoding: str) -> bytes:
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as exc:
        msg = f"Cannot encode text as {encoding}: {exc.reason} at offset {exc.start}"
        raise EncodingFailedError(msg) from exc


def _working_set(
    buffer: TextBuffer,
    annotations: AnnotationSet | None,
) -> AnnotationSet:
    """Wrap the caller's annotations in the implicit whole-fragment block."""
    working = annotations if annotations is not None else AnnotationSet()
    for annotation in working:
        if annotation.position > len(buffer):
            msg = (
                f"Annotation at {annotation.position} lies beyond buffer "
                f"of length {len(buffer)}"
            )
            raise ValueError(msg)
    return working.prepend(Annotation(0, AnnotationKind.BLOCK)).with_added(
        Annotation(len(buffer), AnnotationKind.BLOCK, is_closing=True)
    )


def _segments(
    text: str,
    ordered: list[Annotation],
) -> list[tuple[str, list[Annotation]]]:
    """Split *text* at each distinguished position.

    Returns ``(text_before_position, annotations_at_position)`` pairs; the
    final pair carries the tail after the last position and no annotations.
    """
    segments: list[tuple[str, list[Annotation]]] = []
    cursor = 0
    for position, group in groupby(ordered, key=attrgetter("position")):
        segments.append((text[cursor:position], list(group)))
        cursor = position
    segments.append((text[cursor:], []))
    return segments


def serialize(
    buffer: TextBuffer,
    annotations: AnnotationSet | None = None,
    *,
    encoding: str = "utf-8",
    fragment_format: FragmentFormat = FRAGMENT_FORMAT,
) -> bytes:
    """Serialize *buffer* with *annotations* into a fragment.

    Args:
        buffer: Text to place in the fragment body (copied verbatim).
        annotations: Formatting markers positioned in *buffer*.
        encoding: ASCII-compatible target encoding of the body text.
        fragment_format: Header/footer template.

    Returns:
        The complete fragment, whose EndHTML field equals its length and
        whose EndFragment field equals its length minus the footer.

    Raises:
        ValueError: An annotation lies beyond the end of *buffer*.
        UnsupportedGlyphError: An annotation has no markup glyph.
        EncodingFailedError: The text cannot be encoded as *encoding*.
        AllocationFailedError: The output buffer could not be allocated.
        SizeMismatchError: Written and measured sizes disagree.
    """
    _check_encoding(encoding)
    working = _working_set(buffer, annotations)
    segments = _segments(buffer.text, working.sorted_by_position())

    # Measure pass
    glyph_size = sum(len(glyph_for_annotation(a)) for a in working)
    # Sized per segment: stateful codecs may encode a split text differently
    text_size = sum(len(_encode(text, encoding)) for text, _ in segments)
    body_size = (
        text_size
        + len(fragment_format.header)
        + len(fragment_format.footer)
        + glyph_size
    )
    logger.debug(
        "Fragment: %d text bytes, %d glyph bytes, %d annotations, %d total",
        text_size,
        glyph_size,
        len(working),
        body_size,
    )

    # Emit pass
    try:
        out = bytearray(body_size)
    except MemoryError as exc:
        msg = f"Could not allocate {body_size} bytes for fragment"
        raise AllocationFailedError(msg) from exc

    writer = _BoundedWriter(out)
    writer.write(fragment_format.header)
    for text, at_position in segments:
        writer.write(_encode(text, encoding))
        for annotation in at_position:
            writer.write(glyph_for_annotation(annotation).encode("ascii"))
    writer.write(fragment_format.footer)
    writer.finish()

    # Header patch
    end_html = _field(body_size).encode("ascii")
    end_fragment = _field(body_size - fragment_format.footer_len).encode("ascii")
    out[
        fragment_format.end_html_offset : fragment_format.end_html_offset + FIELD_WIDTH
    ] = end_html
    out[
        fragment_format.end_fragment_offset : fragment_format.end_fragment_offset
        + FIELD_WIDTH
    ] = end_fragment

    return bytes(out)
