"""Markup glyph table: annotation kind + open/close flag -> markup token.

Every ``AnnotationKind`` has an explicit entry.  Colour kinds are
parameterized by a 24-bit RGB value; a value outside that range is the only
way a known kind can be unsupported.  Callers must treat
``UnsupportedGlyphError`` as fatal, since the fragment serializer sizes its
output from these strings.

All glyphs are ASCII, so their length in bytes equals their length in
characters under any ASCII-compatible target encoding.
"""

from __future__ import annotations

import string

from cclip.errors import UnsupportedGlyphError
from cclip.markup.model import Annotation, AnnotationKind

MAX_RGB = 0xFFFFFF

# (open, close) pairs for kinds that take no parameter
FIXED_GLYPHS: dict[AnnotationKind, tuple[str, str]] = {
    AnnotationKind.BLOCK: ("<pre>", "</pre>"),
    AnnotationKind.BOLD: ("<b>", "</b>"),
    AnnotationKind.ITALIC: ("<i>", "</i>"),
    AnnotationKind.UNDERLINE: ("<u>", "</u>"),
}

# CSS property per parameterized kind; the value is formatted as #RRGGBB
COLOUR_GLYPHS: dict[AnnotationKind, str] = {
    AnnotationKind.COLOR: "color",
    AnnotationKind.BACKGROUND: "background-color",
}

_SPAN_CLOSE = "</span>"


def glyph_for(kind: AnnotationKind, is_closing: bool, parameter: int = 0) -> str:
    """Return the markup token for one end of an annotation pair.

    Raises:
        UnsupportedGlyphError: *kind* has no entry, or a colour parameter
            is outside ``0..0xFFFFFF``.
    """
    if kind in FIXED_GLYPHS:
        opening, closing = FIXED_GLYPHS[kind]
        return closing if is_closing else opening

    if kind in COLOUR_GLYPHS:
        if not 0 <= parameter <= MAX_RGB:
            raise UnsupportedGlyphError(kind, parameter)
        if is_closing:
            return _SPAN_CLOSE
        return f'<span style="{COLOUR_GLYPHS[kind]}:#{parameter:06X}">'

    raise UnsupportedGlyphError(kind, parameter)


def glyph_for_annotation(annotation: Annotation) -> str:
    return glyph_for(annotation.kind, annotation.is_closing, annotation.parameter)


def parse_rgb(value: str) -> int:
    """Parse ``RRGGBB`` or ``#RRGGBB`` into a 24-bit integer.

    Raises:
        ValueError: *value* is not six hexadecimal digits.
    """
    digits = value.removeprefix("#")
    if len(digits) != 6 or not all(c in string.hexdigits for c in digits):
        msg = f"Colour must be six hex digits (RRGGBB), got {value!r}"
        raise ValueError(msg)
    return int(digits, 16)
