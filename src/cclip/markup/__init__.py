"""Annotated-text-to-markup pipeline.

Pattern rewriting that carries formatting annotations through the edits,
and serialization of annotated text into an "HTML Format" fragment.
"""

from cclip.markup.fragment import (
    FRAGMENT_FORMAT,
    HTML_CLIPBOARD_FORMAT,
    FragmentHeader,
    parse_header,
    serialize,
)
from cclip.markup.glyphs import glyph_for, parse_rgb
from cclip.markup.marks import mark_occurrences
from cclip.markup.model import (
    Annotation,
    AnnotationKind,
    AnnotationSet,
    Pattern,
    TextBuffer,
)
from cclip.markup.rewriter import RewriteResult, rewrite, shift_positions
from cclip.markup.search import Match, find

__all__ = [
    "FRAGMENT_FORMAT",
    "HTML_CLIPBOARD_FORMAT",
    "Annotation",
    "AnnotationKind",
    "AnnotationSet",
    "FragmentHeader",
    "Match",
    "Pattern",
    "RewriteResult",
    "TextBuffer",
    "find",
    "glyph_for",
    "mark_occurrences",
    "parse_header",
    "parse_rgb",
    "rewrite",
    "serialize",
    "shift_positions",
]
