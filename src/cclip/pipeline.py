"""Glue between decoded input and the clipboard payload.

Marks are located on the decoded text, carried through pattern rewriting,
and serialized into a fragment when HTML output is requested.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import batched
from operator import itemgetter
from typing import TYPE_CHECKING

from cclip.clipboard import ClipboardFormat
from cclip.markup.fragment import serialize
from cclip.markup.marks import mark_occurrences
from cclip.markup.model import AnnotationSet
from cclip.markup.rewriter import rewrite

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cclip.markup.model import (
        Annotation,
        AnnotationKind,
        PatternList,
        TextBuffer,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarkRequest:
    """Words to wrap in one kind of annotation."""

    words: tuple[str, ...]
    kind: AnnotationKind
    parameter: int = 0


@dataclass(frozen=True, slots=True)
class Payload:
    """A finished clipboard payload.

    ``data`` is ``str`` for Unicode text and ``bytes`` for an HTML fragment.
    """

    format: ClipboardFormat
    data: str | bytes


def build_annotations(
    buffer: TextBuffer,
    marks: Sequence[MarkRequest],
) -> AnnotationSet:
    """Mark every request and order the markers so the tags nest.

    The serializer emits markers at one position in set order.  At a shared
    position closing markers come before opening ones, closes run innermost
    first and opens run outermost first.  Equal spans nest in request order.
    """
    keyed: list[tuple[tuple[int, int, int, int], Annotation]] = []
    sequence = 0
    for request in marks:
        marked = mark_occurrences(
            buffer,
            request.words,
            request.kind,
            request.parameter,
        )
        for opening, closing in batched(marked, 2):
            start, end = opening.position, closing.position
            keyed.append(((start, 1, -end, sequence), opening))
            keyed.append(((end, 0, -start, -sequence), closing))
            sequence += 1
    keyed.sort(key=itemgetter(0))
    return AnnotationSet(annotation for _, annotation in keyed)


def build_payload(
    buffer: TextBuffer,
    *,
    patterns: PatternList = (),
    marks: Sequence[MarkRequest] = (),
    html: bool = False,
    encoding: str = "utf-8",
) -> Payload:
    """Run the pipeline for one input buffer.

    Raises:
        CclipError subclasses from rewriting and serialization.
    """
    annotations = build_annotations(buffer, marks)
    if annotations and not html:
        logger.warning(
            "Ignoring %d formatting marks: plain text output has no formatting",
            len(annotations) // 2,
        )

    result = rewrite(buffer, annotations, patterns)
    if result.replacements:
        logger.info("Applied %d replacements", result.replacements)

    if not html:
        return Payload(ClipboardFormat.UNICODE_TEXT, result.buffer.text)

    fragment = serialize(result.buffer, result.annotations, encoding=encoding)
    logger.debug("Built %d-byte fragment", len(fragment))
    return Payload(ClipboardFormat.HTML, fragment)
