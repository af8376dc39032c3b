"""Pattern rewriting that keeps annotation positions consistent.

Architecture:
    Two passes over the same match sequence from ``iter_matches``.  The
    measure pass computes the output length; the write pass builds the new
    text and renormalizes annotation positions once per match, in output
    coordinates, left to right.  The written length is checked against the
    measured one and a disagreement is fatal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cclip.errors import AllocationFailedError, SizeMismatchError
from cclip.markup.model import AnnotationSet, TextBuffer
from cclip.markup.search import Match, iter_matches

if TYPE_CHECKING:
    from cclip.markup.model import PatternList

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Output of ``rewrite``: new text, renormalized annotations, match count."""

    buffer: TextBuffer
    annotations: AnnotationSet
    replacements: int


def shift_positions(
    annotations: AnnotationSet,
    region_start: int,
    deleted_len: int,
    inserted_len: int,
) -> AnnotationSet:
    """Renormalize positions after replacing ``[region_start, +deleted_len)``.

    - at or before *region_start*: unchanged (opening markers stay outside)
    - strictly inside the deleted span: collapse to *region_start*
    - at or after the span end: slide by ``inserted_len - deleted_len``
    """
    region_end = region_start + deleted_len
    delta = inserted_len - deleted_len

    def move(position: int) -> int:
        if position <= region_start:
            return position
        if position < region_end:
            return region_start
        return position + delta

    return annotations.replace_positions(move)


def _measure(buffer: TextBuffer, matches: list[Match], patterns: PatternList) -> int:
    """Output length: all gaps, all replacements and the trailing gap."""
    length = 0
    cursor = 0
    for match in matches:
        pattern = patterns[match.pattern_index]
        length += match.offset - cursor
        length += len(pattern.replace)
        cursor = match.offset + len(pattern.search)
    return length + len(buffer) - cursor


def rewrite(
    buffer: TextBuffer,
    annotations: AnnotationSet | None,
    patterns: PatternList,
) -> RewriteResult:
    """Apply *patterns* to *buffer* and carry *annotations* through the edits.

    Matching follows ``find``: leftmost offset first, list order among
    patterns at the same offset, and no overlapping matches.

    Args:
        buffer: Input text.
        annotations: Markers positioned in *buffer*, or None.
        patterns: Search/replace pairs in priority order.

    Returns:
        New buffer and annotations.  The inputs are not modified.

    Raises:
        AllocationFailedError: The output could not be built.
        SizeMismatchError: The written length differs from the measured one.
    """
    annotations = annotations if annotations is not None else AnnotationSet()
    if not patterns:
        return RewriteResult(buffer=buffer, annotations=annotations, replacements=0)

    matches = list(iter_matches(buffer, patterns))
    if not matches:
        return RewriteResult(buffer=buffer, annotations=annotations, replacements=0)

    output_length = _measure(buffer, matches, patterns)
    logger.debug(
        "Rewrite: %d matches, %d -> %d code units",
        len(matches),
        len(buffer),
        output_length,
    )

    text = buffer.text
    parts: list[str] = []
    in_cursor = 0
    out_cursor = 0
    try:
        for match in matches:
            pattern = patterns[match.pattern_index]
            gap = match.offset - in_cursor
            annotations = shift_positions(
                annotations,
                out_cursor + gap,
                len(pattern.search),
                len(pattern.replace),
            )
            parts.append(text[in_cursor : match.offset])
            parts.append(pattern.replace)
            in_cursor = match.offset + len(pattern.search)
            out_cursor += gap + len(pattern.replace)
        parts.append(text[in_cursor:])
        out_cursor += len(text) - in_cursor
        new_text = "".join(parts)
    except MemoryError as exc:
        msg = f"Could not build rewritten text of {output_length} code units"
        raise AllocationFailedError(msg) from exc

    if len(new_text) != output_length or out_cursor != output_length:
        raise SizeMismatchError("rewrite", output_length, len(new_text))

    return RewriteResult(
        buffer=TextBuffer(new_text),
        annotations=annotations,
        replacements=len(matches),
    )
