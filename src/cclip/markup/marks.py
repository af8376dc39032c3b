"""Build annotations by marking occurrences of words in a buffer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cclip.markup.model import Annotation, AnnotationSet, Pattern
from cclip.markup.search import iter_matches

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cclip.markup.model import AnnotationKind, TextBuffer


def mark_occurrences(
    buffer: TextBuffer,
    words: Sequence[str],
    kind: AnnotationKind,
    parameter: int = 0,
    annotations: AnnotationSet | None = None,
) -> AnnotationSet:
    """Wrap every occurrence of *words* in an open/close annotation pair.

    Occurrences are found with the same leftmost, list-priority rule as
    pattern rewriting and never overlap.  New pairs are appended to
    *annotations* (or to an empty set).
    """
    marked = annotations if annotations is not None else AnnotationSet()
    patterns = [Pattern(word) for word in words if word]
    new: list[Annotation] = []
    for match in iter_matches(buffer, patterns):
        end = match.offset + len(patterns[match.pattern_index].search)
        new.append(Annotation(match.offset, kind, parameter))
        new.append(Annotation(end, kind, parameter, is_closing=True))
    return marked.with_added(*new)
