"""Leftmost, priority-ordered multi-pattern search.

The earliest offset at which any pattern occurs wins.  Among patterns that
match at that offset, the one listed first wins, even when a later pattern
would match a longer run of text.  Callers rely on the exact matched length
for position bookkeeping, so this is never "upgraded" to leftmost-longest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cclip.markup.model import PatternList, TextBuffer


@dataclass(frozen=True, slots=True)
class Match:
    """Where a pattern matched and which one."""

    offset: int
    pattern_index: int


def find(buffer: TextBuffer, from_offset: int, patterns: PatternList) -> Match | None:
    """Find the leftmost, highest-priority pattern occurrence.

    Args:
        buffer: Text to search.
        from_offset: First candidate offset (``0 <= from_offset <= len``).
        patterns: Patterns in priority order.

    Returns:
        The match, or None when no pattern occurs in
        ``[from_offset, len(buffer))``.

    Example:
        >>> from cclip.markup.model import Pattern, TextBuffer
        >>> find(TextBuffer("xaby"), 0, [Pattern("ab"), Pattern("a")])
        Match(offset=1, pattern_index=0)
    """
    if not 0 <= from_offset <= len(buffer):
        msg = f"from_offset {from_offset} outside buffer of length {len(buffer)}"
        raise ValueError(msg)

    text = buffer.text
    best: Match | None = None
    for index, pattern in enumerate(patterns):
        if best is None:
            offset = text.find(pattern.search, from_offset)
        else:
            # Only an occurrence starting before the current best can win:
            # equal offsets lose on priority, later ones lose on position.
            limit = best.offset + len(pattern.search) - 1
            offset = text.find(pattern.search, from_offset, limit)
        if offset != -1:
            best = Match(offset=offset, pattern_index=index)
    return best


def iter_matches(buffer: TextBuffer, patterns: PatternList) -> Iterator[Match]:
    """Yield successive non-overlapping matches from the start of *buffer*.

    After each match the next search begins right after its search text.
    """
    if not patterns:
        return
    cursor = 0
    while cursor < len(buffer):
        match = find(buffer, cursor, patterns)
        if match is None:
            return
        yield match
        cursor = match.offset + len(patterns[match.pattern_index].search)
