"""Data model shared by the markup pipeline.

A ``TextBuffer`` holds decoded text; an ``AnnotationSet`` holds zero-width
formatting markers positioned in that text.  Both are immutable: every
pipeline stage returns new instances instead of editing its inputs.

Positions are measured in code units, which here are Python code points.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator


@dataclass(frozen=True, slots=True)
class TextBuffer:
    """Immutable, length-aware text in code units."""

    text: str = ""

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]


class AnnotationKind(Enum):
    """Formatting kinds an annotation can carry."""

    BLOCK = "block"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    COLOR = "color"
    BACKGROUND = "background"


@dataclass(frozen=True, slots=True)
class Annotation:
    """A zero-width formatting marker at a code-unit offset.

    Attributes:
        position: Offset in the owning buffer.  ``len(buffer)`` is valid and
            means "after the last character".
        kind: Formatting kind.
        parameter: Kind-specific value (24-bit RGB for colour kinds).
        is_closing: True for the end marker of a pair.
    """

    position: int
    kind: AnnotationKind
    parameter: int = 0
    is_closing: bool = False

    def __post_init__(self) -> None:
        if self.position < 0:
            msg = f"Annotation position must be non-negative, got {self.position}"
            raise ValueError(msg)

    def moved_to(self, position: int) -> Annotation:
        return dataclasses.replace(self, position=position)


class AnnotationSet:
    """Ordered, resizable collection of annotations.

    Insertion order carries no meaning about positions; consumers that need
    positional order call ``sorted_by_position`` which keeps insertion order
    among annotations at the same offset.
    """

    __slots__ = ("_items",)

    def __init__(self, annotations: Iterable[Annotation] = ()) -> None:
        self._items: tuple[Annotation, ...] = tuple(annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Annotation:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnnotationSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"AnnotationSet({list(self._items)!r})"

    @property
    def positions(self) -> list[int]:
        return [a.position for a in self._items]

    def with_added(self, *annotations: Annotation) -> AnnotationSet:
        """Return a new set with *annotations* appended."""
        return AnnotationSet((*self._items, *annotations))

    def prepend(self, *annotations: Annotation) -> AnnotationSet:
        """Return a new set with *annotations* placed before the existing ones."""
        return AnnotationSet((*annotations, *self._items))

    def replace_positions(self, move: Callable[[int], int]) -> AnnotationSet:
        """Return a new set with each position mapped through *move*."""
        moved: list[Annotation] = []
        for a in self._items:
            new_position = move(a.position)
            moved.append(a if new_position == a.position else a.moved_to(new_position))
        return AnnotationSet(moved)

    def sorted_by_position(self) -> list[Annotation]:
        # sorted() is stable, so ties keep insertion order
        return sorted(self._items, key=lambda a: a.position)

    def max_position(self) -> int:
        return max((a.position for a in self._items), default=0)


@dataclass(frozen=True, slots=True)
class Pattern:
    """One search/replace pair.  Position in a pattern list is its priority."""

    search: str
    replace: str = ""

    def __post_init__(self) -> None:
        if not self.search:
            msg = "Pattern search text must not be empty"
            raise ValueError(msg)

    @property
    def delta(self) -> int:
        """Net change in length when this pattern is applied once."""
        return len(self.replace) - len(self.search)


PatternList = Sequence[Pattern]
