"""Tests for the markup data model."""

from __future__ import annotations

import pytest

from cclip.markup.model import (
    Annotation,
    AnnotationKind,
    AnnotationSet,
    Pattern,
    TextBuffer,
)


class TestTextBuffer:
    def test_length_in_code_units(self) -> None:
        assert len(TextBuffer("grüße")) == 5
        assert len(TextBuffer()) == 0

    def test_slice(self) -> None:
        assert TextBuffer("abcdef").slice(1, 4) == "bcd"


class TestAnnotation:
    def test_negative_position_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            Annotation(-1, AnnotationKind.BOLD)

    def test_moved_to_keeps_other_fields(self) -> None:
        original = Annotation(3, AnnotationKind.COLOR, 0x123456, is_closing=True)
        moved = original.moved_to(9)
        assert moved == Annotation(9, AnnotationKind.COLOR, 0x123456, True)
        assert original.position == 3


class TestAnnotationSet:
    """Immutable, insertion-ordered collection."""

    def test_sorted_by_position_is_stable(self) -> None:
        """Annotations at the same offset keep insertion order."""
        close_bold = Annotation(2, AnnotationKind.BOLD, is_closing=True)
        open_italic = Annotation(2, AnnotationKind.ITALIC)
        first = Annotation(0, AnnotationKind.BOLD)
        annotations = AnnotationSet([close_bold, open_italic, first])
        assert annotations.sorted_by_position() == [first, close_bold, open_italic]

    def test_with_added_and_prepend_return_new_sets(self) -> None:
        base = AnnotationSet([Annotation(1, AnnotationKind.BOLD)])
        added = base.with_added(Annotation(2, AnnotationKind.BOLD))
        prepended = base.prepend(Annotation(0, AnnotationKind.BLOCK))
        assert len(base) == 1
        assert added.positions == [1, 2]
        assert prepended.positions == [0, 1]

    def test_replace_positions(self) -> None:
        base = AnnotationSet(Annotation(p, AnnotationKind.BOLD) for p in (1, 5))
        assert base.replace_positions(lambda p: p * 2).positions == [2, 10]

    def test_max_position(self) -> None:
        assert AnnotationSet().max_position() == 0
        annotations = AnnotationSet(
            Annotation(p, AnnotationKind.BOLD) for p in (4, 9, 2)
        )
        assert annotations.max_position() == 9

    def test_equality_and_hash(self) -> None:
        a = AnnotationSet([Annotation(1, AnnotationKind.BOLD)])
        b = AnnotationSet([Annotation(1, AnnotationKind.BOLD)])
        assert a == b
        assert hash(a) == hash(b)
        assert a != AnnotationSet()

    def test_empty_set_is_falsy(self) -> None:
        assert not AnnotationSet()


class TestPattern:
    def test_empty_search_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            Pattern("", "x")

    def test_empty_replace_allowed(self) -> None:
        assert Pattern("\r").replace == ""

    @pytest.mark.parametrize(
        ("search", "replace", "delta"),
        [("\t", "    ", 3), ("\r\n", "\n", -1), ("ab", "cd", 0)],
    )
    def test_delta(self, search: str, replace: str, delta: int) -> None:
        assert Pattern(search, replace).delta == delta
