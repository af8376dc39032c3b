"""Exception hierarchy for cclip.

Pipeline errors (allocation, glyph lookup, size accounting, encoding) and
collaborator errors (stdin, clipboard) share the ``CclipError`` base so the
CLI can report any of them the same way.  None of them are retried.
"""

from __future__ import annotations


class CclipError(Exception):
    """Base class for every error cclip reports to the user."""


class AllocationFailedError(CclipError):
    """An output buffer could not be sized or allocated."""


class UnsupportedGlyphError(CclipError):
    """An annotation kind (or parameter) has no markup mapping."""

    def __init__(self, kind: object, parameter: int = 0) -> None:
        self.kind = kind
        self.parameter = parameter
        super().__init__(f"No markup glyph for {kind!s} (parameter={parameter:#x})")


class SizeMismatchError(CclipError):
    """Measured and written sizes disagree.

    This is an internal invariant violation: output is never truncated or
    padded to hide it.
    """

    def __init__(self, stage: str, expected: int, actual: int) -> None:
        self.stage = stage
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{stage}: measured {expected} units but wrote {actual}",
        )


class EncodingFailedError(CclipError):
    """Text could not be re-encoded into the fragment's target encoding."""


class InputReadError(CclipError):
    """Reading standard input failed."""


class InputDecodeError(CclipError):
    """Input bytes could not be decoded with the selected codepage."""


class ClipboardError(CclipError):
    """A clipboard transfer stage failed."""

    def __init__(self, message: str, stage: str) -> None:
        self.stage = stage
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.args[0]} (stage: {self.stage})"
