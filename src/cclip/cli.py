"""Command-line entry point: copy standard input to the clipboard.

Usage:
    some-command | cclip [options]

Examples:
    dir | cclip                               Copy as Unicode text
    type notes.txt | cclip -c 850             Decode input as codepage 850
    git log | cclip --html --bold fix         HTML fragment, "fix" in bold
    cat a.txt | cclip -r "\\t" "    "          Expand tabs before copying
"""

from __future__ import annotations

import argparse
import re
import sys
from typing import IO, TYPE_CHECKING

from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from cclip import __version__, setup_logging
from cclip.clipboard import StreamSink, get_clipboard, transfer
from cclip.config import get_settings
from cclip.errors import CclipError
from cclip.input_pipeline.stdin import choose_codepage, decode_input, read_stream
from cclip.markup.glyphs import parse_rgb
from cclip.markup.model import AnnotationKind, Pattern
from cclip.pipeline import MarkRequest, build_payload

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cclip.config import Settings

console = Console(stderr=True)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}
_ESCAPE_PATTERN = re.compile(r"\\([ntr\\])")


def unescape(value: str) -> str:
    r"""Expand ``\n``, ``\t``, ``\r`` and ``\\`` in a command-line argument."""
    return _ESCAPE_PATTERN.sub(lambda m: _ESCAPES[m.group(1)], value)


def _word_colour(value: str) -> tuple[str, int]:
    """argparse type for ``WORD=RRGGBB``."""
    word, sep, colour = value.rpartition("=")
    if not sep or not word:
        msg = f"expected WORD=RRGGBB, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return unescape(word), parse_rgb(colour)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number <= 0:
        msg = f"expected a positive integer, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for cclip."""
    parser = argparse.ArgumentParser(
        prog="cclip",
        description="Copy standard input to the clipboard as Unicode text "
        "or as an HTML fragment.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    inp = parser.add_argument_group("input")
    inp.add_argument(
        "-c",
        "--codepage",
        help="Input codepage: a number (850), ACP, OEMCP or a codec name "
        "(default: detected from how stdin is connected)",
    )
    inp.add_argument(
        "--buffer-step",
        type=_positive_int,
        help="Read standard input in chunks of this many bytes",
    )

    out = parser.add_argument_group("output")
    out.add_argument(
        "--html",
        action="store_true",
        default=None,
        help='Copy as an "HTML Format" fragment instead of plain text',
    )
    out.add_argument(
        "--stdout",
        action="store_true",
        help="Write the payload to standard output instead of the clipboard",
    )

    edit = parser.add_argument_group("rewriting")
    edit.add_argument(
        "-r",
        "--replace",
        nargs=2,
        action="append",
        default=[],
        metavar=("SEARCH", "REPLACE"),
        help="Replace SEARCH with REPLACE (repeatable; earlier wins on ties; "
        "\\n \\t \\r \\\\ are expanded)",
    )

    fmt = parser.add_argument_group("formatting (with --html)")
    fmt.add_argument("--bold", action="append", default=[], metavar="WORD")
    fmt.add_argument("--italic", action="append", default=[], metavar="WORD")
    fmt.add_argument("--underline", action="append", default=[], metavar="WORD")
    fmt.add_argument(
        "--color",
        action="append",
        default=[],
        type=_word_colour,
        metavar="WORD=RRGGBB",
        help="Colour occurrences of WORD",
    )
    fmt.add_argument(
        "--background",
        action="append",
        default=[],
        type=_word_colour,
        metavar="WORD=RRGGBB",
        help="Highlight occurrences of WORD",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="More log output on stderr (-v info, -vv debug)",
    )
    return parser


def _patterns(args: argparse.Namespace, settings: Settings) -> list[Pattern]:
    """Configured patterns first, then command-line ones."""
    patterns = settings.patterns()
    for search, replace in args.replace:
        search = unescape(search)
        if not search:
            msg = "--replace SEARCH must not be empty"
            raise argparse.ArgumentTypeError(msg)
        patterns.append(Pattern(search, unescape(replace)))
    return patterns


def _marks(args: argparse.Namespace) -> list[MarkRequest]:
    marks: list[MarkRequest] = []
    for words, kind in (
        (args.bold, AnnotationKind.BOLD),
        (args.italic, AnnotationKind.ITALIC),
        (args.underline, AnnotationKind.UNDERLINE),
    ):
        if words:
            marks.append(MarkRequest(tuple(unescape(w) for w in words), kind))
    for pairs, kind in (
        (args.color, AnnotationKind.COLOR),
        (args.background, AnnotationKind.BACKGROUND),
    ):
        marks.extend(MarkRequest((word,), kind, rgb) for word, rgb in pairs)
    return marks


def _log_level(verbose: int, configured: str) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return configured


def _report_error(message: str) -> None:
    console.print(Text.assemble(("Error: ", "bold red"), message))


def run(
    argv: Sequence[str] | None = None,
    stdin: IO[str] | None = None,
    stdout: IO[bytes] | None = None,
) -> int:
    """Run cclip and return the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        _report_error(f"Invalid configuration: {exc}")
        return 1
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout.buffer

    setup_logging(_log_level(args.verbose, settings.log.level), settings.log.log_dir)

    try:
        patterns = _patterns(args, settings)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    html = settings.clipboard.html if args.html is None else args.html
    step = args.buffer_step or settings.input.buffer_size_step

    try:
        codepage = choose_codepage(stdin, args.codepage or settings.input.codepage)
        data = read_stream(stdin.buffer, step)
        buffer = decode_input(data, codepage)
        payload = build_payload(
            buffer,
            patterns=patterns,
            marks=_marks(args),
            html=html,
            encoding=settings.markup.encoding,
        )
        sink = StreamSink(stdout) if args.stdout else get_clipboard()
        transfer(sink, payload.format, payload.data)
    except CclipError as exc:
        _report_error(str(exc))
        return 1
    return 0


def main() -> None:
    """Entry point for the ``cclip`` console script."""
    sys.exit(run())
