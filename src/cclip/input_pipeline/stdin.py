"""Standard input: chunked reading, codepage selection and decoding.

The codepage follows where input comes from.  Input redirected from a
regular file was most likely written by a non-console program, so the
system ANSI encoding applies.  Pipe input uses the console codepage, asked
for through pywin32 on Windows.  Interactive console input uses the
stream's own encoding.  An explicit override always wins.
"""

# Pattern: Imperative Shell (stream and OS probing feeding the pure pipeline)

from __future__ import annotations

import codecs
import errno
import locale
import logging
import os
import stat
import sys
from typing import IO, Any, Literal

from cclip.errors import InputDecodeError, InputReadError
from cclip.markup.model import TextBuffer

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE_STEP = 4096

StreamKind = Literal["disk", "console", "pipe", "unknown"]

# Symbolic codepage identifiers accepted in place of a codec name
_ANSI_ALIASES = frozenset(("acp", "cp_acp", "thread_acp", "cp_thread_acp"))
_CONSOLE_ALIASES = frozenset(("oemcp", "cp_oemcp"))


def read_stream(
    stream: IO[bytes],
    buffer_size_step: int = DEFAULT_BUFFER_SIZE_STEP,
) -> bytes:
    """Read *stream* to EOF in chunks of *buffer_size_step* bytes.

    A broken pipe on the writer side ends input normally.

    Raises:
        ValueError: *buffer_size_step* is not positive.
        InputReadError: Reading failed for any other reason.
    """
    if buffer_size_step <= 0:
        msg = f"buffer_size_step must be positive, got {buffer_size_step}"
        raise ValueError(msg)

    chunks: list[bytes] = []
    while True:
        try:
            chunk = stream.read(buffer_size_step)
        except BrokenPipeError:
            break
        except OSError as exc:
            if exc.errno == errno.EPIPE:
                break
            msg = f"Could not read standard input: {exc}"
            raise InputReadError(msg) from exc
        if not chunk:
            break
        chunks.append(chunk)

    data = b"".join(chunks)
    logger.debug("Read %d bytes in %d chunks", len(data), len(chunks))
    return data


def stream_kind(stream: IO[Any]) -> StreamKind:
    """Classify what *stream* is connected to."""
    try:
        if stream.isatty():
            return "console"
        mode = os.fstat(stream.fileno()).st_mode
    except (AttributeError, OSError, ValueError):
        return "unknown"
    if stat.S_ISREG(mode):
        return "disk"
    if stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode):
        return "pipe"
    return "unknown"


def _ansi_encoding() -> str:
    return locale.getpreferredencoding(False)


def _console_codepage(platform: str | None = None) -> str | None:
    """Return the console input codepage on Windows, or None.

    A pipe's text encoding is the ANSI locale encoding, so the console
    codepage has to be asked for directly.
    """
    if (platform or sys.platform) != "win32":
        return None

    import pywintypes
    import win32console

    try:
        codepage = win32console.GetConsoleCP()
    except pywintypes.error as exc:
        logger.debug("GetConsoleCP failed: %s", exc)
        return None
    # 0 means the process has no console
    return f"cp{codepage}" if codepage else None


def _console_encoding(stream: IO[Any]) -> str | None:
    encoding = getattr(stream, "encoding", None)
    if encoding:
        return encoding
    try:
        return os.device_encoding(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return None


def normalise_codepage(codepage: str, stream: IO[Any] | None = None) -> str:
    """Turn a user-supplied codepage into a Python codec name.

    Accepts numeric codepages (``850`` -> ``cp850``), the symbolic
    identifiers ``ACP``/``OEMCP`` (optionally ``CP_``-prefixed), and any
    codec name Python knows.

    Raises:
        InputDecodeError: The codepage names no known codec.
    """
    value = codepage.strip()
    lowered = value.lower()
    if lowered in _ANSI_ALIASES:
        value = _ansi_encoding()
    elif lowered in _CONSOLE_ALIASES:
        console = _console_codepage()
        if console is None and stream is not None:
            console = _console_encoding(stream)
        value = console or _ansi_encoding()
    elif value.isdigit():
        value = f"cp{value}"
    elif lowered.startswith("cp_"):
        value = value[3:]

    try:
        return codecs.lookup(value).name
    except LookupError as exc:
        msg = f"Unknown codepage {codepage!r}"
        raise InputDecodeError(msg) from exc


def choose_codepage(stream: IO[Any], override: str | None = None) -> str:
    """Pick the codec used to decode *stream*.

    Args:
        stream: The text-mode standard input (queried for its console
            encoding and what it is connected to).
        override: Explicit codepage from configuration or the command line.
    """
    if override:
        return normalise_codepage(override, stream)

    kind = stream_kind(stream)
    if kind == "disk":
        encoding = _ansi_encoding()
    elif kind == "console":
        # Interactive console input already arrives in the stream's encoding
        encoding = _console_encoding(stream) or _ansi_encoding()
    else:
        encoding = _console_codepage() or _console_encoding(stream)
        encoding = encoding or _ansi_encoding()
    logger.debug("stdin is %s; decoding as %s", kind, encoding)
    try:
        return codecs.lookup(encoding).name
    except LookupError as exc:
        msg = f"No Python codec for the {kind} input codepage {encoding!r}"
        raise InputDecodeError(msg) from exc


def decode_input(data: bytes, codepage: str) -> TextBuffer:
    """Decode *data* strictly into a TextBuffer.

    Raises:
        InputDecodeError: *data* is not valid in *codepage*.
    """
    try:
        text = data.decode(codepage)
    except UnicodeDecodeError as exc:
        msg = f"Input is not valid {codepage}: {exc.reason} at byte {exc.start}"
        raise InputDecodeError(msg) from exc
    except LookupError as exc:
        msg = f"Unknown codepage {codepage!r}"
        raise InputDecodeError(msg) from exc
    return TextBuffer(text)
