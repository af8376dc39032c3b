"""Standard input pipeline: reading, codepage selection and decoding."""

from cclip.input_pipeline.stdin import (
    DEFAULT_BUFFER_SIZE_STEP,
    StreamKind,
    choose_codepage,
    decode_input,
    normalise_codepage,
    read_stream,
    stream_kind,
)

__all__ = [
    "DEFAULT_BUFFER_SIZE_STEP",
    "StreamKind",
    "choose_codepage",
    "decode_input",
    "normalise_codepage",
    "read_stream",
    "stream_kind",
]
