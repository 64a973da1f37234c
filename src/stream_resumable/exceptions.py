"""Custom exceptions for stream-resumable."""

from __future__ import annotations

from typing import Any


class StreamDecodingError(Exception):
    """Base class for errors raised while decoding a stream.

    Every error carries the last known-good offset so the caller can resume
    a fresh session from it. Errors raised by a decoder's decode call also
    carry the records that call had already decoded: deliver ``partial``,
    then resume from ``offset``, and no record is lost or repeated.

    Attributes:
        offset: Offset just past the last record the caller has received
            (returned batches plus ``partial``, where present)
    """

    def __init__(self, message: str, offset: int) -> None:
        self.offset = offset
        super().__init__(message)


class OffsetDiscardError(StreamDecodingError):
    """Initial offset could not be skipped.

    Raised at construction when the source holds fewer bytes than the
    requested offset, or fails while they are being discarded. The session
    is never created.

    Attributes:
        offset: The requested initial offset
        discarded: Number of bytes actually discarded before the failure
    """

    def __init__(self, offset: int, discarded: int) -> None:
        self.discarded = discarded
        super().__init__(
            f"failed to discard offset {offset} (discarded {discarded} bytes)",
            offset,
        )


class SourceReadError(StreamDecodingError):
    """The byte source failed with something other than clean exhaustion.

    The underlying error is chained as ``__cause__``.

    Attributes:
        offset: Last offset consumed before the failure
        partial: Records accumulated by the failing decode call, if any
    """

    def __init__(self, offset: int, partial: Any = None) -> None:
        self.partial = partial
        super().__init__(f"stream read failed at offset {offset}", offset)


class TokenizeError(StreamDecodingError):
    """The tokenizer rejected the buffered data.

    Attributes:
        offset: Last offset consumed before the failure
        partial: Records accumulated by the failing decode call
    """

    def __init__(self, offset: int, reason: str, partial: Any = None) -> None:
        self.partial = partial
        super().__init__(f"tokenizer failed at offset {offset}: {reason}", offset)


class RecordTransformError(StreamDecodingError):
    """The per-record transformation failed.

    The decode call in progress is abandoned; batches already returned to
    the caller are unaffected. Resuming from ``offset`` retries the bad
    record, resuming from ``record_end`` skips it.

    Attributes:
        offset: Offset where the failing record starts
        record_end: Offset just past the failing record
        partial: Records accumulated by the failing decode call
    """

    def __init__(self, offset: int, record_end: int, partial: Any = None) -> None:
        self.record_end = record_end
        self.partial = partial
        super().__init__(
            f"failed to transform record at offsets {offset}-{record_end}", offset
        )


class EndOfStream(Exception):
    """The source is fully consumed.

    Not a failure: this is the terminal signal of a decoding session. It is
    intentionally not a StreamDecodingError so that ``except
    StreamDecodingError`` never hides it.

    Attributes:
        offset: Final stream offset
    """

    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"end of stream at offset {offset}")
