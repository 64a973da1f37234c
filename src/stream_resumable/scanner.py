"""Newline-delimited record scanning with byte-offset bookkeeping."""

from __future__ import annotations

import io
from typing import IO, Iterator

import structlog

from .adapter import LogsDecoderAdapter
from .batch import BatchTracker
from .exceptions import EndOfStream, OffsetDiscardError, SourceReadError
from .models import DecoderOption, DecoderOptions, LogBatch, ScanResult

logger = structlog.get_logger(__name__)

# Upper bound on a single read while skipping the initial offset
_DISCARD_CHUNK = 64 * 1024


def buffered_source(source: IO[bytes]) -> IO[bytes]:
    """Wrap raw (unbuffered) streams; use buffered ones as-is."""
    if isinstance(source, io.RawIOBase):
        return io.BufferedReader(source)
    return source


def discard(source: IO[bytes], n: int) -> None:
    """Read and drop exactly ``n`` bytes from ``source``.

    Raises:
        OffsetDiscardError: If the source ends early or fails while reading
    """
    remaining = n
    while remaining > 0:
        try:
            chunk = source.read(min(remaining, _DISCARD_CHUNK))
        except OSError as exc:
            raise OffsetDiscardError(n, n - remaining) from exc
        if not chunk:
            raise OffsetDiscardError(n, n - remaining)
        remaining -= len(chunk)


class LineScanner:
    """Scans newline-delimited records from a byte stream.

    Tracks the byte offset consumed from the stream and tells the caller
    when the current batch should be flushed. Offsets count raw bytes,
    delimiter included, even though returned records are whitespace-trimmed.
    Not safe for concurrent use.

    Example:
        >>> scanner = LineScanner(stream, with_flush_items(100))
        >>> while True:
        ...     result = scanner.scan_string()
        ...     if result.record is not None:
        ...         batch.append(result.record)
        ...     if result.flush:
        ...         ship(batch)
        ...         checkpoint(scanner.offset)
        ...     if result.eof:
        ...         break
    """

    def __init__(self, source: IO[bytes], *options: DecoderOption) -> None:
        """Create a scanner and skip the configured initial offset.

        Args:
            source: Binary stream. Raw streams are wrapped in a BufferedReader,
                buffered ones are used as-is
            *options: Decoder options, applied in order

        Raises:
            OffsetDiscardError: If the initial offset cannot be skipped
        """
        self._tracker = BatchTracker(None, *options)
        self._reader = buffered_source(source)

        initial = self._tracker.options.offset
        if initial > 0:
            discard(self._reader, initial)
            logger.debug("Discarded initial offset", offset=initial)

        self._offset = initial

    def _scan(self) -> tuple[bytes | None, bool, bool]:
        try:
            line = self._reader.readline()
        except OSError as exc:
            raise SourceReadError(self._offset) from exc

        if not line:
            logger.debug("End of stream", offset=self._offset)
            return None, True, True

        # readline() only stops short of the delimiter when the source ends
        eof = not line.endswith(b"\n")

        self._offset += len(line)
        self._tracker.increment_bytes(len(line))
        self._tracker.increment_items(1)

        flush = False
        if self._tracker.should_flush():
            self._tracker.reset()
            flush = True

        return line.strip(), flush, eof

    def scan_bytes(self) -> ScanResult[bytes]:
        """Scan the next record as bytes, delimiter and surrounding whitespace removed.

        The returned bytes are an independent copy; holding on to them does
        not pin the reader's buffer.

        Raises:
            SourceReadError: If the source fails with anything but exhaustion
        """
        record, flush, eof = self._scan()
        return ScanResult(record, flush, eof, self._offset)

    def scan_string(self) -> ScanResult[str]:
        """Scan the next record as text.

        Records are decoded as UTF-8 with replacement characters so that a
        malformed record never costs the offset already consumed.

        Raises:
            SourceReadError: If the source fails with anything but exhaustion
        """
        record, flush, eof = self._scan()
        text = record.decode("utf-8", errors="replace") if record is not None else None
        return ScanResult(text, flush, eof, self._offset)

    @property
    def offset(self) -> int:
        """Bytes consumed from the stream so far, initial offset included."""
        return self._offset

    @property
    def options(self) -> DecoderOptions:
        return self._tracker.options

    def __iter__(self) -> Iterator[ScanResult[str]]:
        """Iterate scan results up to and including the end-of-stream result."""
        while True:
            result = self.scan_string()
            yield result
            if result.eof:
                return

    def __repr__(self) -> str:
        return f"LineScanner(offset={self._offset})"


def new_line_logs_decoder(
    source: IO[bytes], *options: DecoderOption
) -> LogsDecoderAdapter[LogBatch]:
    """Create a logs decoder yielding one LogBatch of lines per call.

    Blank lines are not turned into records but their bytes still count
    toward the offset. The batch containing the last line is returned
    normally; the call after it raises EndOfStream.

    ``offset()`` reports the offset just past the most recently returned
    batch; a read error carries the lines already collected as ``partial``.

    Args:
        source: Binary stream of newline-delimited records
        *options: Decoder options, applied in order

    Raises:
        OffsetDiscardError: If the initial offset cannot be skipped
    """
    scanner = LineScanner(source, *options)
    committed = scanner.offset

    def decode() -> LogBatch:
        nonlocal committed
        batch = LogBatch()
        while True:
            try:
                result = scanner.scan_string()
            except SourceReadError as exc:
                exc.partial = batch
                raise
            if result.record:
                batch.append_body(result.record)
            if result.eof:
                committed = result.offset
                if len(batch) == 0:
                    raise EndOfStream(result.offset)
                return batch
            if result.flush and len(batch) > 0:
                committed = result.offset
                logger.debug("Batch flushed", records=len(batch), offset=result.offset)
                return batch

    return LogsDecoderAdapter(decode, lambda: committed)
