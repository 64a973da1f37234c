"""Data models for stream-resumable."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Generic, Iterator, TypeVar

DEFAULT_FLUSH_BYTES = 1024 * 1024
DEFAULT_FLUSH_ITEMS = 1000

RecordT = TypeVar("RecordT", bytes, str)


@dataclass(frozen=True, slots=True)
class DecoderOptions:
    """Batching and resume configuration for a decoding session.

    Attributes:
        flush_bytes: Flush once this many raw bytes were consumed (0 disables)
        flush_items: Flush once this many records were consumed (0 disables)
        offset: Number of bytes to skip before the first record
    """

    flush_bytes: int = DEFAULT_FLUSH_BYTES
    flush_items: int = DEFAULT_FLUSH_ITEMS
    offset: int = 0

    def __post_init__(self) -> None:
        for name in ("flush_bytes", "flush_items", "offset"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")


DecoderOption = Callable[[DecoderOptions], DecoderOptions]


def with_flush_bytes(n: int) -> DecoderOption:
    """Flush after ``n`` bytes. Use ``with_flush_bytes(0)`` to disable."""
    return lambda options: replace(options, flush_bytes=n)


def with_flush_items(n: int) -> DecoderOption:
    """Flush after ``n`` records. Use ``with_flush_items(0)`` to disable."""
    return lambda options: replace(options, flush_items=n)


def with_offset(offset: int) -> DecoderOption:
    """Start reading ``offset`` bytes into the stream."""
    return lambda options: replace(options, offset=offset)


def new_decoder_options(*options: DecoderOption) -> DecoderOptions:
    """Build DecoderOptions from the defaults, applying options in order.

    Later options win when they touch the same field.
    """
    result = DecoderOptions()
    for option in options:
        result = option(result)
    return result


@dataclass(frozen=True, slots=True)
class ScanResult(Generic[RecordT]):
    """Outcome of a single Line Scanner call.

    Attributes:
        record: Trimmed record content, None on clean exhaustion
        flush: True if the current batch should be handed to the caller
        eof: True if the source is exhausted after this call
        offset: Stream offset after this call
    """

    record: RecordT | None
    flush: bool
    eof: bool
    offset: int


@dataclass(slots=True)
class LogRecord:
    """A single decoded log entry.

    Attributes:
        body: Decoded record content
        observed_at: When the decoder produced the record (UTC)
    """

    body: str
    observed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LogBatch:
    """Append-only ordered batch of log records."""

    def __init__(self) -> None:
        self._records: list[LogRecord] = []

    def append(self, record: LogRecord) -> None:
        self._records.append(record)

    def append_body(self, body: str, observed_at: datetime | None = None) -> LogRecord:
        """Append a record built from ``body`` and return it."""
        if observed_at is None:
            record = LogRecord(body)
        else:
            record = LogRecord(body, observed_at)
        self._records.append(record)
        return record

    @property
    def record_count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()

    def bodies(self) -> list[str]:
        """Record bodies in append order."""
        return [record.body for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> LogRecord:
        return self._records[index]

    def __repr__(self) -> str:
        return f"LogBatch(records={len(self._records)})"
