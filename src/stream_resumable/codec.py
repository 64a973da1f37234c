"""Plain-text log codec with configurable record separators."""

from __future__ import annotations

import codecs
import io
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import IO, Callable, Iterable

import structlog

from .adapter import LogsDecoderAdapter
from .batch import BatchTracker
from .exceptions import (
    EndOfStream,
    RecordTransformError,
    SourceReadError,
    TokenizeError,
)
from .models import (
    DecoderOption,
    LogBatch,
    LogRecord,
    with_flush_bytes,
    with_flush_items,
    with_offset,
)
from .scanner import buffered_source, discard
from .tokenizer import NewlineTokenizer, PatternTokenizer, RemainderTokenizer, Tokenizer, TokenScanner

logger = structlog.get_logger(__name__)

RecordTransform = Callable[[bytes], str]


@dataclass(frozen=True)
class TextEncodingConfig:
    """Configuration for TextLogCodec.

    Attributes:
        encoding: Character set of incoming records (any name the codecs
            registry knows)
        marshaling_separator: Written between records when marshaling
        unmarshaling_separator: Regex separating records when decoding.
            None or empty decodes the whole input as a single record
    """

    encoding: str = "utf-8"
    marshaling_separator: str = "\n"
    unmarshaling_separator: str | None = r"\r?\n"

    def __post_init__(self) -> None:
        try:
            codecs.lookup(self.encoding)
        except LookupError as exc:
            raise ValueError(f"unsupported encoding: {self.encoding!r}") from exc
        if self.unmarshaling_separator:
            try:
                re.compile(self.unmarshaling_separator)
            except re.error as exc:
                raise ValueError(
                    f"invalid unmarshaling_separator {self.unmarshaling_separator!r}: {exc}"
                ) from exc

    def tokenizer(self) -> Tokenizer:
        """Tokenizer matching the configured unmarshaling separator."""
        if not self.unmarshaling_separator:
            return RemainderTokenizer()
        if self.unmarshaling_separator == "\n":
            return NewlineTokenizer()
        return PatternTokenizer(self.unmarshaling_separator)


class TextLogCodec:
    """Decodes byte streams into batches of text log records and back.

    Offsets count raw bytes consumed from the stream, separators included.
    Batch thresholds count records and token bytes before the record
    transformation; separators are not counted toward flush_bytes.

    Example:
        >>> codec = TextLogCodec(TextEncodingConfig(unmarshaling_separator=r"\\n\\n"))
        >>> decoder = codec.new_logs_decoder(stream, with_flush_items(500))
        >>> for batch in decoder:
        ...     ship(batch)
        ...     checkpoint(decoder.offset())
    """

    def __init__(
        self,
        config: TextEncodingConfig | None = None,
        transform: RecordTransform | None = None,
    ) -> None:
        """Create a codec.

        Args:
            config: Separators and encoding. Defaults to TextEncodingConfig()
            transform: Converts each raw token into record text. Defaults to
                decoding with ``config.encoding``. Should raise ValueError
                (UnicodeError included) on malformed input
        """
        self._config = config or TextEncodingConfig()
        self._transform = transform or self._decode_token

    @property
    def config(self) -> TextEncodingConfig:
        return self._config

    def _decode_token(self, token: bytes) -> str:
        return token.decode(self._config.encoding)

    def new_logs_decoder(
        self, source: IO[bytes], *options: DecoderOption
    ) -> LogsDecoderAdapter[LogBatch]:
        """Create a decoder yielding one LogBatch per call.

        ``offset()`` reports the offset just past the most recently returned
        batch. A failing call attaches the records it already decoded to the
        error as ``partial``.

        Args:
            source: Binary stream to decode
            *options: Decoder options, applied in order

        Raises:
            OffsetDiscardError: If the initial offset cannot be skipped
        """
        tracker = BatchTracker(None, *options)
        reader = buffered_source(source)

        initial = tracker.options.offset
        if initial > 0:
            discard(reader, initial)
            logger.debug("Discarded initial offset", offset=initial)

        tokens = TokenScanner(reader, self._config.tokenizer(), offset=initial)
        committed = initial

        def decode() -> LogBatch:
            nonlocal committed
            batch = LogBatch()
            now = datetime.now(timezone.utc)

            while True:
                start = tokens.offset
                try:
                    token = tokens.next_token()
                except (SourceReadError, TokenizeError) as exc:
                    tracker.reset()
                    exc.partial = batch
                    raise
                if token is None:
                    break
                if not token:
                    continue

                try:
                    body = self._transform(token)
                except ValueError as exc:
                    tracker.reset()
                    raise RecordTransformError(start, tokens.offset, batch) from exc
                batch.append(LogRecord(body, now))

                tracker.increment_items(1)
                tracker.increment_bytes(len(token))
                if tracker.should_flush():
                    tracker.reset()
                    committed = tokens.offset
                    logger.debug("Batch flushed", records=len(batch), offset=committed)
                    return batch

            committed = tokens.offset
            if len(batch) == 0:
                logger.debug("End of stream", offset=committed)
                raise EndOfStream(committed)
            return batch

        return LogsDecoderAdapter(decode, lambda: committed)

    def unmarshal_logs(self, buf: bytes) -> LogBatch:
        """Decode an in-memory payload into a single batch.

        An empty payload yields an empty batch.
        """
        decoder = self.new_logs_decoder(
            io.BytesIO(buf), with_offset(0), with_flush_bytes(0), with_flush_items(0)
        )
        try:
            return decoder.decode_logs()
        except EndOfStream:
            return LogBatch()

    def marshal_logs(self, records: Iterable[LogRecord]) -> bytes:
        """Join record bodies with the marshaling separator, UTF-8 encoded.

        The separator only appears between records, never before the first
        or after the last.
        """
        separator = self._config.marshaling_separator.encode("utf-8")
        return separator.join(record.body.encode("utf-8") for record in records)

    def __repr__(self) -> str:
        return (
            f"TextLogCodec(encoding={self._config.encoding!r}, "
            f"unmarshaling_separator={self._config.unmarshaling_separator!r})"
        )
