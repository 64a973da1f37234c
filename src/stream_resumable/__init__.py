"""stream-resumable: batched, resumable decoding of delimited byte streams.

Example:
    >>> from stream_resumable import LineScanner, with_flush_items
    >>> scanner = LineScanner(open("app.log", "rb"), with_flush_items(500))
    >>> for result in scanner:
    ...     if result.record:
    ...         batch.append(result.record)
    ...     if result.flush:
    ...         ship(batch)
    ...         save_checkpoint(result.offset)
    >>>
    >>> # Resume after a crash from the last checkpoint
    >>> scanner = LineScanner(open("app.log", "rb"), with_offset(load_checkpoint()))
    >>>
    >>> # Pattern-delimited text records, one LogBatch per call
    >>> codec = TextLogCodec(TextEncodingConfig(unmarshaling_separator=r"\\n(?=\\d{4}-)"))
    >>> decoder = codec.new_logs_decoder(open("app.log", "rb"))
    >>> for batch in decoder:
    ...     ship(batch)
    ...     save_checkpoint(decoder.offset())
"""

from .adapter import (
    DecoderAdapter,
    LogsDecoder,
    LogsDecoderAdapter,
    MetricsDecoder,
    MetricsDecoderAdapter,
)
from .batch import BatchTracker
from .codec import TextEncodingConfig, TextLogCodec
from .exceptions import (
    EndOfStream,
    OffsetDiscardError,
    RecordTransformError,
    SourceReadError,
    StreamDecodingError,
    TokenizeError,
)
from .models import (
    DecoderOption,
    DecoderOptions,
    LogBatch,
    LogRecord,
    ScanResult,
    new_decoder_options,
    with_flush_bytes,
    with_flush_items,
    with_offset,
)
from .scanner import LineScanner, new_line_logs_decoder
from .tokenizer import (
    NewlineTokenizer,
    PatternTokenizer,
    RemainderTokenizer,
    Tokenizer,
    TokenScanner,
)

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "DecoderOptions",
    "DecoderOption",
    "new_decoder_options",
    "with_flush_bytes",
    "with_flush_items",
    "with_offset",
    # Scanning
    "BatchTracker",
    "LineScanner",
    "ScanResult",
    "new_line_logs_decoder",
    # Tokenizing
    "Tokenizer",
    "NewlineTokenizer",
    "PatternTokenizer",
    "RemainderTokenizer",
    "TokenScanner",
    # Decoders
    "DecoderAdapter",
    "LogsDecoder",
    "LogsDecoderAdapter",
    "MetricsDecoder",
    "MetricsDecoderAdapter",
    "TextEncodingConfig",
    "TextLogCodec",
    "LogBatch",
    "LogRecord",
    # Exceptions
    "StreamDecodingError",
    "OffsetDiscardError",
    "SourceReadError",
    "TokenizeError",
    "RecordTransformError",
    "EndOfStream",
]
