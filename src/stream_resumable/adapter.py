"""Decoder handles composed from a decode callable and an offset callable."""

from __future__ import annotations

from typing import Callable, Generic, Iterator, Protocol, TypeVar

from .exceptions import EndOfStream

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class LogsDecoder(Protocol[T_co]):
    """Yields one batch of logs per decode_logs() call.

    The last batch is returned normally; EndOfStream is raised by the
    following call. offset() reports the offset after the most recent batch
    (or the initial offset) and can be passed back as ``with_offset`` to
    resume after a failure.
    """

    def decode_logs(self) -> T_co: ...

    def offset(self) -> int: ...


class MetricsDecoder(Protocol[T_co]):
    """Yields one batch of metrics per decode_metrics() call."""

    def decode_metrics(self) -> T_co: ...

    def offset(self) -> int: ...


class DecoderAdapter(Generic[T]):
    """Binds a decode callable and an offset callable into one handle.

    Performs no buffering of its own: the decode callable must return the
    last real batch normally and raise EndOfStream on the call after it.

    Example:
        >>> decoder = DecoderAdapter(decode_next, lambda: scanner.offset)
        >>> for batch in decoder:
        ...     ship(batch)
        ...     checkpoint(decoder.offset())
    """

    __slots__ = ("_decode", "_offset")

    def __init__(self, decode: Callable[[], T], offset: Callable[[], int]) -> None:
        self._decode = decode
        self._offset = offset

    def decode(self) -> T:
        """Produce the next batch.

        Raises:
            EndOfStream: If the previous call returned the last batch
        """
        return self._decode()

    def offset(self) -> int:
        """Current stream offset."""
        return self._offset()

    def __iter__(self) -> Iterator[T]:
        """Iterate batches until the stream ends."""
        while True:
            try:
                batch = self._decode()
            except EndOfStream:
                return
            yield batch


class LogsDecoderAdapter(DecoderAdapter[T]):
    """DecoderAdapter exposing the logs decoder shape."""

    __slots__ = ()

    def decode_logs(self) -> T:
        return self._decode()


class MetricsDecoderAdapter(DecoderAdapter[T]):
    """DecoderAdapter exposing the metrics decoder shape."""

    __slots__ = ()

    def decode_metrics(self) -> T:
        return self._decode()
