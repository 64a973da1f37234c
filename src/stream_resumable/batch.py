"""Flush-threshold tracking for batched stream decoding."""

from __future__ import annotations

from .models import DecoderOption, DecoderOptions, new_decoder_options


class BatchTracker:
    """Decides when an in-progress batch is full.

    Accumulates byte and item counts and compares them against the
    configured thresholds. Either enabled threshold alone triggers a flush.
    Not safe for concurrent use.

    Example:
        >>> tracker = BatchTracker(DecoderOptions(flush_items=2))
        >>> tracker.increment_items(2)
        >>> if tracker.should_flush():
        ...     emit(batch)
        ...     tracker.reset()
    """

    def __init__(
        self, options: DecoderOptions | None = None, *option_funcs: DecoderOption
    ) -> None:
        """Create a tracker.

        Args:
            options: Base options. Defaults to the library defaults
            *option_funcs: Option functions applied in order on top of ``options``
        """
        resolved = options if options is not None else new_decoder_options()
        for option in option_funcs:
            resolved = option(resolved)
        self._options = resolved
        self._current_bytes = 0
        self._current_items = 0

    def increment_bytes(self, n: int) -> None:
        """Add ``n`` to the current byte count."""
        self._current_bytes += n

    def increment_items(self, n: int) -> None:
        """Add ``n`` to the current item count."""
        self._current_items += n

    def should_flush(self) -> bool:
        """True if either enabled threshold has been reached.

        Does not reset the counters: call reset() once the flush has been
        acted on, otherwise the same data keeps signalling a flush.
        """
        if self._options.flush_bytes > 0 and self._current_bytes >= self._options.flush_bytes:
            return True
        if self._options.flush_items > 0 and self._current_items >= self._options.flush_items:
            return True
        return False

    def reset(self) -> None:
        """Zero both counters to start tracking the next batch."""
        self._current_bytes = 0
        self._current_items = 0

    @property
    def current_bytes(self) -> int:
        return self._current_bytes

    @property
    def current_items(self) -> int:
        return self._current_items

    @property
    def options(self) -> DecoderOptions:
        """The options this tracker was built with."""
        return self._options

    def __repr__(self) -> str:
        return (
            f"BatchTracker(bytes={self._current_bytes}, items={self._current_items}, "
            f"flush_bytes={self._options.flush_bytes}, flush_items={self._options.flush_items})"
        )
