"""Tests for BatchTracker and decoder options."""

import dataclasses

import pytest

from stream_resumable import (
    BatchTracker,
    DecoderOptions,
    new_decoder_options,
    with_flush_bytes,
    with_flush_items,
    with_offset,
)


class TestDecoderOptions:
    """Tests for option defaults and overrides."""

    def test_defaults(self):
        """Defaults are 1 MiB, 1000 items and offset 0."""
        options = new_decoder_options()

        assert options.flush_bytes == 1024 * 1024
        assert options.flush_items == 1000
        assert options.offset == 0

    def test_overrides(self):
        """Each option function replaces one field."""
        options = new_decoder_options(
            with_flush_bytes(100), with_flush_items(50), with_offset(50)
        )

        assert options.flush_bytes == 100
        assert options.flush_items == 50
        assert options.offset == 50

    def test_later_option_wins(self):
        """Later options override earlier ones for the same field."""
        options = new_decoder_options(with_flush_items(10), with_flush_items(3))
        assert options.flush_items == 3

    def test_only_named_fields_change(self):
        """Options leave untouched fields at their defaults."""
        options = new_decoder_options(with_offset(7))
        assert options == DecoderOptions(offset=7)

    def test_keyword_construction(self):
        """Options can be built from named fields directly."""
        options = DecoderOptions(flush_bytes=0, flush_items=0)
        assert options.flush_bytes == 0
        assert options.flush_items == 0
        assert options.offset == 0

    @pytest.mark.parametrize("field", ["flush_bytes", "flush_items", "offset"])
    def test_rejects_negative(self, field: str):
        """Negative values are rejected."""
        with pytest.raises(ValueError, match=field):
            DecoderOptions(**{field: -1})

    def test_rejects_non_int(self):
        """Non-integer values are rejected."""
        with pytest.raises(ValueError):
            DecoderOptions(flush_bytes=1.5)  # type: ignore[arg-type]

    def test_immutable(self):
        """Options cannot be mutated after construction."""
        options = DecoderOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.flush_items = 1  # type: ignore[misc]


class TestShouldFlush:
    """Tests for flush threshold evaluation."""

    def test_bytes_then_items(self):
        """Either threshold triggers, and reset clears the signal."""
        tracker = BatchTracker(None, with_flush_bytes(5), with_flush_items(5))

        assert not tracker.should_flush()

        tracker.increment_bytes(5)
        assert tracker.should_flush()

        tracker.reset()
        assert not tracker.should_flush()

        tracker.increment_items(5)
        assert tracker.should_flush()

    def test_below_threshold(self):
        """Counts below both thresholds do not flush."""
        tracker = BatchTracker(DecoderOptions(flush_bytes=10, flush_items=3))
        tracker.increment_bytes(9)
        tracker.increment_items(2)
        assert not tracker.should_flush()

    def test_exceeding_threshold(self):
        """Counts past the threshold still flush."""
        tracker = BatchTracker(DecoderOptions(flush_bytes=10, flush_items=0))
        tracker.increment_bytes(25)
        assert tracker.should_flush()

    def test_signal_persists_until_reset(self):
        """should_flush() does not reset the counters itself."""
        tracker = BatchTracker(DecoderOptions(flush_items=1))
        tracker.increment_items(1)

        assert tracker.should_flush()
        assert tracker.should_flush()
        assert tracker.current_items == 1

    def test_both_disabled_never_flushes(self):
        """With both thresholds at 0 counters alone never flush."""
        tracker = BatchTracker(DecoderOptions(flush_bytes=0, flush_items=0))
        for _ in range(1000):
            tracker.increment_bytes(1024)
            tracker.increment_items(1)
            assert not tracker.should_flush()

    def test_items_disabled_bytes_enabled(self):
        """A disabled item threshold does not block the byte threshold."""
        tracker = BatchTracker(DecoderOptions(flush_bytes=4, flush_items=0))
        tracker.increment_items(100)
        assert not tracker.should_flush()

        tracker.increment_bytes(4)
        assert tracker.should_flush()

    def test_interleaved_increments(self):
        """Any interleaving of increments flushes exactly at the threshold."""
        tracker = BatchTracker(DecoderOptions(flush_bytes=10, flush_items=3))
        tracker.increment_bytes(3)
        tracker.increment_items(1)
        tracker.increment_bytes(3)
        tracker.increment_items(1)
        assert not tracker.should_flush()

        tracker.increment_items(1)
        assert tracker.should_flush()

    def test_reset_zeroes_counters(self):
        """reset() zeroes both counters."""
        tracker = BatchTracker()
        tracker.increment_bytes(42)
        tracker.increment_items(3)

        tracker.reset()

        assert tracker.current_bytes == 0
        assert tracker.current_items == 0


class TestTrackerOptions:
    """Tests for how the tracker resolves its options."""

    def test_default_options(self):
        """Without arguments the library defaults apply."""
        assert BatchTracker().options == DecoderOptions()

    def test_option_funcs_apply_on_top_of_base(self):
        """Option functions are applied after the base options."""
        tracker = BatchTracker(DecoderOptions(flush_items=5), with_flush_bytes(0))

        assert tracker.options.flush_items == 5
        assert tracker.options.flush_bytes == 0
