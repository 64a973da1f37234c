"""Tests for decoder adapters."""

import pytest

from stream_resumable import (
    DecoderAdapter,
    EndOfStream,
    LogsDecoderAdapter,
    MetricsDecoderAdapter,
)


class ScriptedSource:
    """Returns queued batches, then raises EndOfStream."""

    def __init__(self, batches: list[list[int]]) -> None:
        self.batches = list(batches)
        self.position = 0
        self.calls = 0

    def decode(self) -> list[int]:
        self.calls += 1
        if not self.batches:
            raise EndOfStream(self.position)
        batch = self.batches.pop(0)
        self.position += len(batch)
        return batch

    def offset(self) -> int:
        return self.position


class TestDecoderAdapter:
    """Tests for the generic adapter."""

    def test_delegates_decode_and_offset(self):
        """decode() and offset() call straight through."""
        source = ScriptedSource([[1, 2], [3]])
        adapter = DecoderAdapter(source.decode, source.offset)

        assert adapter.offset() == 0
        assert adapter.decode() == [1, 2]
        assert adapter.offset() == 2
        assert adapter.decode() == [3]
        assert adapter.offset() == 3

        with pytest.raises(EndOfStream):
            adapter.decode()

    def test_no_buffering(self):
        """Each decode() is exactly one call to the bound function."""
        source = ScriptedSource([[1], [2]])
        adapter = DecoderAdapter(source.decode, source.offset)

        adapter.decode()
        assert source.calls == 1

    def test_iteration_stops_at_end_of_stream(self):
        """Iterating yields every batch and swallows only EndOfStream."""
        source = ScriptedSource([[1], [2, 3], [4]])
        adapter = DecoderAdapter(source.decode, source.offset)

        assert list(adapter) == [[1], [2, 3], [4]]
        assert source.calls == 4

    def test_iteration_propagates_errors(self):
        """Other errors escape iteration."""

        def decode() -> list[int]:
            raise RuntimeError("boom")

        adapter = DecoderAdapter(decode, lambda: 0)
        with pytest.raises(RuntimeError, match="boom"):
            list(adapter)


class TestTypedAdapters:
    """Tests for the logs and metrics shapes."""

    def test_logs_adapter(self):
        """decode_logs() is the bound decode function."""
        source = ScriptedSource([["log"]])
        adapter = LogsDecoderAdapter(source.decode, source.offset)

        assert adapter.decode_logs() == ["log"]
        assert adapter.offset() == 1
        with pytest.raises(EndOfStream):
            adapter.decode_logs()

    def test_metrics_adapter(self):
        """decode_metrics() is the bound decode function."""
        source = ScriptedSource([[0.5, 1.5]])
        adapter = MetricsDecoderAdapter(source.decode, source.offset)

        assert adapter.decode_metrics() == [0.5, 1.5]
        assert adapter.offset() == 2
        with pytest.raises(EndOfStream):
            adapter.decode_metrics()
