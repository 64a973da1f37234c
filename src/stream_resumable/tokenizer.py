"""Pluggable record-boundary strategies and the buffered scan loop that drives them."""

from __future__ import annotations

import re
from typing import IO, Protocol

from .exceptions import SourceReadError, TokenizeError

DEFAULT_CHUNK_SIZE = 64 * 1024

Buffer = bytes | bytearray


class Tokenizer(Protocol):
    """Finds the next record boundary in buffered stream data.

    split() returns ``(advance, token)``: how many bytes of ``data`` to
    consume, and the token they produced. ``(0, None)`` asks for more data;
    at EOF it means nothing is left.
    """

    def split(self, data: Buffer, at_eof: bool) -> tuple[int, bytes | None]: ...


class NewlineTokenizer:
    """Splits on a single ``\\n`` byte; the remainder at EOF is the last token."""

    def split(self, data: Buffer, at_eof: bool) -> tuple[int, bytes | None]:
        if at_eof and not data:
            return 0, None
        i = data.find(b"\n")
        if i >= 0:
            return i + 1, bytes(data[:i])
        if at_eof:
            return len(data), bytes(data)
        return 0, None


class PatternTokenizer:
    """Splits on the first match of a regular expression.

    Everything before the match is the token; the match itself is consumed
    but not returned. At EOF the unmatched remainder is the last token.
    """

    def __init__(self, pattern: str | bytes | re.Pattern) -> None:
        """Create a tokenizer that splits on ``pattern``.

        Args:
            pattern: Separator regex. Text patterns are matched against the
                UTF-8 encoding of the pattern source
        """
        if isinstance(pattern, re.Pattern):
            flags = pattern.flags & ~re.UNICODE
            source = pattern.pattern
        else:
            flags = 0
            source = pattern
        if isinstance(source, str):
            source = source.encode("utf-8")
        self._pattern = re.compile(source, flags)

    @property
    def pattern(self) -> re.Pattern:
        return self._pattern

    def split(self, data: Buffer, at_eof: bool) -> tuple[int, bytes | None]:
        if at_eof and not data:
            return 0, None
        match = self._pattern.search(data)
        if match is not None:
            if match.end() == match.start():
                raise ValueError(
                    f"separator {self._pattern.pattern!r} matched an empty string"
                )
            return match.end(), bytes(data[: match.start()])
        if at_eof:
            return len(data), bytes(data)
        return 0, None

    def __repr__(self) -> str:
        return f"PatternTokenizer({self._pattern.pattern!r})"


class RemainderTokenizer:
    """Produces nothing until EOF, then the whole buffered input as one token."""

    def split(self, data: Buffer, at_eof: bool) -> tuple[int, bytes | None]:
        if at_eof and data:
            return len(data), bytes(data)
        return 0, None


class TokenScanner:
    """Pulls chunks from a byte stream and cuts them into tokens.

    The offset is the initial offset plus every byte a tokenizer asked to
    advance over, separators included. Not safe for concurrent use.
    """

    def __init__(
        self,
        source: IO[bytes],
        tokenizer: Tokenizer,
        offset: int = 0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
        self._source = source
        self._tokenizer = tokenizer
        self._offset = offset
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._at_eof = False

    def _fill(self) -> None:
        try:
            chunk = self._source.read(self._chunk_size)
        except OSError as exc:
            raise SourceReadError(self._offset) from exc
        if chunk:
            self._buffer += chunk
        else:
            self._at_eof = True

    def next_token(self) -> bytes | None:
        """Return the next token, or None once the stream is exhausted.

        Raises:
            SourceReadError: If the source fails with anything but exhaustion
            TokenizeError: If the tokenizer rejects the buffered data
        """
        while True:
            if self._buffer or self._at_eof:
                try:
                    advance, token = self._tokenizer.split(self._buffer, self._at_eof)
                except ValueError as exc:
                    raise TokenizeError(self._offset, str(exc)) from exc

                if advance > len(self._buffer) or advance < 0:
                    raise TokenizeError(
                        self._offset,
                        f"advance {advance} outside buffered {len(self._buffer)} bytes",
                    )
                if advance:
                    del self._buffer[:advance]
                    self._offset += advance
                if token is not None:
                    if not advance:
                        raise TokenizeError(self._offset, "token produced without progress")
                    return token
                if advance:
                    continue
                if self._at_eof:
                    return None
            self._fill()

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def exhausted(self) -> bool:
        """True once the source reported EOF and no buffered data is left."""
        return self._at_eof and not self._buffer
