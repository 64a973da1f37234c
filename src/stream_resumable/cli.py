"""Command-line interface for stream-resumable."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from contextlib import contextmanager
from typing import IO, Iterator, NoReturn

import structlog

from .adapter import LogsDecoderAdapter
from .codec import TextEncodingConfig, TextLogCodec
from .exceptions import OffsetDiscardError, StreamDecodingError
from .models import (
    DEFAULT_FLUSH_BYTES,
    DEFAULT_FLUSH_ITEMS,
    LogBatch,
    with_flush_bytes,
    with_flush_items,
    with_offset,
)
from .scanner import new_line_logs_decoder


@contextmanager
def _logging_scope(verbose: bool) -> Iterator[None]:
    """Send library events to stderr so they never mix with decoded output.

    The previous structlog configuration is restored on exit.
    """
    saved = structlog.get_config()
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
    try:
        yield
    finally:
        structlog.configure(**saved)


def _open_decoder(
    args: argparse.Namespace, stream: IO[bytes]
) -> LogsDecoderAdapter[LogBatch]:
    options = (
        with_flush_bytes(args.flush_bytes),
        with_flush_items(args.flush_items),
        with_offset(args.offset),
    )
    if args.lines:
        return new_line_logs_decoder(stream, *options)

    config = TextEncodingConfig(
        encoding=args.encoding,
        unmarshaling_separator=args.separator,
    )
    return TextLogCodec(config).new_logs_decoder(stream, *options)


def _print_batch(args: argparse.Namespace, number: int, batch: LogBatch, offset: int) -> None:
    if args.json:
        print(json.dumps({"batch": number, "records": batch.bodies(), "offset": offset}))
    else:
        for body in batch.bodies():
            print(body)


def cmd_decode(args: argparse.Namespace) -> int:
    """Handle the 'decode' subcommand."""
    number = 0
    try:
        with open(args.file, "rb") as stream:
            decoder = _open_decoder(args, stream)
            for batch in decoder:
                _print_batch(args, number, batch, decoder.offset())
                number += 1
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OffsetDiscardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except StreamDecodingError as e:
        # Records decoded before the failure are output, so e.offset is exact
        partial = getattr(e, "partial", None)
        if partial:
            _print_batch(args, number, partial, e.offset)
        print(f"Error: {e} (resume from offset {e.offset})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


def cmd_count(args: argparse.Namespace) -> int:
    """Handle the 'count' subcommand."""
    records = 0
    batches = 0
    offset = args.offset
    try:
        with open(args.file, "rb") as stream:
            decoder = _open_decoder(args, stream)
            for batch in decoder:
                batches += 1
                records += len(batch)
                offset = decoder.offset()
            offset = decoder.offset()
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OffsetDiscardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except StreamDecodingError as e:
        # Only whole batches are counted
        print(f"Error: {e} (resume from offset {offset})", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(
            json.dumps(
                {"file": args.file, "records": records, "batches": batches, "offset": offset},
                indent=2,
            )
        )
    else:
        print(f"File: {args.file}")
        print(f"Records: {records:,}")
        print(f"Batches: {batches:,}")
        print(f"Offset: {offset}")

    return 0


def _add_stream_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Path to the input stream")
    parser.add_argument(
        "--flush-bytes",
        type=int,
        default=DEFAULT_FLUSH_BYTES,
        help="Flush a batch after this many bytes (0 disables)",
    )
    parser.add_argument(
        "--flush-items",
        type=int,
        default=DEFAULT_FLUSH_ITEMS,
        help="Flush a batch after this many records (0 disables)",
    )
    parser.add_argument(
        "--offset", type=int, default=0, help="Byte offset to resume from"
    )
    split = parser.add_mutually_exclusive_group()
    split.add_argument(
        "--separator",
        default=r"\r?\n",
        help="Record separator regex; empty reads the whole input as one record",
    )
    split.add_argument(
        "--lines",
        action="store_true",
        help="Split on newlines and trim whitespace from each record",
    )
    parser.add_argument(
        "--encoding", default="utf-8", help="Character set of the input records"
    )
    parser.add_argument(
        "--json", action="store_true", help="Output as JSON for scripting"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log decoder events to stderr"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stream-batch",
        description="Batched, resumable decoding of delimited byte streams",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # decode subcommand
    decode_parser = subparsers.add_parser(
        "decode",
        help="Print decoded records",
        description="Decode records batch by batch and print them",
    )
    _add_stream_arguments(decode_parser)
    decode_parser.set_defaults(func=cmd_decode)

    # count subcommand
    count_parser = subparsers.add_parser(
        "count",
        help="Count records and batches",
        description="Decode the whole stream and report counts and the final offset",
    )
    _add_stream_arguments(count_parser)
    count_parser.set_defaults(func=cmd_count)

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)
    with _logging_scope(args.verbose):
        code = args.func(args)
    sys.exit(code)


if __name__ == "__main__":
    main()
