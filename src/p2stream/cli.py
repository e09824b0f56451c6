from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from p2stream.aggregators import DEFAULT_QUANTILES, StreamSummaryAggregator
from p2stream.contracts import ValueSource
from p2stream.errors import InsufficientData, InvalidInput, InvalidParameter
from p2stream.reporters import RichReporter
from p2stream.sources import NumpyValueSource, TextValueSource

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format=_LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="p2stream", description="Streaming P² quantile estimates"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    summarize = subparsers.add_parser(
        "summarize", help="Summarize a stream of numbers (text file, .npy or -)"
    )
    summarize.add_argument(
        "path",
        type=str,
        help="Text file with one or more numbers per line, a .npy file, or - for stdin",
    )
    summarize.add_argument(
        "--format",
        type=str,
        choices=["text", "npy", "auto"],
        default="auto",
        help="Input format (default: auto-detect from the file suffix)",
    )
    summarize.add_argument(
        "-q",
        "--quantile",
        dest="quantiles",
        type=float,
        action="append",
        help=(
            "Quantile to track, in (0, 1); repeatable "
            f"(default: {', '.join(str(p) for p in DEFAULT_QUANTILES)})"
        ),
    )
    summarize.add_argument(
        "--bins",
        type=int,
        default=None,
        help="Also estimate an equal-frequency histogram with this many bins",
    )
    summarize.add_argument(
        "--chunk-size",
        type=int,
        default=65536,
        help="Values read per chunk (default: 65536)",
    )
    summarize.add_argument(
        "--json", action="store_true", help="Print the summary as JSON"
    )
    summarize.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def _detect_format(path: str) -> str:
    if path == "-":
        return "text"
    if Path(path).suffix.lower() == ".npy":
        return "npy"
    return "text"


def _build_source(path: str, fmt: str, chunk_size: int) -> ValueSource:
    resolved = _detect_format(path) if fmt == "auto" else fmt
    if resolved == "npy":
        return NumpyValueSource(path, chunk_size=chunk_size)
    return TextValueSource(path, chunk_size=chunk_size)


def _run_summarize(args: argparse.Namespace, *, console: Console) -> int:
    quantiles = (
        tuple(args.quantiles) if args.quantiles is not None else DEFAULT_QUANTILES
    )
    logger.debug(
        "Summarizing %s format=%s quantiles=%s bins=%s.",
        args.path,
        args.format,
        quantiles,
        args.bins,
    )
    try:
        source = _build_source(args.path, args.format, args.chunk_size)
        aggregator = StreamSummaryAggregator(quantiles=quantiles, bins=args.bins)
    except InvalidParameter as exc:
        console.print(f"Invalid argument: {exc}")
        return 2

    try:
        for chunk in source.iter_chunks():
            aggregator.update(chunk)
        summary = aggregator.finalize()
    except FileNotFoundError:
        console.print(f"Input not found: {args.path}")
        return 2
    except InvalidInput as exc:
        console.print(f"Invalid data: {exc}")
        return 1
    except InsufficientData:
        console.print("No values to summarize.")
        return 1

    if args.json:
        console.print_json(summary.model_dump_json())
        return 0

    source_name = "stdin" if args.path == "-" else Path(args.path).name
    RichReporter(console).render(summary, source_name)
    return 0


def run_cli(
    argv: Sequence[str] | None = None, *, console: Console | None = None
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    out_console = console or Console()
    if args.command == "summarize":
        return _run_summarize(args, console=out_console)
    parser.error("Unknown command.")
    return 2


def main() -> None:
    raise SystemExit(run_cli())
