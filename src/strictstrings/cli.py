"""Command-line interface for strictstrings."""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
import time
from pathlib import Path

from tqdm import tqdm

import strictstrings
from strictstrings._utils import (
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_LENGTH,
    DEFAULT_MIN_LENGTH,
    DEFAULT_MODEL,
    DEFAULT_SIMILARITY,
    DEFAULT_WSLEN,
)
from strictstrings.config import FilterConfig
from strictstrings.enums import EncodingKind, FilterKind
from strictstrings.exceptions import StrictStringsError
from strictstrings.pipeline import PipelineStats
from strictstrings.pipeline.orchestrator import Pipeline
from strictstrings.sinks import LogDirectorySink, OutputSink, TeeSink

_PROG = "strictstrings"
_ENCODING_NAMES = [e.name.lower() for e in (EncodingKind.ASCII, EncodingKind.WIDE)] + ["all"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=_PROG,
        description="Extract human-readable strings from a binary file.",
    )
    parser.add_argument("infile", help="File to scan ('-' reads stdin)")
    parser.add_argument(
        "-m", "--min", type=int, default=DEFAULT_MIN_LENGTH,
        help="Minimum string length (default: %(default)s)",
    )
    parser.add_argument(
        "-M", "--max", type=int, default=DEFAULT_MAX_LENGTH,
        help="Maximum string length (default: %(default)s)",
    )
    parser.add_argument(
        "-W", "--wslen", type=int, default=DEFAULT_WSLEN,
        help="Strings longer than this must contain whitespace (default: %(default)s)",
    )
    parser.add_argument(
        "-s", "--similarity", type=float, default=DEFAULT_SIMILARITY,
        help="Similarity at which strings count as duplicates, in (0, 1] "
        "(default: %(default)s)",
    )
    parser.add_argument(
        "-t", "--language", type=float, default=DEFAULT_LANGUAGE,
        help="Minimum language score, in [0, 1]; 0 disables (default: %(default)s)",
    )
    parser.add_argument("-o", "--out", help="Write strings to this file instead of stdout")
    parser.add_argument("-l", "--logs", help="Write rejected strings to this directory")
    parser.add_argument(
        "-b", "--bytes", action="store_true", help="Show the byte span of each string"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress progress and status output"
    )
    parser.add_argument(
        "-e", "--encoding", default="all", choices=_ENCODING_NAMES,
        help="Which string encodings to scan for (default: %(default)s)",
    )
    parser.add_argument(
        "--model", default=DEFAULT_MODEL,
        help="Bundled model name or path to a model file (default: %(default)s)",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Processes for the stateless filters (default: %(default)s)",
    )
    parser.add_argument(
        "--sort", action="store_true", help="Sort output case-insensitively"
    )
    parser.add_argument(
        "--encoded-whitespace", action="store_true",
        help="Count percent-encoded separators such as %%20 as whitespace",
    )
    parser.add_argument(
        "--skip-dotted", action="store_true",
        help="Skip the n-gram check for strings containing '.'",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"{_PROG} {strictstrings.__version__}"
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> FilterConfig:
    return FilterConfig(
        min_length=args.min,
        max_length=args.max,
        wslen=args.wslen,
        similarity_threshold=args.similarity,
        language_threshold=args.language,
        encodings=EncodingKind[args.encoding.upper()],
        ngram_skip_dotted=args.skip_dotted,
        encoded_whitespace=args.encoded_whitespace,
        model=args.model,
        workers=args.workers,
    )


def _read_input(infile: str) -> bytes:
    if infile == "-":
        return sys.stdin.buffer.read()
    return Path(infile).read_bytes()


def _print_settings(config: FilterConfig, infile: str, size: int) -> None:
    print(f"Scanning {infile} ({size} bytes)", file=sys.stderr)
    print(
        f"  length {config.min_length}-{config.max_length}, "
        f"wslen {config.wslen}, similarity {config.similarity_threshold}, "
        f"language {config.language_threshold}",
        file=sys.stderr,
    )


def _print_stats(stats: PipelineStats, elapsed: float) -> None:
    print(f"Found {stats.scanned} candidate strings", file=sys.stderr)
    for kind in FilterKind:
        print(
            f"  {kind.value:<10} rejected {stats.rejected[kind]:>8}, "
            f"{stats.remaining_after(kind)} remaining",
            file=sys.stderr,
        )
    print(f"Done in {elapsed:.2f}s", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Run the ``strictstrings`` command-line tool.

    :param argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.
    :returns: The process exit status: 0 if any string was found, 1 if none
        was or a file could not be read or written.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(levelname)s: %(message)s"
        )

    config = _config_from_args(args)
    try:
        pipeline = Pipeline(config)
    except StrictStringsError as e:
        parser.error(str(e))

    try:
        data = _read_input(args.infile)
    except OSError as e:
        print(f"{_PROG}: {args.infile}: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        _print_settings(config, args.infile, len(data))

    with contextlib.ExitStack() as stack:
        try:
            if args.out:
                stream = stack.enter_context(Path(args.out).open("w", encoding="utf-8"))
            else:
                stream = sys.stdout
            output = OutputSink(stream, show_bytes=args.bytes, sort=args.sort)
            sink = TeeSink(output)
            if args.logs:
                sink = TeeSink(output, stack.enter_context(LogDirectorySink(args.logs)))
        except OSError as e:
            print(f"{_PROG}: {e.filename or args.out or args.logs}: {e}", file=sys.stderr)
            return 1

        bar = stack.enter_context(
            tqdm(
                total=len(data),
                unit="B",
                unit_scale=True,
                desc="Scanning",
                file=sys.stderr,
                disable=args.quiet,
                leave=False,
            )
        )

        def progress(position: int) -> None:
            bar.update(position - bar.n)

        started = time.perf_counter()
        try:
            stats = pipeline.run(data, sink, progress)
            sink.close()
        except OSError as e:
            print(f"{_PROG}: {e.filename or args.out or args.logs}: {e}", file=sys.stderr)
            return 1
        elapsed = time.perf_counter() - started

    if not args.quiet:
        _print_stats(stats, elapsed)
    if stats.accepted == 0:
        if not args.quiet:
            print("No strings found.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
