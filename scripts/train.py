#!/usr/bin/env python3
"""Training script for strictstrings n-gram models.

Reads a plain-text reference corpus, counts character bigrams and trigrams,
and serializes log-scaled weights into ngrams.bin.

Usage:
    python scripts/train.py corpus/
    python scripts/train.py --name en --min-count 20 licenses.txt manpages/
"""

from __future__ import annotations

import argparse
import collections
import functools
import math
import re
import struct
import time
from pathlib import Path

from strictstrings.models import deserialize_models

# Ensure progress output is visible when piped through tee.
print = functools.partial(print, flush=True)  # noqa: A001

_ORDERS = (2, 3)
_NON_PRINTABLE = re.compile(r"[^\x20-\x7e]")
_SPACE_RUN = re.compile(r" +")

# ---------------------------------------------------------------------------
# Corpus loading
# ---------------------------------------------------------------------------


def collect_corpus_files(paths: list[str]) -> list[Path]:
    """Expand *paths* into a sorted list of files; directories yield their ``*.txt``."""
    files: list[Path] = []
    for p in map(Path, paths):
        if p.is_dir():
            files.extend(sorted(p.rglob("*.txt")))
        else:
            files.append(p)
    return files


def normalize_corpus(lines: list[str]) -> str:
    """Join *lines* into one training string.

    Lines are joined with spaces and lower-cased.  Characters outside
    0x20-0x7E become spaces and space runs collapse to one, so the text has
    the same shape as a candidate after ``strictstrings.models.normalize_text``.
    """
    text = " ".join(lines).lower()
    text = _NON_PRINTABLE.sub(" ", text)
    return _SPACE_RUN.sub(" ", text)


def read_corpus(files: list[Path]) -> str:
    lines: list[str] = []
    for path in files:
        with path.open(encoding="utf-8", errors="replace") as f:
            lines.extend(line.rstrip("\n") for line in f)
    return normalize_corpus(lines)


# ---------------------------------------------------------------------------
# N-gram computation and serialization
# ---------------------------------------------------------------------------


def count_ngrams(text: str, orders: tuple[int, ...] = _ORDERS) -> dict[str, int]:
    """Count character n-grams of each order in *orders* across *text*."""
    counts: collections.Counter[str] = collections.Counter()
    for n in orders:
        for i in range(len(text) - n + 1):
            counts[text[i : i + n]] += 1
    return dict(counts)


def normalize_and_prune(counts: dict[str, int], min_count: int) -> dict[str, int]:
    """Drop n-grams seen fewer than *min_count* times and log-scale the rest.

    Each order is scaled separately: the most frequent n-gram of an order gets
    255 and the others ``255 * log(1 + c) / log(1 + c_max)``, rounded.
    """
    kept = {g: c for g, c in counts.items() if c >= min_count}
    max_count: dict[int, int] = {}
    for g, c in kept.items():
        max_count[len(g)] = max(max_count.get(len(g), 0), c)

    weights: dict[str, int] = {}
    for g, c in kept.items():
        denom = math.log1p(max_count[len(g)])
        if denom == 0:
            continue
        weight = int(255 * math.log1p(c) / denom + 0.5)
        if weight >= 1:
            weights[g] = weight
    return weights


def serialize_models(models: dict[str, dict[str, int]], output_path: str) -> int:
    """Serialize all models to binary format. Returns file size."""
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    with out.open("wb") as f:
        f.write(struct.pack("!I", len(models)))

        for name, weights in sorted(models.items()):
            name_bytes = name.encode("utf-8")
            f.write(struct.pack("!I", len(name_bytes)))
            f.write(name_bytes)
            f.write(struct.pack("!I", len(weights)))
            for ngram in sorted(weights, key=lambda g: (len(g), g)):
                f.write(struct.pack("!B", len(ngram)))
                f.write(ngram.encode("ascii"))
                f.write(struct.pack("!B", weights[ngram]))

    return out.stat().st_size


def build_model(files: list[Path], min_count: int) -> tuple[dict[str, int], int]:
    """Train one model from *files*. Returns the weights and the corpus length."""
    text = read_corpus(files)
    return normalize_and_prune(count_ngrams(text), min_count), len(text)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Train strictstrings n-gram models")
    parser.add_argument("corpus", nargs="+", help="Corpus files or directories of .txt files")
    parser.add_argument(
        "--output",
        default="src/strictstrings/models/ngrams.bin",
        help="Output path for ngrams.bin",
    )
    parser.add_argument("--name", default="en", help="Model name (default: en)")
    parser.add_argument(
        "--min-count",
        type=int,
        default=20,
        help="Drop n-grams seen fewer times than this",
    )
    parser.add_argument(
        "--append",
        action="store_true",
        help="Keep the other models already in the output file",
    )
    args = parser.parse_args(argv)

    start_time = time.time()
    files = collect_corpus_files(args.corpus)
    if not files:
        print("ERROR: no corpus files found")
        raise SystemExit(1)

    print(f"Training model {args.name!r} from {len(files)} files")
    weights, corpus_len = build_model(files, args.min_count)
    if not weights:
        print("ERROR: corpus produced no n-grams")
        raise SystemExit(1)
    by_order = collections.Counter(len(g) for g in weights)
    print(f"  corpus: {corpus_len} characters")
    for n in sorted(by_order):
        print(f"  order {n}: {by_order[n]} n-grams")

    models: dict[str, dict[str, int]] = {}
    output = Path(args.output)
    if args.append and output.is_file():
        models = deserialize_models(output.read_bytes(), source=str(output))
    models[args.name] = weights

    size = serialize_models(models, args.output)
    print(f"Wrote {len(models)} model(s) to {args.output} ({size} bytes)")
    print(f"Done in {time.time() - start_time:.1f}s")


if __name__ == "__main__":
    main()
