"""Extract human-readable strings from binary data, filtering out the noise."""

from __future__ import annotations

from strictstrings.config import FilterConfig
from strictstrings.enums import EncodingKind, FilterKind
from strictstrings.exceptions import (
    ConfigurationError,
    ModelLoadError,
    StrictStringsError,
)
from strictstrings.models import load_model
from strictstrings.pipeline.orchestrator import Pipeline, run_pipeline
from strictstrings.scanner import Scanner
from strictstrings.sinks import CollectingSink

__version__ = "1.0.0"
__all__ = [
    "ConfigurationError",
    "EncodingKind",
    "FilterConfig",
    "FilterKind",
    "ModelLoadError",
    "Pipeline",
    "Scanner",
    "StrictStringsError",
    "extract",
    "extract_all",
    "load_model",
    "run_pipeline",
]


def _collect(byte_str: bytes | bytearray | memoryview, options: dict) -> CollectingSink:
    config = FilterConfig(**options)
    sink = CollectingSink()
    run_pipeline(byte_str, sink, config)
    return sink


def extract(byte_str: bytes | bytearray | memoryview, **options: object) -> list[str]:
    """Extract the strings of *byte_str* that survive every filter.

    Keyword options are :class:`FilterConfig` fields, e.g.
    ``extract(data, min_length=8, similarity_threshold=0.9)``.

    :returns: Accepted strings in the order they were found.
    :raises ConfigurationError: If the options are invalid.
    :raises TypeError: If an option name is unknown.
    """
    return _collect(byte_str, options).texts


def extract_all(
    byte_str: bytes | bytearray | memoryview, **options: object
) -> list[dict[str, str | int | bool | None]]:
    """Report the verdict on every scanned candidate of *byte_str*.

    Takes the same options as :func:`extract`.  Each dict has ``'text'``,
    ``'start'``, ``'end'``, ``'encoding'``, ``'accepted'``, ``'reason'``
    (the rejecting stage's name, or None) and ``'detail'`` keys.  Results are
    in scan order.
    """
    results = []
    for candidate, outcome in _collect(byte_str, options).verdicts:
        d: dict[str, str | int | bool | None] = dict(candidate.to_dict())
        d["accepted"] = outcome is None
        d["reason"] = outcome.reason.value if outcome is not None else None
        d["detail"] = outcome.detail if outcome is not None else None
        results.append(d)
    return results
