"""Filter settings shared by the scanner, the filters and the orchestrator."""

from __future__ import annotations

import dataclasses

from strictstrings._utils import (
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_LENGTH,
    DEFAULT_MIN_LENGTH,
    DEFAULT_MODEL,
    DEFAULT_SIMILARITY,
    DEFAULT_WSLEN,
    SCAN_FLOOR,
    _validate_fraction,
    _validate_positive_int,
)
from strictstrings.enums import EncodingKind
from strictstrings.exceptions import ConfigurationError

_NGRAM_ORDERS: frozenset[int] = frozenset({2, 3})


@dataclasses.dataclass(frozen=True, slots=True)
class FilterConfig:
    """Settings for one pipeline run.

    Every field has the command-line default.  Call :meth:`validate` (the
    orchestrator does) before scanning; invalid settings raise
    :class:`~strictstrings.exceptions.ConfigurationError`.
    """

    min_length: int = DEFAULT_MIN_LENGTH
    max_length: int = DEFAULT_MAX_LENGTH
    wslen: int = DEFAULT_WSLEN
    similarity_threshold: float = DEFAULT_SIMILARITY
    language_threshold: float = DEFAULT_LANGUAGE
    encodings: EncodingKind = EncodingKind.ALL
    extra_printable: bytes = b"\t"
    ngram_orders: tuple[int, ...] = (2, 3)
    ngram_skip_dotted: bool = False
    encoded_whitespace: bool = False
    model: str = DEFAULT_MODEL
    max_candidates: int | None = None
    workers: int = 1

    def validate(self) -> None:
        """Check all settings, raising ConfigurationError on the first problem."""
        _validate_positive_int("min_length", self.min_length)
        _validate_positive_int("max_length", self.max_length)
        if self.min_length > self.max_length:
            msg = (
                f"min_length ({self.min_length}) must not exceed "
                f"max_length ({self.max_length})"
            )
            raise ConfigurationError(msg)
        if isinstance(self.wslen, bool) or not isinstance(self.wslen, int):
            msg = f"wslen must be an integer, got {self.wslen!r}"
            raise ConfigurationError(msg)
        if self.wslen < 0:
            msg = f"wslen must not be negative, got {self.wslen}"
            raise ConfigurationError(msg)
        _validate_fraction(
            "similarity_threshold", self.similarity_threshold, allow_zero=False
        )
        _validate_fraction("language_threshold", self.language_threshold)
        if not self.encodings & EncodingKind.ALL:
            msg = "at least one encoding kind must be enabled"
            raise ConfigurationError(msg)
        if any(b in b"\n\r\x00" for b in self.extra_printable):
            msg = "extra_printable must not contain NUL, newline or carriage return"
            raise ConfigurationError(msg)
        if not self.ngram_orders or not set(self.ngram_orders) <= _NGRAM_ORDERS:
            msg = f"ngram_orders must be drawn from {sorted(_NGRAM_ORDERS)}"
            raise ConfigurationError(msg)
        if self.max_candidates is not None:
            _validate_positive_int("max_candidates", self.max_candidates)
        _validate_positive_int("workers", self.workers)

    @property
    def scan_floor(self) -> int:
        """Shortest run the scanner emits; never above ``min_length``."""
        return min(SCAN_FLOOR, self.min_length)

    def replace(self, **changes: object) -> FilterConfig:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)
