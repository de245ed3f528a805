"""Internal shared defaults and validators for strictstrings."""

from __future__ import annotations

from strictstrings.exceptions import ConfigurationError

#: Default minimum string length, in characters.
DEFAULT_MIN_LENGTH: int = 6

#: Default maximum string length, in characters.
DEFAULT_MAX_LENGTH: int = 200

#: Default length above which a string must contain whitespace.
DEFAULT_WSLEN: int = 30

#: Default normalized Levenshtein similarity at which strings are duplicates.
DEFAULT_SIMILARITY: float = 0.8

#: Default minimum language score.
DEFAULT_LANGUAGE: float = 0.5

#: Name of the bundled n-gram model.
DEFAULT_MODEL: str = "en"

#: Internal floor below which scanned runs are dropped before any filter.
SCAN_FLOOR: int = 4


def _validate_positive_int(name: str, value: int) -> None:
    """Raise ConfigurationError if *value* is not a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        msg = f"{name} must be a positive integer, got {value!r}"
        raise ConfigurationError(msg)


def _validate_fraction(
    name: str, value: float, *, allow_zero: bool = True
) -> None:
    """Raise ConfigurationError if *value* is outside [0, 1] (or (0, 1])."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{name} must be a number, got {value!r}"
        raise ConfigurationError(msg)
    low_ok = value >= 0.0 if allow_zero else value > 0.0
    if not low_ok or value > 1.0:
        interval = "[0, 1]" if allow_zero else "(0, 1]"
        msg = f"{name} must be in {interval}, got {value!r}"
        raise ConfigurationError(msg)
