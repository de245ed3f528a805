"""Enumerations for strictstrings."""

import enum


class EncodingKind(enum.IntFlag):
    """Bit flags for the scanner's decoding variants."""

    ASCII = 1
    WIDE = 2
    ALL = ASCII | WIDE


class FilterKind(enum.Enum):
    """Filter stages, in the order the pipeline applies them.

    The value is the name used in log files and rejection reports.
    """

    LENGTH = "length"
    WHITESPACE = "whitespace"
    NGRAM = "ngram"
    LANGUAGE = "language"
    SIMILARITY = "similarity"


# Bytes per character for each single-variant encoding kind.
CHAR_WIDTH: dict[EncodingKind, int] = {
    EncodingKind.ASCII: 1,
    EncodingKind.WIDE: 2,
}
