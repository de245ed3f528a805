"""Stage 2: Whitespace heuristic.

Long printable runs without any whitespace are usually encoded data (base64,
hashes, packed tables) rather than text.  Short ones (identifiers, file
names) are kept.
"""

from __future__ import annotations

from strictstrings.enums import FilterKind
from strictstrings.pipeline import ACCEPTED, Candidate, FilterOutcome, PipelineContext

# URL percent-encodings of separators.  Only consulted when
# ``encoded_whitespace`` is enabled.
_ENCODED_SEPARATORS: tuple[str, ...] = (
    "%20",
    "%09",
    "%0A",
    "%0D",
    "%0C",
    "%5C",
    "%2F",
    "%3A",
    "%3C",
    "%3E",
)


def has_whitespace(text: str, *, encoded: bool = False) -> bool:
    """Return True if *text* contains a whitespace character.

    With *encoded*, percent-encoded separators such as ``%20`` also count
    (matched case-insensitively).
    """
    if any(ch.isspace() for ch in text):
        return True
    if encoded and "%" in text:
        upper = text.upper()
        return any(sep in upper for sep in _ENCODED_SEPARATORS)
    return False


class WhitespaceFilter:
    """Reject candidates longer than ``wslen`` that contain no whitespace."""

    kind = FilterKind.WHITESPACE

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        config = ctx.config
        text = candidate.text
        if len(text) <= config.wslen:
            return ACCEPTED
        if has_whitespace(text, encoded=config.encoded_whitespace):
            return ACCEPTED
        return FilterOutcome.reject(self.kind)
