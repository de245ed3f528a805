"""Stage 3: Impossible n-gram filter.

A hard membership test: any letter bigram or trigram that the reference
corpus never produced marks the candidate as structurally implausible text.
Only n-grams inside letter runs are checked.  Digits, punctuation and
whitespace end a run, and so does a camelCase boundary, so ``RegOpenKeyExW``
is checked as the words ``reg``, ``open``, ``key``, ``ex``, ``w``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from strictstrings.enums import FilterKind
from strictstrings.pipeline import ACCEPTED, Candidate, FilterOutcome, PipelineContext

if TYPE_CHECKING:
    from strictstrings.models import NgramModel

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")
_LETTER_RUN = re.compile(r"[A-Za-z]+")


def letter_ngrams(text: str, orders: tuple[int, ...] = (2, 3)) -> Iterator[str]:
    """Yield the lower-case letter n-grams of *text* for each order in *orders*."""
    for word in _LETTER_RUN.findall(_CAMEL_BOUNDARY.sub(" ", text)):
        word = word.lower()
        for n in orders:
            for i in range(len(word) - n + 1):
                yield word[i : i + n]


def find_impossible_ngram(
    text: str, model: NgramModel, orders: tuple[int, ...] = (2, 3)
) -> str | None:
    """Return the first letter n-gram of *text* unknown to *model*, or None."""
    weights = model.weights
    for ngram in letter_ngrams(text, orders):
        if ngram not in weights:
            return ngram
    return None


class NgramFilter:
    """Reject candidates containing an n-gram with zero corpus frequency."""

    kind = FilterKind.NGRAM

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        config = ctx.config
        text = candidate.text
        if config.ngram_skip_dotted and "." in text:
            return ACCEPTED
        ngram = find_impossible_ngram(text, ctx.model, config.ngram_orders)
        if ngram is None:
            return ACCEPTED
        return FilterOutcome.reject(self.kind, f"impossible n-gram {ngram!r}")
