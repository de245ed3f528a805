"""Stage 4: Language plausibility scoring.

A soft statistical gate, unlike the n-gram stage's hard membership test: a
string can be made only of possible n-grams and still score low when they
are all rare.
"""

from __future__ import annotations

from strictstrings.enums import FilterKind
from strictstrings.models import language_score
from strictstrings.pipeline import ACCEPTED, Candidate, FilterOutcome, PipelineContext


class LanguageFilter:
    """Reject candidates whose language score is below ``language_threshold``.

    A score exactly at the threshold passes, so a threshold of 0.0 disables
    the stage.
    """

    kind = FilterKind.LANGUAGE

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        threshold = ctx.config.language_threshold
        if threshold <= 0.0:
            return ACCEPTED
        score = language_score(candidate.text, ctx.model)
        if score >= threshold:
            return ACCEPTED
        return FilterOutcome.reject(self.kind, f"score {score:.3f}")
