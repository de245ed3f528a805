"""Stage 1: Length filter."""

from __future__ import annotations

from strictstrings.enums import FilterKind
from strictstrings.pipeline import ACCEPTED, Candidate, FilterOutcome, PipelineContext


class LengthFilter:
    """Reject candidates shorter than ``min_length`` or longer than ``max_length``."""

    kind = FilterKind.LENGTH

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        n = len(candidate.text)
        config = ctx.config
        if n < config.min_length:
            return FilterOutcome.reject(self.kind, "too short")
        if n > config.max_length:
            return FilterOutcome.reject(self.kind, "too long")
        return ACCEPTED
