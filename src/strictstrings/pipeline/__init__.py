"""Filter pipeline stages and shared types."""

from __future__ import annotations

import dataclasses
from dataclasses import field
from typing import TYPE_CHECKING, Protocol

from strictstrings.enums import EncodingKind, FilterKind

if TYPE_CHECKING:
    from strictstrings.config import FilterConfig
    from strictstrings.models import NgramModel


@dataclasses.dataclass(frozen=True, slots=True)
class Candidate:
    """A run of printable text found by the scanner.

    ``start`` and ``end`` are byte offsets into the scanned buffer (``end`` is
    exclusive); ``text`` is the decoded run.
    """

    start: int
    end: int
    text: str
    encoding: EncodingKind

    @property
    def byte_length(self) -> int:
        """Number of buffer bytes the candidate spans."""
        return self.end - self.start

    def to_dict(self) -> dict[str, str | int]:
        """Convert this candidate to a plain dict.

        :returns: A dict with ``'text'``, ``'start'``, ``'end'`` and
            ``'encoding'`` keys.
        """
        return {
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "encoding": self.encoding.name.lower(),
        }


@dataclasses.dataclass(frozen=True, slots=True)
class FilterOutcome:
    """The verdict of one filter stage on one candidate.

    ``reason`` is ``None`` for an accepted candidate, otherwise the stage that
    rejected it.  ``detail`` carries extra context such as the similarity
    representative's offset.
    """

    reason: FilterKind | None = None
    detail: str | None = None

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def reject(cls, kind: FilterKind, detail: str | None = None) -> FilterOutcome:
        """Build a rejection by *kind*."""
        return cls(reason=kind, detail=detail)


ACCEPTED = FilterOutcome()


@dataclasses.dataclass(slots=True)
class PipelineStats:
    """Counters for one pipeline run."""

    scanned: int = 0
    accepted: int = 0
    rejected: dict[FilterKind, int] = field(
        default_factory=lambda: dict.fromkeys(FilterKind, 0)
    )

    def record(self, outcome: FilterOutcome) -> None:
        """Count one terminal outcome."""
        self.scanned += 1
        if outcome.reason is None:
            self.accepted += 1
        else:
            self.rejected[outcome.reason] += 1

    def remaining_after(self, kind: FilterKind) -> int:
        """Number of candidates still alive after the *kind* stage."""
        remaining = self.scanned
        for stage in FilterKind:
            remaining -= self.rejected[stage]
            if stage is kind:
                break
        return remaining


@dataclasses.dataclass(slots=True)
class PipelineContext:
    """Per-run state threaded explicitly through every filter.

    Created once at the start of a run.  The model is shared and read-only;
    nothing here is global, so independent runs never interfere.
    """

    config: FilterConfig
    model: NgramModel
    stats: PipelineStats = field(default_factory=PipelineStats)


class CandidateFilter(Protocol):
    """One stage of the filter chain."""

    kind: FilterKind

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        """Return :data:`ACCEPTED` or a rejection tagged with :attr:`kind`."""
        ...
