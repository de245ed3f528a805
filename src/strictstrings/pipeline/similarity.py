"""Stage 5: Near-duplicate removal by normalized Levenshtein similarity.

This is the only stateful stage.  Candidates must arrive in buffer-offset
order; the first member of each cluster becomes its representative and is
the only one accepted.

Representatives are bucketed by length.  The edit distance between strings
of lengths ``a`` and ``b`` is at least ``|a - b|``, so a whole bucket can be
skipped when its length difference alone keeps the similarity below the
threshold.  Distances are computed with a cutoff just above the largest
distance that could still reach the threshold.  Neither shortcut changes
which representative wins.  The worst case (many short, mutually dissimilar
strings of similar length) is still O(n * k) comparisons for n candidates
and k representatives.
"""

from __future__ import annotations

import dataclasses

from rapidfuzz.distance import Levenshtein

from strictstrings.enums import FilterKind
from strictstrings.pipeline import ACCEPTED, Candidate, FilterOutcome, PipelineContext


def normalized_similarity(distance: int, longest: int) -> float:
    """Return ``1 - distance / longest``, treating two empty strings as identical."""
    if longest == 0:
        return 1.0
    return 1.0 - distance / longest


def similarity(a: str, b: str) -> float:
    """Return the normalized Levenshtein similarity of *a* and *b* in [0, 1]."""
    return normalized_similarity(Levenshtein.distance(a, b), max(len(a), len(b)))


@dataclasses.dataclass(slots=True)
class SimilarityCluster:
    """A representative candidate and the number of candidates folded into it."""

    representative: Candidate
    members: int = 1


class SimilarityFilter:
    """Reject candidates too similar to an earlier accepted candidate."""

    kind = FilterKind.SIMILARITY

    def __init__(self) -> None:
        self._clusters: list[SimilarityCluster] = []
        self._by_length: dict[int, list[int]] = {}
        self._by_text: dict[str, int] = {}

    @property
    def clusters(self) -> tuple[SimilarityCluster, ...]:
        """Clusters in the order their representatives were accepted."""
        return tuple(self._clusters)

    def reset(self) -> None:
        """Forget all clusters."""
        self._clusters.clear()
        self._by_length.clear()
        self._by_text.clear()

    def find_match(self, text: str, threshold: float) -> int | None:
        """Return the index of the cluster *text* belongs to, or None.

        The best similarity wins; ties go to the earliest representative.
        """
        exact = self._by_text.get(text)
        if exact is not None:
            return exact

        n = len(text)
        best_index: int | None = None
        best_sim = -1.0
        for length, indices in self._by_length.items():
            longest = max(n, length)
            if normalized_similarity(abs(n - length), longest) < threshold:
                continue
            cutoff = int((1.0 - threshold) * longest) + 1
            for index in indices:
                rep = self._clusters[index].representative.text
                distance = Levenshtein.distance(text, rep, score_cutoff=cutoff)
                sim = normalized_similarity(distance, longest)
                if sim < threshold:
                    continue
                if sim > best_sim or (sim == best_sim and index < best_index):
                    best_sim = sim
                    best_index = index
        return best_index

    def add(self, candidate: Candidate) -> SimilarityCluster:
        """Start a new cluster represented by *candidate*."""
        index = len(self._clusters)
        cluster = SimilarityCluster(candidate)
        self._clusters.append(cluster)
        self._by_length.setdefault(len(candidate.text), []).append(index)
        self._by_text[candidate.text] = index
        return cluster

    def evaluate(self, candidate: Candidate, ctx: PipelineContext) -> FilterOutcome:
        index = self.find_match(candidate.text, ctx.config.similarity_threshold)
        if index is None:
            self.add(candidate)
            return ACCEPTED
        cluster = self._clusters[index]
        cluster.members += 1
        return FilterOutcome.reject(
            self.kind, f"similar-to: 0x{cluster.representative.start:08x}"
        )
