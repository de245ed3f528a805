"""Pipeline orchestrator: runs every filter stage in sequence."""

from __future__ import annotations

import concurrent.futures
import itertools
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from strictstrings.config import FilterConfig
from strictstrings.models import NgramModel, load_model
from strictstrings.pipeline import (
    ACCEPTED,
    Candidate,
    CandidateFilter,
    FilterOutcome,
    PipelineContext,
    PipelineStats,
)
from strictstrings.pipeline.language import LanguageFilter
from strictstrings.pipeline.length import LengthFilter
from strictstrings.pipeline.ngram import NgramFilter
from strictstrings.pipeline.similarity import SimilarityFilter
from strictstrings.pipeline.whitespace import WhitespaceFilter
from strictstrings.scanner import Scanner

if TYPE_CHECKING:
    from strictstrings.sinks import Sink

logger = logging.getLogger(__name__)

# Candidates per work unit when the stateless stages run in a process pool.
_CHUNK_SIZE = 4096


def default_filters() -> tuple[CandidateFilter, ...]:
    """Return a fresh filter chain in the standard order."""
    return (
        LengthFilter(),
        WhitespaceFilter(),
        NgramFilter(),
        LanguageFilter(),
        SimilarityFilter(),
    )


def _is_stateful(f: CandidateFilter) -> bool:
    return callable(getattr(f, "reset", None))


def _apply(
    filters: Sequence[CandidateFilter], candidate: Candidate, ctx: PipelineContext
) -> FilterOutcome:
    """Run *filters* in order, stopping at the first rejection."""
    for f in filters:
        outcome = f.evaluate(candidate, ctx)
        if not outcome.accepted:
            return outcome
    return ACCEPTED


def _prune_chunk(
    chunk: list[Candidate],
    config: FilterConfig,
    filters: tuple[CandidateFilter, ...],
) -> list[FilterOutcome]:
    """Evaluate the stateless stages for one chunk in a pool worker."""
    ctx = PipelineContext(config=config, model=load_model(config.model))
    return [_apply(filters, candidate, ctx) for candidate in chunk]


def _chunked(candidates: Iterable[Candidate], size: int) -> Iterator[list[Candidate]]:
    it = iter(candidates)
    while chunk := list(itertools.islice(it, size)):
        yield chunk


class Pipeline:
    """The scanner plus the filter chain, configured once and run per buffer.

    Filters are values implementing
    :class:`~strictstrings.pipeline.CandidateFilter`; a custom chain can be
    passed in.  Filters with a ``reset()`` method are stateful: they are reset
    at the start of every run and always run sequentially in offset order.
    """

    def __init__(
        self,
        config: FilterConfig | None = None,
        *,
        model: NgramModel | None = None,
        filters: Sequence[CandidateFilter] | None = None,
    ) -> None:
        """Validate *config* and load its model.

        :param config: Filter settings; defaults to :class:`FilterConfig()`.
        :param model: Use this model instead of loading ``config.model``.
        :param filters: Replace the standard filter chain.
        :raises ConfigurationError: If *config* is invalid.
        :raises ModelLoadError: If the model cannot be loaded.
        """
        self.config = config if config is not None else FilterConfig()
        self.config.validate()
        self.model = model if model is not None else load_model(self.config.model)
        # Pool workers reload the model by name, so a caller-supplied model
        # keeps the run in this process.
        self._shareable_model = model is None
        self.filters: tuple[CandidateFilter, ...] = (
            tuple(filters) if filters is not None else default_filters()
        )

    def run(
        self,
        data: bytes | bytearray | memoryview,
        sink: Sink,
        progress: Callable[[int], None] | None = None,
    ) -> PipelineStats:
        """Scan *data* and send every candidate's verdict to *sink*.

        :param data: The buffer to scan.
        :param sink: Receives accepted candidates and rejections.
        :param progress: Called with the buffer offset reached so far.
        :returns: Counters for the run.
        """
        for f in self.filters:
            if _is_stateful(f):
                f.reset()  # type: ignore[attr-defined]

        ctx = PipelineContext(config=self.config, model=self.model)
        scanner = Scanner.from_config(data, self.config)

        if self.config.workers > 1 and self._can_parallelize():
            try:
                self._run_parallel(scanner, sink, ctx, progress)
            except (RuntimeError, OSError) as e:
                if ctx.stats.scanned:
                    raise
                logger.warning("process pool unavailable (%s), running sequentially", e)
                self._run_sequential(scanner, sink, ctx, progress)
        else:
            self._run_sequential(scanner, sink, ctx, progress)

        if progress is not None:
            progress(len(data))
        self._log_stats(ctx.stats)
        return ctx.stats

    def _can_parallelize(self) -> bool:
        return self._shareable_model and any(not _is_stateful(f) for f in self.filters)

    def _split(self) -> tuple[tuple[CandidateFilter, ...], tuple[CandidateFilter, ...]]:
        """Split the chain into its stateless prefix and the remainder."""
        for i, f in enumerate(self.filters):
            if _is_stateful(f):
                return self.filters[:i], self.filters[i:]
        return self.filters, ()

    @staticmethod
    def _emit(
        candidate: Candidate,
        outcome: FilterOutcome,
        sink: Sink,
        ctx: PipelineContext,
    ) -> None:
        ctx.stats.record(outcome)
        if outcome.accepted:
            sink.accept(candidate)
        else:
            sink.reject(candidate, outcome)

    def _run_sequential(
        self,
        candidates: Iterable[Candidate],
        sink: Sink,
        ctx: PipelineContext,
        progress: Callable[[int], None] | None,
    ) -> None:
        position = 0
        for candidate in candidates:
            self._emit(candidate, _apply(self.filters, candidate, ctx), sink, ctx)
            if progress is not None and candidate.end > position:
                position = candidate.end
                progress(position)

    def _run_parallel(
        self,
        candidates: Iterable[Candidate],
        sink: Sink,
        ctx: PipelineContext,
        progress: Callable[[int], None] | None,
    ) -> None:
        """Run the stateless prefix in a process pool, the rest in order here.

        ``Executor.map`` yields chunk results in submission order, so the
        stateful stages still see candidates in offset order.
        """
        prefix, rest = self._split()
        position = 0
        with concurrent.futures.ProcessPoolExecutor(
            max_workers=self.config.workers
        ) as pool:
            chunks = list(_chunked(candidates, _CHUNK_SIZE))
            results = pool.map(
                _prune_chunk,
                chunks,
                itertools.repeat(self.config),
                itertools.repeat(prefix),
            )
            for chunk, outcomes in zip(chunks, results):
                for candidate, outcome in zip(chunk, outcomes):
                    if outcome.accepted:
                        outcome = _apply(rest, candidate, ctx)
                    self._emit(candidate, outcome, sink, ctx)
                    if progress is not None and candidate.end > position:
                        position = candidate.end
                        progress(position)

    @staticmethod
    def _log_stats(stats: PipelineStats) -> None:
        logger.debug("scanned %d candidates", stats.scanned)
        for kind, count in stats.rejected.items():
            logger.debug("%s stage rejected %d", kind.value, count)
        logger.debug("accepted %d candidates", stats.accepted)


def run_pipeline(
    data: bytes | bytearray | memoryview,
    sink: Sink,
    config: FilterConfig | None = None,
    *,
    model: NgramModel | None = None,
    progress: Callable[[int], None] | None = None,
) -> PipelineStats:
    """Run the full extraction pipeline over *data*.

    :param data: The raw byte buffer to scan.
    :param sink: Receives accepted candidates and rejections.
    :param config: Filter settings; defaults to :class:`FilterConfig()`.
    :param model: Use this model instead of loading ``config.model``.
    :param progress: Called with the buffer offset reached so far.
    :returns: Counters for the run.
    """
    return Pipeline(config, model=model).run(data, sink, progress)
