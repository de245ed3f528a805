"""Destinations for pipeline verdicts.

The orchestrator calls :meth:`Sink.accept` for every surviving candidate and
:meth:`Sink.reject` for every rejected one, in scan order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

from strictstrings.enums import FilterKind

if TYPE_CHECKING:
    from types import TracebackType

    from strictstrings.pipeline import Candidate, FilterOutcome

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Receiver of accepted candidates and rejections."""

    def accept(self, candidate: Candidate) -> None: ...

    def reject(self, candidate: Candidate, outcome: FilterOutcome) -> None: ...


def format_candidate(candidate: Candidate, show_bytes: bool = False) -> str:
    """Render one output line (without the newline).

    With *show_bytes* the text is followed by a tab and the candidate's byte
    span, e.g. ``Hello\\t0x00000010-0x0000001a wide 10 bytes``.
    """
    if not show_bytes:
        return candidate.text
    return (
        f"{candidate.text}\t0x{candidate.start:08x}-0x{candidate.end:08x} "
        f"{candidate.encoding.name.lower()} {candidate.byte_length} bytes"
    )


def log_filename(kind: FilterKind) -> str:
    """Name of the log file that records rejections by *kind*."""
    return f"filtered_by_{kind.value}.txt"


class CollectingSink:
    """Keep every verdict in memory, in scan order."""

    def __init__(self) -> None:
        self.accepted: list[Candidate] = []
        self.rejected: list[tuple[Candidate, FilterOutcome]] = []
        self.verdicts: list[tuple[Candidate, FilterOutcome | None]] = []

    def accept(self, candidate: Candidate) -> None:
        self.accepted.append(candidate)
        self.verdicts.append((candidate, None))

    def reject(self, candidate: Candidate, outcome: FilterOutcome) -> None:
        self.rejected.append((candidate, outcome))
        self.verdicts.append((candidate, outcome))

    def rejected_by(self, kind: FilterKind) -> list[Candidate]:
        """Return the candidates rejected by the *kind* stage."""
        return [c for c, outcome in self.rejected if outcome.reason is kind]

    @property
    def texts(self) -> list[str]:
        """Accepted strings in acceptance order."""
        return [c.text for c in self.accepted]


class OutputSink:
    """Write accepted strings to a text stream, one per line.

    With *sort*, lines are held back and written case-insensitively sorted
    when the sink is closed.
    """

    def __init__(self, stream: TextIO, *, show_bytes: bool = False, sort: bool = False) -> None:
        self._stream = stream
        self._show_bytes = show_bytes
        self._sort = sort
        self._pending: list[Candidate] = []
        self.count = 0

    def accept(self, candidate: Candidate) -> None:
        self.count += 1
        if self._sort:
            self._pending.append(candidate)
        else:
            self._write(candidate)

    def reject(self, candidate: Candidate, outcome: FilterOutcome) -> None:
        pass

    def _write(self, candidate: Candidate) -> None:
        self._stream.write(format_candidate(candidate, self._show_bytes) + "\n")

    def close(self) -> None:
        """Write any held-back lines and flush the stream."""
        if self._pending:
            for candidate in sorted(
                self._pending, key=lambda c: (c.text.lower(), c.start)
            ):
                self._write(candidate)
            self._pending.clear()
        self._stream.flush()


class LogDirectorySink:
    """Record rejections in one file per filter stage under *directory*.

    Each line is ``<text>\\t0x<start>``; similarity rejections add
    ``\\tsimilar-to: 0x<offset>``.  All five files are created up front, so an
    empty file means the stage rejected nothing.
    """

    def __init__(self, directory: str | Path) -> None:
        """Create *directory* (and parents) and open the log files.

        :raises OSError: If the directory or a log file cannot be created.
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._files: dict[FilterKind, TextIO] = {}
        try:
            for kind in FilterKind:
                self._files[kind] = (self.directory / log_filename(kind)).open(
                    "w", encoding="utf-8"
                )
        except OSError:
            self.close()
            raise
        logger.debug("writing rejection logs to %s", self.directory)

    def accept(self, candidate: Candidate) -> None:
        pass

    def reject(self, candidate: Candidate, outcome: FilterOutcome) -> None:
        kind = outcome.reason
        if kind is None:
            return
        line = f"{candidate.text}\t0x{candidate.start:08x}"
        if kind is FilterKind.SIMILARITY and outcome.detail:
            line += f"\t{outcome.detail}"
        self._files[kind].write(line + "\n")

    def close(self) -> None:
        for f in self._files.values():
            f.close()
        self._files.clear()

    def __enter__(self) -> LogDirectorySink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class TeeSink:
    """Forward every verdict to several sinks."""

    def __init__(self, *sinks: Sink) -> None:
        self.sinks = sinks

    def accept(self, candidate: Candidate) -> None:
        for sink in self.sinks:
            sink.accept(candidate)

    def reject(self, candidate: Candidate, outcome: FilterOutcome) -> None:
        for sink in self.sinks:
            sink.reject(candidate, outcome)

    def close(self) -> None:
        """Close every wrapped sink that supports it."""
        for sink in self.sinks:
            close = getattr(sink, "close", None)
            if close is not None:
                close()
