"""Scan a byte buffer for runs of printable text.

Two decoding variants run independently over the same buffer:

- ``ASCII``: one printable byte per character.
- ``WIDE``: UTF-16LE-style, a printable low byte followed by ``0x00``.

Printable means 0x20-0x7E plus the configured extra bytes (tab by default).
Newline and carriage return end a run, so text blocks come out one line per
candidate.  Each run is stripped of surrounding whitespace, and runs shorter
than the scan floor are dropped.  A wide run can only match whole code units,
so a run ending on a dangling odd byte is cut back to its last complete
character instead of failing.
"""

from __future__ import annotations

import heapq
import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from strictstrings._utils import SCAN_FLOOR
from strictstrings.enums import CHAR_WIDTH, EncodingKind
from strictstrings.pipeline import Candidate

if TYPE_CHECKING:
    from strictstrings.config import FilterConfig

logger = logging.getLogger(__name__)

_CODECS: dict[EncodingKind, str] = {
    EncodingKind.ASCII: "latin-1",
    EncodingKind.WIDE: "utf-16-le",
}


def _char_class(extra_printable: bytes) -> bytes:
    """Return a regex character class matching one printable byte."""
    return b"[\\x20-\\x7e" + re.escape(extra_printable) + b"]"


def _compile(kind: EncodingKind, extra_printable: bytes, min_run: int) -> re.Pattern[bytes]:
    cls = _char_class(extra_printable)
    if kind is EncodingKind.WIDE:
        return re.compile(b"(?:" + cls + b"\\x00){%d,}" % min_run)
    return re.compile(cls + b"{%d,}" % min_run)


class Scanner:
    """Lazy, restartable source of :class:`~strictstrings.pipeline.Candidate` objects.

    Iterating a scanner walks the buffer from the start each time.  Candidates
    from both variants are merged in ``(start, encoding)`` order.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        *,
        encodings: EncodingKind = EncodingKind.ALL,
        extra_printable: bytes = b"\t",
        min_run: int = SCAN_FLOOR,
        max_candidates: int | None = None,
    ) -> None:
        """Prepare a scan of *data*; nothing is read until iteration.

        :param data: The buffer to scan.  It is never copied or modified.
        :param encodings: Which decoding variants to run.
        :param extra_printable: Bytes accepted as printable besides 0x20-0x7E.
        :param min_run: Drop runs with fewer characters than this after
            stripping.
        :param max_candidates: Stop after this many candidates.
        """
        self._data = data
        self._kinds = tuple(k for k in (EncodingKind.ASCII, EncodingKind.WIDE) if k & encodings)
        self._min_run = max(1, min_run)
        self._max_candidates = max_candidates
        self._patterns = {
            kind: _compile(kind, extra_printable, self._min_run) for kind in self._kinds
        }

    @classmethod
    def from_config(cls, data: bytes | bytearray | memoryview, config: FilterConfig) -> Scanner:
        """Build a scanner using the scan settings in *config*."""
        return cls(
            data,
            encodings=config.encodings,
            extra_printable=config.extra_printable,
            min_run=config.scan_floor,
            max_candidates=config.max_candidates,
        )

    def __len__(self) -> int:
        """Size of the scanned buffer in bytes."""
        return len(self._data)

    def __iter__(self) -> Iterator[Candidate]:
        streams = [self._scan(kind) for kind in self._kinds]
        merged = heapq.merge(*streams, key=lambda c: (c.start, c.encoding))
        if self._max_candidates is None:
            yield from merged
            return
        for count, candidate in enumerate(merged):
            if count >= self._max_candidates:
                logger.warning(
                    "stopped scanning at %d candidates (offset 0x%x)",
                    self._max_candidates,
                    candidate.start,
                )
                return
            yield candidate

    def _scan(self, kind: EncodingKind) -> Iterator[Candidate]:
        """Yield the candidates of one decoding variant in offset order."""
        codec = _CODECS[kind]
        width = CHAR_WIDTH[kind]
        min_run = self._min_run
        for m in self._patterns[kind].finditer(self._data):
            raw = str(m.group(), codec)
            text = raw.strip()
            if len(text) < min_run:
                continue
            lead = len(raw) - len(raw.lstrip())
            trail = len(raw) - len(raw.rstrip())
            yield Candidate(
                start=m.start() + lead * width,
                end=m.end() - trail * width,
                text=text,
                encoding=kind,
            )


def scan(data: bytes | bytearray | memoryview, config: FilterConfig) -> Iterator[Candidate]:
    """Iterate the candidates of *data* under *config*."""
    return iter(Scanner.from_config(data, config))
