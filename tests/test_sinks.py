from __future__ import annotations

import io
from pathlib import Path

from conftest import make_candidate

from strictstrings.enums import EncodingKind, FilterKind
from strictstrings.pipeline import FilterOutcome
from strictstrings.sinks import (
    CollectingSink,
    LogDirectorySink,
    OutputSink,
    TeeSink,
    format_candidate,
    log_filename,
)


def test_format_plain():
    assert format_candidate(make_candidate("Hello", start=16)) == "Hello"


def test_format_with_bytes():
    c = make_candidate("Hello", start=16, encoding=EncodingKind.WIDE)
    assert format_candidate(c, show_bytes=True) == (
        "Hello\t0x00000010-0x0000001a wide 10 bytes"
    )


def test_output_sink_writes_in_acceptance_order():
    out = io.StringIO()
    sink = OutputSink(out)
    sink.accept(make_candidate("zebra crossing"))
    sink.accept(make_candidate("Apple pie", start=20))
    sink.reject(make_candidate("ignored"), FilterOutcome.reject(FilterKind.LENGTH))
    sink.close()
    assert out.getvalue() == "zebra crossing\nApple pie\n"
    assert sink.count == 2


def test_output_sink_sorted_case_insensitively():
    out = io.StringIO()
    sink = OutputSink(out, sort=True)
    for i, text in enumerate(["banana", "Cherry", "apple"]):
        sink.accept(make_candidate(text, start=i * 10))
    assert out.getvalue() == ""
    sink.close()
    assert out.getvalue() == "apple\nbanana\nCherry\n"


def test_log_directory_sink(tmp_path: Path):
    logs = tmp_path / "nested" / "logs"
    with LogDirectorySink(logs) as sink:
        sink.accept(make_candidate("kept string"))
        sink.reject(
            make_candidate("xk7!!!", start=0x23),
            FilterOutcome.reject(FilterKind.NGRAM, "impossible n-gram 'xk'"),
        )
        sink.reject(
            make_candidate("Configuration Errors", start=0x40),
            FilterOutcome.reject(FilterKind.SIMILARITY, "similar-to: 0x00000010"),
        )
    names = sorted(p.name for p in logs.iterdir())
    assert names == sorted(log_filename(kind) for kind in FilterKind)
    assert (logs / "filtered_by_ngram.txt").read_text() == "xk7!!!\t0x00000023\n"
    assert (logs / "filtered_by_similarity.txt").read_text() == (
        "Configuration Errors\t0x00000040\tsimilar-to: 0x00000010\n"
    )
    assert (logs / "filtered_by_length.txt").read_text() == ""


def test_collecting_sink():
    sink = CollectingSink()
    sink.accept(make_candidate("first string"))
    sink.reject(make_candidate("tiny"), FilterOutcome.reject(FilterKind.LENGTH))
    assert sink.texts == ["first string"]
    assert [c.text for c in sink.rejected_by(FilterKind.LENGTH)] == ["tiny"]
    assert sink.rejected_by(FilterKind.NGRAM) == []
    assert [outcome for _, outcome in sink.verdicts][0] is None


def test_tee_sink_fans_out():
    a, b = CollectingSink(), CollectingSink()
    out = io.StringIO()
    tee = TeeSink(a, b, OutputSink(out))
    tee.accept(make_candidate("shared string"))
    tee.reject(make_candidate("tiny"), FilterOutcome.reject(FilterKind.LENGTH))
    tee.close()
    assert a.texts == b.texts == ["shared string"]
    assert len(a.rejected) == len(b.rejected) == 1
    assert out.getvalue() == "shared string\n"
