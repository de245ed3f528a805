from __future__ import annotations

import pytest
from conftest import make_candidate

from strictstrings.enums import FilterKind
from strictstrings.models import NgramModel
from strictstrings.pipeline.ngram import NgramFilter, find_impossible_ngram, letter_ngrams


def test_letter_ngrams_split_on_non_letters():
    assert list(letter_ngrams("ab1cd", (2,))) == ["ab", "cd"]
    assert list(letter_ngrams("abc", (2, 3))) == ["ab", "bc", "abc"]
    assert list(letter_ngrams("1234 !!", (2, 3))) == []


def test_letter_ngrams_split_camel_case():
    assert list(letter_ngrams("RegOpenKeyExW", (2,))) == [
        "re", "eg", "op", "pe", "en", "ke", "ey", "ex",
    ]


@pytest.mark.parametrize(
    "text",
    [
        "Hello, world!",
        "Configuration Error",
        "GetProcAddress",
        "RegOpenKeyExW",
        "kernel32.dll",
        "The system cannot find the path specified.",
        "48656c6c6f776f726c64",
        "D$0H",
    ],
)
def test_plausible_strings_have_no_impossible_ngram(model: NgramModel, text: str):
    assert find_impossible_ngram(text, model) is None


@pytest.mark.parametrize(
    ("text", "ngram"),
    [
        ("xk7!!!", "xk"),
        ("jHq8zPw", "hq"),
        ("t$ UWAVH", "uw"),
        ("zzzzzzzz", "zzz"),
        ("Configuration Errpr", "rrp"),
    ],
)
def test_first_impossible_ngram_reported(model: NgramModel, text: str, ngram: str):
    assert find_impossible_ngram(text, model) == ngram


def test_filter_rejects_with_detail(ctx):
    outcome = NgramFilter().evaluate(make_candidate("xk7!!!"), ctx)
    assert outcome.reason is FilterKind.NGRAM
    assert outcome.detail == "impossible n-gram 'xk'"


def test_bigram_only_orders(make_ctx):
    f = NgramFilter()
    assert not f.evaluate(make_candidate("zzzzzzzz"), make_ctx()).accepted
    assert f.evaluate(make_candidate("zzzzzzzz"), make_ctx(ngram_orders=(2,))).accepted


def test_skip_dotted(make_ctx):
    f = NgramFilter()
    candidate = make_candidate("xk7.bin")
    assert not f.evaluate(candidate, make_ctx()).accepted
    assert f.evaluate(candidate, make_ctx(ngram_skip_dotted=True)).accepted


def test_custom_model():
    model = NgramModel("tiny", {"ab": 10, "bc": 10, "abc": 10})
    assert find_impossible_ngram("abc", model) is None
    assert find_impossible_ngram("abcd", model) == "cd"
    assert find_impossible_ngram("ABC", model) is None
