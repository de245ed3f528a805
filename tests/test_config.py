from __future__ import annotations

import dataclasses

import pytest

from strictstrings.config import FilterConfig
from strictstrings.enums import EncodingKind
from strictstrings.exceptions import ConfigurationError, StrictStringsError


def test_defaults():
    config = FilterConfig()
    assert (config.min_length, config.max_length, config.wslen) == (6, 200, 30)
    assert config.similarity_threshold == 0.8
    assert config.language_threshold == 0.5
    assert config.encodings is EncodingKind.ALL
    assert config.model == "en"
    config.validate()


def test_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        FilterConfig().min_length = 3  # type: ignore[misc]


def test_replace():
    config = FilterConfig().replace(min_length=3)
    assert config.min_length == 3
    assert config.max_length == 200


@pytest.mark.parametrize(
    "changes",
    [
        {"min_length": 0},
        {"min_length": -1},
        {"min_length": 2.5},
        {"min_length": True},
        {"max_length": 0},
        {"min_length": 10, "max_length": 9},
        {"wslen": -1},
        {"wslen": 1.5},
        {"similarity_threshold": 0.0},
        {"similarity_threshold": 1.01},
        {"similarity_threshold": "0.8"},
        {"language_threshold": -0.01},
        {"language_threshold": 1.5},
        {"encodings": EncodingKind(0)},
        {"extra_printable": b"\n"},
        {"extra_printable": b"\x00"},
        {"ngram_orders": ()},
        {"ngram_orders": (4,)},
        {"max_candidates": 0},
        {"workers": 0},
    ],
)
def test_invalid_settings(changes: dict):
    with pytest.raises(ConfigurationError):
        FilterConfig(**changes).validate()


@pytest.mark.parametrize(
    "changes",
    [
        {"min_length": 5, "max_length": 5},
        {"wslen": 0},
        {"similarity_threshold": 1.0},
        {"language_threshold": 0.0},
        {"language_threshold": 1},
        {"ngram_orders": (3,)},
        {"extra_printable": b""},
        {"max_candidates": 1},
    ],
)
def test_edge_settings_valid(changes: dict):
    FilterConfig(**changes).validate()


def test_configuration_error_hierarchy():
    assert issubclass(ConfigurationError, StrictStringsError)
    assert issubclass(ConfigurationError, ValueError)


@pytest.mark.parametrize(("min_length", "floor"), [(1, 1), (4, 4), (6, 4), (50, 4)])
def test_scan_floor(min_length: int, floor: int):
    assert FilterConfig(min_length=min_length).scan_floor == floor
