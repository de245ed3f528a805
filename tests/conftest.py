# tests/conftest.py
"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from strictstrings.config import FilterConfig
from strictstrings.enums import EncodingKind
from strictstrings.models import NgramModel, load_model
from strictstrings.pipeline import Candidate, PipelineContext

# Add scripts/ to sys.path so we can import train
sys.path.insert(0, str(Path(__file__).parent.parent / "scripts"))

# Three fragments: an English phrase, a hex dump, and keyboard noise.
SCENARIO = b"Hello, world!\x0048656c6c6f776f726c64\x00xk7!!!"


@pytest.fixture
def model() -> NgramModel:
    return load_model("en")


@pytest.fixture
def make_ctx(model: NgramModel):
    """Build a PipelineContext over the bundled model with config overrides."""

    def _make(**changes: object) -> PipelineContext:
        return PipelineContext(config=FilterConfig(**changes), model=model)

    return _make


@pytest.fixture
def ctx(make_ctx) -> PipelineContext:
    return make_ctx()


def make_candidate(
    text: str, start: int = 0, encoding: EncodingKind = EncodingKind.ASCII
) -> Candidate:
    """Build an ASCII or wide candidate for *text* placed at *start*."""
    width = 2 if encoding is EncodingKind.WIDE else 1
    return Candidate(
        start=start, end=start + len(text) * width, text=text, encoding=encoding
    )
