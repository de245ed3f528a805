"""Model loading and n-gram scoring utilities.

The bundled ``ngrams.bin`` holds one or more language models.  Each model maps
lower-case character bigrams and trigrams to a weight in 1-255: the n-gram's
corpus count, log-scaled against the most frequent n-gram of the same order.
N-grams that were never seen (or were pruned as too rare) are absent and have
weight 0.

File layout (network byte order)::

    !I  number of models
    per model:
        !I  name length, then the UTF-8 name
        !I  number of entries
        per entry:
            !B  order (2 or 3), then ``order`` ASCII bytes, then !B weight
"""

from __future__ import annotations

import importlib.resources
import logging
import re
import struct
import threading
from pathlib import Path

from strictstrings.exceptions import ModelLoadError

logger = logging.getLogger(__name__)

MODEL_RESOURCE = "ngrams.bin"
MAX_WEIGHT = 255

_MAX_MODELS = 10_000
_ORDERS = frozenset({2, 3})

_MODEL_CACHE: dict[str, NgramModel] | None = None
_MODEL_CACHE_LOCK = threading.Lock()
# Models loaded from explicit file paths, keyed by resolved path.
_FILE_CACHE: dict[str, NgramModel] = {}
_FILE_CACHE_LOCK = threading.Lock()

_WHITESPACE_RUN = re.compile(r"\s+")


class NgramModel:
    """Read-only n-gram weight table for one language."""

    __slots__ = ("name", "weights")

    def __init__(self, name: str, weights: dict[str, int]) -> None:
        """Wrap *weights*, a mapping of lower-case n-gram to weight (1-255)."""
        self.name = name
        self.weights = weights

    def weight(self, ngram: str) -> int:
        """Return the weight of *ngram*, or 0 if it is unknown."""
        return self.weights.get(ngram, 0)

    def __contains__(self, ngram: object) -> bool:
        return ngram in self.weights

    def __len__(self) -> int:
        return len(self.weights)

    def __repr__(self) -> str:
        return f"NgramModel({self.name!r}, {len(self.weights)} n-grams)"


def deserialize_models(data: bytes, source: str = MODEL_RESOURCE) -> dict[str, dict[str, int]]:
    """Decode a model file into ``{name: {ngram: weight}}``.

    :param data: The raw file contents.
    :param source: Where *data* came from, used in error messages.
    :raises ModelLoadError: If *data* is empty, truncated, or malformed.
    """
    if not data:
        msg = f"{source}: model file is empty"
        raise ModelLoadError(msg)

    models: dict[str, dict[str, int]] = {}
    try:
        offset = 0
        (num_models,) = struct.unpack_from("!I", data, offset)
        offset += 4

        if num_models > _MAX_MODELS:
            msg = f"{source}: corrupt model file: num_models={num_models} exceeds limit"
            raise ModelLoadError(msg)

        for _ in range(num_models):
            (name_len,) = struct.unpack_from("!I", data, offset)
            offset += 4
            name = data[offset : offset + name_len].decode("utf-8")
            offset += name_len
            (num_entries,) = struct.unpack_from("!I", data, offset)
            offset += 4

            weights: dict[str, int] = {}
            for _ in range(num_entries):
                (order,) = struct.unpack_from("!B", data, offset)
                offset += 1
                if order not in _ORDERS:
                    msg = f"{source}: corrupt model file: n-gram order {order} in {name!r}"
                    raise ModelLoadError(msg)
                ngram = data[offset : offset + order].decode("ascii")
                offset += order
                (weight,) = struct.unpack_from("!B", data, offset)
                offset += 1
                if len(ngram) != order or weight == 0:
                    msg = f"{source}: corrupt model file: bad entry in {name!r}"
                    raise ModelLoadError(msg)
                weights[ngram] = weight
            models[name] = weights
    except (struct.error, UnicodeDecodeError) as e:
        msg = f"{source}: corrupt model file: {e}"
        raise ModelLoadError(msg) from e

    if offset != len(data):
        msg = f"{source}: corrupt model file: {len(data) - offset} trailing bytes"
        raise ModelLoadError(msg)

    return models


def load_models() -> dict[str, NgramModel]:
    """Load all bundled n-gram models.

    The result is cached for the life of the process.

    :returns: A dict mapping model names (e.g. ``"en"``) to models.
    :raises ModelLoadError: If the bundled resource is missing or corrupt.
    """
    global _MODEL_CACHE  # noqa: PLW0603
    if _MODEL_CACHE is not None:
        return _MODEL_CACHE

    with _MODEL_CACHE_LOCK:
        if _MODEL_CACHE is not None:
            return _MODEL_CACHE
        ref = importlib.resources.files("strictstrings.models").joinpath(MODEL_RESOURCE)
        try:
            data = ref.read_bytes()
        except OSError as e:
            msg = f"cannot read bundled {MODEL_RESOURCE}: {e}"
            raise ModelLoadError(msg) from e
        models = {
            name: NgramModel(name, weights)
            for name, weights in deserialize_models(data).items()
        }
        logger.debug("loaded %d bundled n-gram model(s): %s", len(models), sorted(models))
        _MODEL_CACHE = models
        return models


def load_model_file(path: str | Path) -> NgramModel:
    """Load the single model stored in the model file at *path*.

    :raises ModelLoadError: If the file cannot be read, is corrupt, or does
        not hold exactly one model.
    """
    key = str(Path(path).resolve())
    model = _FILE_CACHE.get(key)
    if model is not None:
        return model

    with _FILE_CACHE_LOCK:
        model = _FILE_CACHE.get(key)
        if model is not None:
            return model
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            msg = f"cannot read model file {path}: {e}"
            raise ModelLoadError(msg) from e
        models = deserialize_models(data, source=str(path))
        if len(models) != 1:
            msg = f"{path}: expected exactly one model, found {len(models)}"
            raise ModelLoadError(msg)
        ((name, weights),) = models.items()
        model = NgramModel(name, weights)
        logger.debug("loaded n-gram model %r from %s", name, path)
        _FILE_CACHE[key] = model
        return model


def load_model(model: str) -> NgramModel:
    """Return a bundled model by name, or load one from a file path.

    :param model: A bundled model name such as ``"en"``, or a path to a
        model file written by ``scripts/train.py``.
    :raises ModelLoadError: If no such model exists.
    """
    models = load_models()
    if model in models:
        return models[model]
    if Path(model).is_file():
        return load_model_file(model)
    msg = f"unknown n-gram model {model!r} (bundled: {', '.join(sorted(models))})"
    raise ModelLoadError(msg)


def normalize_text(text: str) -> str:
    """Lower-case *text* and collapse whitespace runs to one space.

    This matches the normalization applied to the training corpus.
    """
    return _WHITESPACE_RUN.sub(" ", text.lower())


def language_score(text: str, model: NgramModel) -> float:
    """Return the mean bigram weight of *text* under *model*, scaled to [0, 1].

    Weights are log-scaled frequencies, so this is a length-normalized sum of
    log frequencies.  Unknown bigrams contribute 0.  Text with fewer than two
    characters scores 0.0.
    """
    norm = normalize_text(text)
    total_bigrams = len(norm) - 1
    if total_bigrams <= 0:
        return 0.0
    weights = model.weights
    _get = weights.get
    total = 0
    for i in range(total_bigrams):
        total += _get(norm[i : i + 2], 0)
    return total / (MAX_WEIGHT * total_bigrams)
