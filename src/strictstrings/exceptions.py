"""Exceptions raised by strictstrings."""

from __future__ import annotations


class StrictStringsError(Exception):
    """Base class for all strictstrings errors."""


class ConfigurationError(StrictStringsError, ValueError):
    """Raised when filter settings are inconsistent or out of range."""


class ModelLoadError(StrictStringsError, ValueError):
    """Raised when an n-gram model resource is missing or corrupt."""
