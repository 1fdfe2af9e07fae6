"""Exception types raised by the engine."""

from __future__ import annotations


class WorkforceEngineError(Exception):
    """Base class for engine errors."""


class DataStoreError(WorkforceEngineError):
    """A query or write against the data store failed."""


class ConfigError(WorkforceEngineError):
    """Settings could not be parsed or are out of range."""
