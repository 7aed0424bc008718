"""Error types raised while collecting change detection paths."""

from __future__ import annotations


class ChangeDetectionError(Exception):
    """Base class for all errors raised by `change_detection`."""


class ConfigurationError(ChangeDetectionError):
    """
    A declared root is missing or inaccessible, or the configuration can't be
    turned into directives (bad config file, unprintable path).
    """


class PatternError(ChangeDetectionError, ValueError):
    """A glob pattern is invalid. Raised when the matcher is constructed."""


class TraversalIOError(ChangeDetectionError, OSError):
    """An I/O failure while walking a directory tree."""


class BuilderStateError(ChangeDetectionError, RuntimeError):
    """A builder was used again after `generate()`."""
