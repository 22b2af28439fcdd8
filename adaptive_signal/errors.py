"""Exceptions raised by the signal schedulers."""

from __future__ import annotations


class SignalError(Exception):
    """Base class for all scheduler errors."""


class InvalidConfig(SignalError, ValueError):
    """Raised when a configuration fails validation at construction time."""


class InvalidInput(SignalError, ValueError):
    """Raised when ``tick`` receives an unusable elapsed time.

    The scheduler state is left untouched, so callers may retry with a
    corrected value.
    """
