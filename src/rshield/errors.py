"""Exception types raised by the R-Shield engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Parameters that cannot be integrated (non-positive N, dt or T)."""


class FitCancelledError(RuntimeError):
    """A grid search was interrupted through its cancel event."""


class RemoteServiceError(RuntimeError):
    """The external generative-AI service failed or returned garbage.

    The message is meant to be shown to the user verbatim.
    """
