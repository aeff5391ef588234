from __future__ import annotations


class StatsError(Exception):
    """Base class for errors surfaced by the statistics engine."""


class NotFoundError(StatsError):
    """The requested user or livestream does not exist."""


class UpstreamFetchError(StatsError):
    """The data layer failed to produce one of the required facts."""


class PreconditionViolation(RuntimeError):
    """Internal misuse of the ranking helpers (a programming error)."""
