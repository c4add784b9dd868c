"""Exception types raised by the analytics package.

The metrics themselves never raise for degenerate input; these cover the
I/O and orchestration edges around them.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base exception for trade analytics errors."""


class ConfigError(AnalyticsError):
    """Invalid or inconsistent configuration."""


class TradeStoreError(AnalyticsError):
    """The trade storage collaborator could not return trades.

    Callers must surface this as "data unavailable" rather than treating it
    as an empty trade set.
    """

    def __init__(self, message: str, *, calendar_id: str | None = None) -> None:
        super().__init__(message)
        self.calendar_id = calendar_id


class SupersededRequestError(AnalyticsError):
    """A newer computation replaced this one before it finished."""

    def __init__(self, generation: int, latest: int) -> None:
        super().__init__(f"Request {generation} superseded by request {latest}.")
        self.generation = generation
        self.latest = latest


class UnknownCalendarError(ConfigError):
    """No configured calendar matches the requested identifier."""
