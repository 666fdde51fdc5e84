"""Exception types raised by the engine."""

from __future__ import annotations


class BookingEngineError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(BookingEngineError, ValueError):
    """Raised when a required field is missing or carries an unsupported value."""


class InsufficientJobsError(InvalidInputError):
    """Raised when fewer than two located jobs are handed to the optimizer."""

    def __init__(self, located: int) -> None:
        super().__init__(f"Need at least 2 jobs with coordinates for optimization, got {located}.")
        self.located = located


class OracleUnavailableError(BookingEngineError, ConnectionError):
    """Raised by a distance oracle that cannot answer a travel-time query."""


class OracleRateLimitedError(OracleUnavailableError):
    """Raised by a distance oracle when the provider rejects a call for rate limiting."""


class PersistenceFailure(BookingEngineError):
    """Raised when the schedule sink refuses a write during acceptance.

    The suggestion stays pending, so the caller may retry the acceptance.
    """

    retryable = True


class OptimizationCancelledError(BookingEngineError):
    """Raised when an optimization is cancelled before a route was computed."""


class InvalidTransitionError(BookingEngineError):
    """Raised on an accept/reject of a suggestion that is no longer pending."""
