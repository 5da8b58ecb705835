"""
rtry exception hierarchy.

All library exceptions inherit from RtryError so callers can catch any retry
failure with a single base class and still branch on the specific cause.

Hierarchy::

    RtryError
    ├── ConfigurationError        - invalid options, config file problems
    ├── TopologyError             - exchange/queue declaration or binding failed
    ├── RetryError                - retry could not be scheduled
    │   └── MaxAttemptsExceeded   - attempt count above the configured ceiling
    └── PublishError              - broker rejected or failed the republish
"""

from __future__ import annotations


class RtryError(Exception):
    """Base exception for all rtry errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(RtryError):
    """Raised when retry options or the config file are invalid."""


# --- Topology ----------------------------------------------------------------


class TopologyError(RtryError):
    """Raised when declaring the exchange, a queue, or a binding fails.

    ``step`` names the declaration that failed. Declarations are idempotent on
    the broker, so running initialization again is the recovery path.
    """

    def __init__(self, step: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(f"{step}: {message}", details={"step": step})
        self.step = step
        if cause is not None:
            self.__cause__ = cause


# --- Retry -------------------------------------------------------------------


class RetryError(RtryError):
    """Raised when a message cannot be scheduled for another attempt."""


class MaxAttemptsExceeded(RetryError):
    """Raised when a message has used up its retry attempts.

    Nothing is published. Acking, dropping or parking the message is left to
    the caller.
    """

    def __init__(self, attempt: int, max_attempts: int) -> None:
        super().__init__(
            f"Max retry attempts reached ({max_attempts}).",
            details={"attempt": attempt, "max_attempts": max_attempts},
        )
        self.attempt = attempt
        self.max_attempts = max_attempts


# --- Publish -----------------------------------------------------------------


class PublishError(RtryError):
    """Raised when the broker rejects or fails the republish."""

    def __init__(self, exchange: str, routing_key: str, *, cause: Exception | None = None) -> None:
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Failed to publish retry to '{exchange}' with key '{routing_key}'{reason}",
            details={"exchange": exchange, "routing_key": routing_key},
        )
        self.exchange = exchange
        self.routing_key = routing_key
        if cause is not None:
            self.__cause__ = cause
