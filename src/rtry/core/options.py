"""
Retry configuration values.

RetryOptions replaces the free-form option maps older callers pass around
(``{"max-attempts": 3, "delay_in_second": 5}``) with named, validated fields.
RetryConfig is built once at startup and shared read-only afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from rtry.core.policy import BackoffFn, default_backoff
from rtry.exceptions import ConfigurationError
from rtry.utils.logging import get_logger

logger = get_logger("rtry.options")

DEFAULT_MAX_ATTEMPTS = 5

# Legacy option keys -> RetryOptions field
OPTION_KEYS = {
    "max-attempts": "max_attempts",
    "backoff": "backoff",
    "delay_in_second": "delay_in_seconds",
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class RetryOptions:
    """
    Optional overrides for retry behaviour.

    ``max_attempts`` and ``backoff`` apply when the retry config is built;
    ``delay_in_seconds`` applies to a single ``retry()`` call.

    Examples:
        >>> RetryOptions(max_attempts=3)
        >>> RetryOptions(delay_in_seconds=5)
        >>> RetryOptions.from_mapping({"max-attempts": 3, "delay_in_second": 5})
    """

    max_attempts: Optional[int] = None
    backoff: Optional[BackoffFn] = None
    delay_in_seconds: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        if self.max_attempts is not None:
            if not _is_int(self.max_attempts):
                raise ConfigurationError(
                    f"max-attempts must be an integer, got {type(self.max_attempts).__name__}"
                )
            if self.max_attempts < 1:
                raise ConfigurationError("max-attempts must be >= 1")
        if self.backoff is not None and not callable(self.backoff):
            raise ConfigurationError("backoff must be callable")
        if self.delay_in_seconds is not None:
            if not _is_int(self.delay_in_seconds):
                raise ConfigurationError(
                    f"delay_in_second must be an integer, got {type(self.delay_in_seconds).__name__}"
                )
            if self.delay_in_seconds < 0:
                raise ConfigurationError("delay_in_second must be >= 0")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "RetryOptions":
        """Build options from a legacy key/value map, ignoring unknown keys."""
        if not options:
            return cls()

        values = {}
        for key, value in options.items():
            name = OPTION_KEYS.get(key)
            if name is None:
                logger.debug(f"Ignoring unknown retry option '{key}'")
                continue
            values[name] = value
        return cls(**values)

    @classmethod
    def coerce(cls, options: "RetryOptions | Mapping[str, Any] | None") -> "RetryOptions":
        """Accept RetryOptions, a legacy mapping, or None."""
        if isinstance(options, RetryOptions):
            return options
        return cls.from_mapping(options)


@dataclass(frozen=True)
class RetryConfig:
    """
    Names and limits for one retrying consumer.

    Messages are consumed from ``main_queue`` (bound to ``main_exchange``
    under ``main_routing_key``). Retries are published to ``main_exchange``
    under ``retry_routing_key``, wait in ``retry_queue`` until their TTL runs
    out, then get dead-lettered back to the main queue.
    """

    main_exchange: str
    main_queue: str
    retry_queue: str
    main_routing_key: str
    retry_routing_key: str
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff: BackoffFn = field(default=default_backoff, compare=False)

    def __post_init__(self):
        """Validate configuration."""
        for name in ("main_exchange", "main_queue", "retry_queue", "main_routing_key", "retry_routing_key"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f"{name} must be a non-empty string")
        if not _is_int(self.max_attempts) or self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be a positive integer")
        if not callable(self.backoff):
            raise ConfigurationError("backoff must be callable")

    @classmethod
    def build(
        cls,
        main_exchange: str,
        main_queue: str,
        retry_queue: str,
        main_routing_key: str,
        retry_routing_key: str,
        options: "RetryOptions | Mapping[str, Any] | None" = None,
    ) -> "RetryConfig":
        """Resolve init-time overrides and build the config."""
        opts = RetryOptions.coerce(options)

        if opts.backoff is not None:
            logger.info("Using configured backoff function")
            backoff = opts.backoff
        else:
            backoff = default_backoff

        if opts.max_attempts is not None:
            logger.info(f"Using configured max-attempts: {opts.max_attempts}")
            max_attempts = opts.max_attempts
        else:
            logger.warning(f"'max-attempts' not set, using default: {DEFAULT_MAX_ATTEMPTS}")
            max_attempts = DEFAULT_MAX_ATTEMPTS

        return cls(
            main_exchange=main_exchange,
            main_queue=main_queue,
            retry_queue=retry_queue,
            main_routing_key=main_routing_key,
            retry_routing_key=retry_routing_key,
            max_attempts=max_attempts,
            backoff=backoff,
        )
