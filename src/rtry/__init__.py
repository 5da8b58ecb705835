"""
rtry - Delayed retries for RabbitMQ consumers.

Failed messages are republished to a retry queue with a per-message TTL; the
retry queue dead-letters them back to the main queue when the TTL expires.
"""

__version__ = "0.1.0"

from rtry.client import Retry
from rtry.core import (
    DEFAULT_MAX_ATTEMPTS,
    MAX_INT32,
    RETRY_HEADER,
    DelayDecision,
    DelayPolicy,
    Republisher,
    RetryConfig,
    RetryOptions,
    Topology,
    TopologyInitializer,
    build_retry_headers,
    compute_delay_seconds,
    default_backoff,
    get_retry_count,
    make_backoff,
)

# Exceptions
from rtry.exceptions import (
    ConfigurationError,
    MaxAttemptsExceeded,
    PublishError,
    RetryError,
    RtryError,
    TopologyError,
)

# Logging utilities
from rtry.utils.logging import get_logger, setup_logging, setup_logging_from_config
from rtry.worker import WorkerStats, run_worker

__all__ = [
    # Consumer
    "Retry",
    "run_worker",
    "WorkerStats",
    # Core
    "RetryConfig",
    "RetryOptions",
    "DEFAULT_MAX_ATTEMPTS",
    "RETRY_HEADER",
    "MAX_INT32",
    "get_retry_count",
    "build_retry_headers",
    "DelayDecision",
    "DelayPolicy",
    "compute_delay_seconds",
    "default_backoff",
    "make_backoff",
    "Topology",
    "TopologyInitializer",
    "Republisher",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    # Exceptions
    "RtryError",
    "ConfigurationError",
    "TopologyError",
    "RetryError",
    "MaxAttemptsExceeded",
    "PublishError",
]
