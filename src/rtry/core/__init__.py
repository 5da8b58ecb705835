"""
Delayed retry core: attempt counting, delay policy, topology and republishing.
"""

from rtry.core.counter import (
    MAX_INT32,
    RETRY_HEADER,
    build_retry_headers,
    decode_retry_header,
    get_retry_count,
)
from rtry.core.options import DEFAULT_MAX_ATTEMPTS, RetryConfig, RetryOptions
from rtry.core.policy import (
    DelayDecision,
    DelayPolicy,
    backoff_bounds,
    compute_delay_seconds,
    default_backoff,
    make_backoff,
)
from rtry.core.republisher import Republisher
from rtry.core.topology import Topology, TopologyInitializer

__all__ = [
    # Counter
    "RETRY_HEADER",
    "MAX_INT32",
    "decode_retry_header",
    "get_retry_count",
    "build_retry_headers",
    # Options
    "DEFAULT_MAX_ATTEMPTS",
    "RetryConfig",
    "RetryOptions",
    # Policy
    "DelayDecision",
    "DelayPolicy",
    "backoff_bounds",
    "compute_delay_seconds",
    "default_backoff",
    "make_backoff",
    # Broker
    "Topology",
    "TopologyInitializer",
    "Republisher",
]
