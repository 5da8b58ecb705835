"""
Delay computation for scheduled retries.

The default backoff grows with the fourth power of the attempt number and adds
jitter so messages failing at the same attempt do not come back in lockstep.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Optional

from rtry.utils.logging import get_logger

if TYPE_CHECKING:
    from rtry.core.options import RetryOptions

logger = get_logger("rtry.policy")

BackoffFn = Callable[[int], int]


def backoff_base(attempt: int) -> int:
    """Base delay in seconds for ``attempt`` before jitter."""
    return attempt**4 + 5


def backoff_bounds(attempt: int) -> tuple[int, int]:
    """Inclusive (min, max) seconds ``default_backoff`` can return for ``attempt``."""
    base = backoff_base(attempt)
    return base - 2, 2 * base - 3


def default_backoff(attempt: int, rng: Optional[random.Random] = None) -> int:
    """
    Default backoff: ``attempt**4 + 5`` seconds plus jitter.

    With ``base = attempt**4 + 5`` the jitter is drawn from ``[0, base)`` and
    shifted by -2, so the result lies in ``[base - 2, 2 * base - 3]``.

    Args:
        attempt: Attempt number (1-indexed)
        rng: Random generator to draw jitter from. A new OS-seeded generator
            is created per call when omitted.

    Returns:
        Delay in seconds
    """
    if rng is None:
        rng = random.Random()

    base = backoff_base(attempt)
    jitter = rng.randrange(base) - 2
    return base + jitter


def make_backoff(rng: random.Random) -> BackoffFn:
    """Bind ``default_backoff`` to a specific generator (e.g. a seeded one in tests)."""

    def backoff(attempt: int) -> int:
        return default_backoff(attempt, rng)

    return backoff


def compute_delay_seconds(
    options: Optional["RetryOptions"],
    attempt: int,
    backoff: BackoffFn = default_backoff,
) -> int:
    """
    Work out how long a message waits before its next attempt.

    An explicit ``delay_in_seconds`` on ``options`` wins and skips the backoff
    function entirely. Negative values returned by a custom backoff are
    clamped to zero.
    """
    if options is not None and options.delay_in_seconds is not None:
        logger.info(f"Using configured delay_in_second: {options.delay_in_seconds}")
        return options.delay_in_seconds

    delay = int(backoff(attempt))
    if delay < 0:
        logger.warning(f"Backoff returned negative delay ({delay}s) for attempt {attempt}, using 0")
        return 0
    return delay


@dataclass(frozen=True)
class DelayDecision:
    """Outcome of scheduling one retry."""

    attempt: int
    delay_seconds: int
    expires_at: datetime

    @property
    def expiration(self) -> str:
        """Per-message TTL in milliseconds, as AMQP expects it on the wire."""
        return str(self.delay_seconds * 1000)


class DelayPolicy:
    """
    Turns an attempt number into a DelayDecision.

    Args:
        backoff: Backoff function used when no explicit delay is given
        clock: Returns the current time; used to stamp ``expires_at``
    """

    def __init__(
        self,
        backoff: BackoffFn = default_backoff,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.backoff = backoff
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def decide(self, attempt: int, options: Optional["RetryOptions"] = None) -> DelayDecision:
        delay = compute_delay_seconds(options, attempt, self.backoff)
        return DelayDecision(
            attempt=attempt,
            delay_seconds=delay,
            expires_at=self._clock() + timedelta(seconds=delay),
        )
