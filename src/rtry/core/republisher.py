"""
Republish failed messages to the retry queue.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import aio_pika
from aio_pika.abc import AbstractExchange, AbstractMessage

from rtry.core.counter import build_retry_headers, get_retry_count
from rtry.core.options import RetryConfig, RetryOptions
from rtry.core.policy import DelayDecision, DelayPolicy
from rtry.core.topology import BROKER_ERRORS
from rtry.exceptions import MaxAttemptsExceeded, PublishError
from rtry.utils.logging import get_logger

logger = get_logger("rtry.republisher")


class Republisher:
    """
    Schedules another attempt for a failed message.

    The message is published to ``main_exchange`` under ``retry_routing_key``
    with an expiration equal to the computed delay. It waits in the retry
    queue until the broker dead-letters it back to the main queue.

    Args:
        config: Retry configuration
        exchange: The declared main exchange
        policy: Delay policy (defaults to one using ``config.backoff``)
    """

    def __init__(
        self,
        config: RetryConfig,
        exchange: AbstractExchange,
        policy: Optional[DelayPolicy] = None,
    ):
        self.config = config
        self.exchange = exchange
        self.policy = policy or DelayPolicy(backoff=config.backoff)

    def build_message(self, message: Any, decision: DelayDecision) -> AbstractMessage:
        """Copy body, content type and headers, stamped with the new attempt and TTL."""
        return aio_pika.Message(
            body=message.body,
            content_type=message.content_type,
            headers=build_retry_headers(message.headers, decision.attempt),
            expiration=decision.delay_seconds,
        )

    async def retry(
        self,
        message: Any,
        options: "RetryOptions | Mapping[str, Any] | None" = None,
    ) -> DelayDecision:
        """
        Republish ``message`` for a delayed retry.

        Args:
            message: The failed delivery
            options: Per-call overrides; only ``delay_in_seconds`` is used here

        Returns:
            The DelayDecision that was applied

        Raises:
            MaxAttemptsExceeded: The message has no attempts left; nothing was published
            PublishError: The broker rejected or failed the publish
        """
        attempt = get_retry_count(message)
        max_attempts = self.config.max_attempts

        if attempt > max_attempts:
            logger.error(f"Max retry attempts reached ({max_attempts}).")
            raise MaxAttemptsExceeded(attempt, max_attempts)

        decision = self.policy.decide(attempt, RetryOptions.coerce(options))
        logger.warning(
            f"Attempt {attempt}/{max_attempts} with delay {decision.delay_seconds} seconds. "
            f"Retry at: {decision.expires_at:%Y-%m-%d %H:%M:%S}"
        )

        routing_key = self.config.retry_routing_key
        try:
            await self.exchange.publish(self.build_message(message, decision), routing_key=routing_key)
        except BROKER_ERRORS as e:
            raise PublishError(self.config.main_exchange, routing_key, cause=e) from e

        return decision
