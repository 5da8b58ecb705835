"""
RabbitMQ topology for delayed retries.

Declares one direct exchange and two quorum queues:

    main_exchange --main_routing_key--> main_queue   (consumers read here)
    main_exchange --retry_routing_key-> retry_queue  (nobody reads here)

The retry queue dead-letters into ``main_exchange`` with ``main_routing_key``,
so a message published to it with a TTL comes back to ``main_queue`` once the
TTL expires.

Example:
    async with await aio_pika.connect_robust(url) as connection:
        channel = await connection.channel()
        topology = await TopologyInitializer(channel).declare(config)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, TypeVar

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractExchange, AbstractQueue
from aio_pika.exceptions import AMQPError

from rtry.core.options import RetryConfig
from rtry.exceptions import TopologyError
from rtry.utils.logging import get_logger

logger = get_logger("rtry.topology")

QUORUM_QUEUE = {"x-queue-type": "quorum"}

# Failures that abort initialization
BROKER_ERRORS = (AMQPError, ConnectionError, TimeoutError, asyncio.TimeoutError)

T = TypeVar("T")


@dataclass
class Topology:
    """Declared broker objects for one retrying consumer."""

    exchange: AbstractExchange
    main_queue: AbstractQueue
    retry_queue: AbstractQueue


def retry_queue_arguments(config: RetryConfig) -> dict[str, Any]:
    """Queue arguments that route expired retries back to the main queue."""
    return {
        "x-dead-letter-exchange": config.main_exchange,
        "x-dead-letter-routing-key": config.main_routing_key,
        **QUORUM_QUEUE,
    }


class TopologyInitializer:
    """
    Declares the exchange, queues and bindings needed for delayed retries.

    Nothing is rolled back when a step fails; declarations are idempotent,
    so calling ``declare()`` again is safe.

    Args:
        channel: Open aio-pika channel
    """

    def __init__(self, channel: AbstractChannel):
        self.channel = channel

    async def declare(self, config: RetryConfig) -> Topology:
        """
        Declare the full topology for ``config``.

        Raises:
            TopologyError: naming the step that failed
        """
        exchange = await self._step(
            "declare_exchange",
            self.channel.declare_exchange(
                config.main_exchange,
                aio_pika.ExchangeType.DIRECT,
                durable=True,
                auto_delete=False,
            ),
        )

        main_queue = await self._step(
            "declare_main_queue",
            self.channel.declare_queue(
                config.main_queue,
                durable=True,
                auto_delete=False,
                arguments=dict(QUORUM_QUEUE),
            ),
        )
        await self._step(
            "bind_main_queue",
            main_queue.bind(exchange, routing_key=config.main_routing_key),
        )

        retry_queue = await self._step(
            "declare_retry_queue",
            self.channel.declare_queue(
                config.retry_queue,
                durable=True,
                auto_delete=False,
                arguments=retry_queue_arguments(config),
            ),
        )
        await self._step(
            "bind_retry_queue",
            retry_queue.bind(exchange, routing_key=config.retry_routing_key),
        )

        logger.info(
            f"Declared retry topology: exchange '{config.main_exchange}', "
            f"queues '{config.main_queue}' <- '{config.retry_queue}'"
        )
        return Topology(exchange=exchange, main_queue=main_queue, retry_queue=retry_queue)

    async def _step(self, step: str, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except BROKER_ERRORS as e:
            logger.error(f"Topology step '{step}' failed: {e}")
            raise TopologyError(step, str(e) or type(e).__name__, cause=e) from e
