"""
Consume-and-retry loop.

Runs a handler over every message of the main queue:

- handler succeeds           -> ack
- handler raises             -> schedule a delayed retry, then ack
- no attempts left           -> log and ack (the message is dropped)
- republish fails            -> nack with requeue, so the broker redelivers it
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from rtry.client import Retry
from rtry.core.options import RetryOptions
from rtry.exceptions import MaxAttemptsExceeded, PublishError
from rtry.utils.logging import get_logger

logger = get_logger("rtry.worker")

Handler = Callable[[Any], Union[Awaitable[Any], Any]]


@dataclass
class WorkerStats:
    """Counters for one worker run."""

    processed: int = 0
    retried: int = 0
    dropped: int = 0
    requeued: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.retried + self.dropped + self.requeued


async def handle_message(
    retry: Retry,
    handler: Handler,
    message: Any,
    stats: WorkerStats,
    options: Optional[RetryOptions] = None,
) -> None:
    """Run ``handler`` on one message and settle it."""
    try:
        result = handler(message)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.warning(f"Handler failed for message {getattr(message, 'message_id', None)}: {e}")
        try:
            await retry.retry(message, options)
        except MaxAttemptsExceeded as exc:
            logger.error(f"Dropping message after {exc.max_attempts} attempts")
            stats.dropped += 1
            await message.ack()
        except PublishError as exc:
            logger.error(f"Could not schedule retry, requeueing: {exc}")
            stats.requeued += 1
            await message.nack(requeue=True)
        else:
            stats.retried += 1
            await message.ack()
        return

    stats.processed += 1
    await message.ack()


async def run_worker(
    retry: Retry,
    handler: Handler,
    options: "RetryOptions | Mapping[str, Any] | None" = None,
    limit: Optional[int] = None,
) -> WorkerStats:
    """
    Consume the main queue and run ``handler`` on each message.

    Args:
        retry: Initialized Retry consumer
        handler: Callable taking the message; may be sync or async
        options: Per-retry overrides (e.g. ``{"delay_in_second": 5}``)
        limit: Stop after this many messages (default: run until the subscription ends)

    Returns:
        WorkerStats for the run
    """
    opts = RetryOptions.coerce(options)
    stats = WorkerStats()

    logger.info(f"Ready to consume messages from '{retry.config.main_queue}'")
    async with aclosing(retry.consume()) as messages:
        async for message in messages:
            await handle_message(retry, handler, message, stats, opts)
            if limit is not None and stats.total >= limit:
                break

    logger.info(
        f"Worker stopped: {stats.processed} processed, {stats.retried} retried, "
        f"{stats.dropped} dropped, {stats.requeued} requeued"
    )
    return stats
