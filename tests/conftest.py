"""
Shared fixtures: mock aio-pika channel, exchange, queues and messages.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from rtry.core.options import RetryConfig


class FakeQueueIterator:
    """Stands in for ``queue.iterator()``: async context manager and async iterator."""

    def __init__(self, messages):
        self._messages = list(messages)
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise StopAsyncIteration
        return self._messages.pop(0)


def make_message(headers=None, body=b'{"id": 1}', content_type="application/json"):
    """Incoming message double with async ack/nack."""
    message = MagicMock()
    message.body = body
    message.content_type = content_type
    message.headers = headers if headers is not None else {}
    message.message_id = "msg-1"
    message.ack = AsyncMock()
    message.nack = AsyncMock()
    return message


@pytest.fixture
def retry_config():
    return RetryConfig(
        main_exchange="main_exchange",
        main_queue="main_queue",
        retry_queue="retry_queue",
        main_routing_key="main_key",
        retry_routing_key="retry_key",
    )


@pytest.fixture
def exchange():
    exchange = MagicMock()
    exchange.name = "main_exchange"
    exchange.publish = AsyncMock()
    return exchange


@pytest.fixture
def main_queue():
    queue = MagicMock()
    queue.name = "main_queue"
    queue.bind = AsyncMock()
    queue.iterator = MagicMock(return_value=FakeQueueIterator([]))
    return queue


@pytest.fixture
def retry_queue():
    queue = MagicMock()
    queue.name = "retry_queue"
    queue.bind = AsyncMock()
    return queue


@pytest.fixture
def channel(exchange, main_queue, retry_queue):
    channel = MagicMock()
    channel.declare_exchange = AsyncMock(return_value=exchange)
    channel.declare_queue = AsyncMock(side_effect=[main_queue, retry_queue])
    return channel
