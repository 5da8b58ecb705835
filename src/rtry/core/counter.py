"""
Retry attempt tracking through the ``x-retry-count`` message header.

The counter lives only in the message headers. Brokers and older publishers
encode it in different ways, so every accepted encoding is decoded here into
one plain ``int`` before any arithmetic happens.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Optional

RETRY_HEADER = "x-retry-count"

MAX_INT32 = 2**31 - 1

_MIN_INT64 = -(2**63)
_MAX_INT64 = 2**63 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def decode_retry_header(value: Any) -> Optional[int]:
    """
    Decode a raw ``x-retry-count`` value into an integer.

    Accepted encodings are AMQP 32/64-bit integers (plain ``int`` once
    decoded by the client) and strings of decimal digits. Anything else,
    including ``bool``, floats, bytes and strings that overflow a signed
    64-bit integer, decodes to ``None``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        if not _DECIMAL.fullmatch(value):
            return None
        number = int(value)
    else:
        return None

    if number < _MIN_INT64 or number > _MAX_INT64:
        return None
    return number


def get_retry_count(message: Any) -> int:
    """
    Return the attempt number for the next delivery of ``message``.

    A message without the header is on its first attempt. A header holding
    ``N`` completed attempts yields ``N + 1``; negative values count as zero
    and ``MAX_INT32`` is returned unchanged so the counter never overflows.
    Malformed headers fall back to 1.
    """
    headers = getattr(message, "headers", None) or {}
    if RETRY_HEADER not in headers:
        return 1

    count = decode_retry_header(headers[RETRY_HEADER])
    if count is None:
        return 1
    if count < 0:
        count = 0
    if count == MAX_INT32:
        return count
    return count + 1


def build_retry_headers(headers: Optional[Mapping[str, Any]], attempt: int) -> dict[str, Any]:
    """
    Copy ``headers`` and set ``x-retry-count`` to ``attempt``.

    The AMQP integer width is chosen by the encoder (smallest that fits), so
    small counts go out as 8-bit values; ``decode_retry_header`` accepts any width.
    """
    new_headers = dict(headers or {})
    new_headers[RETRY_HEADER] = int(attempt)
    return new_headers
