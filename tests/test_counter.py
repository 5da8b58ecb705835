"""
Tests for retry attempt counting from message headers.
"""

from unittest.mock import MagicMock

import pytest

from conftest import make_message
from rtry.core.counter import (
    MAX_INT32,
    RETRY_HEADER,
    build_retry_headers,
    decode_retry_header,
    get_retry_count,
)


class TestGetRetryCount:
    """Tests for get_retry_count."""

    def test_no_header(self):
        assert get_retry_count(make_message()) == 1

    def test_none_headers(self):
        message = make_message()
        message.headers = None
        assert get_retry_count(message) == 1

    @pytest.mark.parametrize(
        "header, expected",
        [
            (3, 4),  # int32 on the wire
            (2, 3),
            (0, 1),
            (2**40, 2**40 + 1),  # int64 on the wire
            ("5", 6),
            ("+5", 6),
            ("abc", 1),
            ("", 1),
            (" 5", 1),
            ("5.0", 1),
            (3.14, 1),
            (b"3", 1),
            (True, 1),
            (None, 1),
            (-7, 1),
            ("-7", 1),
            (MAX_INT32, MAX_INT32),
            (str(MAX_INT32), MAX_INT32),
            (str(2**64), 1),  # overflows int64
        ],
    )
    def test_header_values(self, header, expected):
        assert get_retry_count(make_message({RETRY_HEADER: header})) == expected

    def test_does_not_mutate_headers(self):
        headers = {RETRY_HEADER: 2, "x-original": "keep-me"}
        message = make_message(headers)
        get_retry_count(message)
        assert message.headers == {RETRY_HEADER: 2, "x-original": "keep-me"}

    def test_object_without_headers(self):
        assert get_retry_count(MagicMock(spec=[])) == 1


class TestDecodeRetryHeader:
    """Tests for the header decoder."""

    def test_accepts_int_and_decimal_string(self):
        assert decode_retry_header(7) == 7
        assert decode_retry_header("7") == 7
        assert decode_retry_header("-3") == -3

    def test_rejects_other_types(self):
        assert decode_retry_header(False) is None
        assert decode_retry_header(1.0) is None
        assert decode_retry_header([1]) is None

    def test_rejects_out_of_int64_range(self):
        assert decode_retry_header(2**63) is None
        assert decode_retry_header(-(2**63) - 1) is None
        assert decode_retry_header(2**63 - 1) == 2**63 - 1


class TestBuildRetryHeaders:
    """Tests for build_retry_headers."""

    def test_preserves_other_headers(self):
        headers = build_retry_headers({"x-original": "keep-me", RETRY_HEADER: 1}, 3)
        assert headers["x-original"] == "keep-me"
        assert headers[RETRY_HEADER] == 3

    def test_adds_header_when_missing(self):
        assert build_retry_headers(None, 1) == {RETRY_HEADER: 1}

    def test_returns_copy(self):
        original = {RETRY_HEADER: "2"}
        headers = build_retry_headers(original, 3)
        assert original == {RETRY_HEADER: "2"}
        assert headers is not original
