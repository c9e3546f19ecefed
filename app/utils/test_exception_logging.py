import logging
from unittest.mock import Mock

import httpx
import pytest

from app.utils import mask_credential, utc_timestamp
from app.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)


class BrokenStrException(Exception):
    """An exception that breaks when __str__ is called."""

    def __str__(self):
        raise RuntimeError("Cannot convert to string!")

    def __repr__(self):
        return "BrokenStrException(cannot convert to string)"


class TestFormatExceptionMessage:
    def test_regular_message(self):
        assert format_exception_message(ValueError("bad value")) == "bad value"

    def test_empty_message_falls_back_to_type_name(self):
        assert format_exception_message(httpx.ConnectTimeout("")) == "ConnectTimeout"

    def test_broken_str_uses_repr(self):
        assert (
            format_exception_message(BrokenStrException())
            == "BrokenStrException(cannot convert to string)"
        )

    def test_none(self):
        assert format_exception_message(None) == "None"


class TestLogExceptionWithDetails:
    def test_logs_with_prefix_and_exc_info(self):
        logger = Mock(spec=logging.Logger)
        exc = httpx.ConnectError("Connection refused")

        log_exception_with_details(logger, "[Forward]", exc)

        level, message = logger.log.call_args[0]
        assert level == logging.ERROR
        assert message == "[Forward] ConnectError: Connection refused"
        assert logger.log.call_args[1]["exc_info"] is exc

    def test_includes_cause(self):
        logger = Mock(spec=logging.Logger)
        try:
            try:
                raise OSError("[Errno 111] Connection refused")
            except OSError as cause:
                raise httpx.ConnectError("") from cause
        except httpx.ConnectError as e:
            log_exception_with_details(logger, "[Forward]", e, level=logging.WARNING)

        level, message = logger.log.call_args[0]
        assert level == logging.WARNING
        assert "caused by OSError: [Errno 111] Connection refused" in message


def test_mask_credential():
    assert mask_credential("supersecret") == "supe****"
    assert mask_credential(None) is None
    assert mask_credential("") == ""


@pytest.mark.parametrize("short_key", ["a", "ab", "abc", "abcd"])
def test_mask_credential_hides_short_keys_entirely(short_key):
    assert mask_credential(short_key) == "****"


def test_utc_timestamp_format():
    stamp = utc_timestamp()

    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-01-01T00:00:00.000Z")
