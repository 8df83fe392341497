"""Tests for the logs module."""

import logging

import orjson

from unifi_poller.logs import REDACTED, JsonFormatter, RedactingFilter


def _record(msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("unifi_poller", logging.INFO, __file__, 1, msg, args, None)


def test_redacts_message_and_args() -> None:
    record = _record("login as %s with %s", "influx", "s3cret-pw")
    RedactingFilter(["s3cret-pw"]).filter(record)
    assert record.getMessage() == f"login as influx with {REDACTED}"


def test_ignores_single_character_secrets() -> None:
    record = _record("a b c")
    RedactingFilter(["a", ""]).filter(record)
    assert record.getMessage() == "a b c"


def test_json_formatter() -> None:
    line = JsonFormatter().format(_record("wrote %d points", 7))
    obj = orjson.loads(line)
    assert obj["level"] == "info"
    assert obj["logger"] == "unifi_poller"
    assert obj["event"] == "wrote 7 points"


def test_mismatched_args_fall_back_to_format_string() -> None:
    record = _record("login as %s with %s", "s3cret-pw")
    assert RedactingFilter(["s3cret-pw"]).filter(record) is True
    assert record.getMessage() == "login as %s with %s"
