"""Tests for the JSON log formatter."""

import json
import logging

from users_service.shared.infrastructure.logging import REDACTED, CustomJsonFormatter


def _format(**extra) -> dict:
    formatter = CustomJsonFormatter(fmt="%(asctime)s %(name)s %(levelname)s %(message)s")
    record = logging.LogRecord(
        name="users_service.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return json.loads(formatter.format(record))


def test_adds_timestamp_and_environment():
    data = _format()

    assert data["message"] == "hello"
    assert data["levelname"] == "INFO"
    assert "timestamp" in data
    assert "environment" in data


def test_includes_correlation_id():
    assert _format(correlation_id="abc-123")["correlation_id"] == "abc-123"


def test_redacts_credentials():
    data = _format(mongodb_password="hunter2", api_key="k", user_id="42")

    assert data["mongodb_password"] == REDACTED
    assert data["api_key"] == REDACTED
    assert data["user_id"] == "42"


def test_drops_uvicorn_color_message():
    data = _format(color_message="\x1b[1mhello\x1b[0m")

    assert "color_message" not in data
    assert data["message"] == "hello"
