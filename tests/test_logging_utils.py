"""Tests for logging utilities and sensitive data redaction."""

from __future__ import annotations

import json
import logging

import pytest

from larder.logging_utils import JsonFormatter, configure_logging, database_secrets


@pytest.mark.parametrize("fmt", ["plain", "json"])
def test_sensitive_data_filter_redacts_secrets(fmt):
    secret = "hunter2-db-pass"
    configure_logging("INFO", fmt, [secret])

    handler = logging.getLogger().handlers[0]
    record = logging.LogRecord(
        name="larder.test.redaction",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="Connecting with password %s",
        args=(secret,),
        exc_info=None,
    )

    for filter_ in handler.filters:
        filter_.filter(record)

    formatted = handler.format(record)
    assert secret not in formatted
    assert "[redacted]" in formatted


def test_database_url_password_is_masked_without_configuration():
    configure_logging("INFO", "plain")
    handler = logging.getLogger().handlers[0]
    record = logging.LogRecord(
        name="larder.db",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="Engine url %s",
        args=("postgresql://larder:s3cret@db/larder",),
        exc_info=None,
    )

    for filter_ in handler.filters:
        filter_.filter(record)

    assert "s3cret" not in handler.format(record)


def test_database_secrets_extracts_password():
    assert database_secrets("postgresql://larder:s3cret@db/larder") == ["s3cret"]
    assert database_secrets("sqlite:///data/larder.db") == []
    assert database_secrets(None) == []


def test_json_formatter_includes_meal_id():
    record = logging.LogRecord(
        name="larder.planning.preparation",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="Meal %s prepared",
        args=(7,),
        exc_info=None,
    )
    record.meal_id = 7

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Meal 7 prepared"
    assert payload["meal_id"] == 7
    assert payload["logger"] == "larder.planning.preparation"
