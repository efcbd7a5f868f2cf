"""Tests for sensitive data filtering and context propagation in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestContextFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_secret,
    set_request_id,
    set_user_id,
)


@pytest.fixture
def captured() -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestContextFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_tokens(captured):
    logger, stream = captured

    logger.info(
        "test_event",
        extra={
            "token": "3f1c-secret-token",
            "authorization": "Bearer another-secret",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()
    assert "3f1c-secret-token" not in output
    assert "another-secret" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_nested_headers(captured):
    logger, stream = captured

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "Authorization": "Bearer nested-secret",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()
    assert "nested-secret" not in output
    assert "pytest" in output


def test_sensitive_filter_allows_safe_fields(captured):
    logger, stream = captured

    logger.info(
        "quota.charged",
        extra={"user_id": "u-1", "remaining": 9, "path": "/items"},
    )

    record = json.loads(stream.getvalue())
    assert record["message"] == "quota.charged"
    assert record["user_id"] == "u-1"
    assert record["remaining"] == 9
    assert "[REDACTED]" not in stream.getvalue()


def test_context_filter_attaches_request_and_user_ids(captured):
    logger, stream = captured
    set_request_id("req-ctx")
    set_user_id("user-ctx")
    try:
        logger.info("ctx_event")
    finally:
        clear_request_id()

    record = json.loads(stream.getvalue())
    assert record["request_id"] == "req-ctx"
    assert record["user_id"] == "user-ctx"


def test_hash_secret_is_short_and_stable():
    assert hash_secret("abc") == hash_secret("abc")
    assert len(hash_secret("abc")) == 16
    assert hash_secret("abc") != "abc"
