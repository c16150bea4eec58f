"""Tests for redaction of credentials and user content in structured logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from idea_validator.core.logging import (
    JsonFormatter,
    SensitiveDataFilter,
    clear_request_id,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired like production; returns (logger, read_last_json_line)."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger("idea_validator.tests.redaction")
    logger.handlers = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    def last_line() -> dict:
        return json.loads(stream.getvalue().strip().splitlines()[-1])

    yield logger, last_line
    logger.handlers = []
    clear_request_id()


@pytest.mark.parametrize("field", ["prompt", "answer", "question", "idea_text", "completion"])
def test_user_content_fields_are_redacted(capture, field: str) -> None:
    logger, last_line = capture

    logger.info(
        "analysis.request",
        extra={field: "Dog meal kits in Lisbon", "model": "gemini-2.0-flash"},
    )

    payload = last_line()
    assert payload[field] == "[REDACTED]"
    assert payload["model"] == "gemini-2.0-flash"
    assert "Lisbon" not in json.dumps(payload)


def test_provider_keys_in_settings_dump_are_redacted(capture) -> None:
    logger, last_line = capture

    logger.warning(
        "container.settings",
        extra={
            "config": {
                "llm_api_key": "sk-live-1",
                "news_api_key": "news-2",
                "app_api_keys": "client-a,client-b",
                "provider": "gemini",
            }
        },
    )

    config = last_line()["config"]
    assert config == {
        "llm_api_key": "[REDACTED]",
        "news_api_key": "[REDACTED]",
        "app_api_keys": "[REDACTED]",
        "provider": "gemini",
    }


def test_follow_up_history_in_lists_is_redacted(capture) -> None:
    logger, last_line = capture

    logger.info(
        "ideas.follow_up",
        extra={
            "history": [
                {"question": "Who competes?", "answer": "HelloFresh", "timestamp": "t1"},
            ],
            "idea_id": "idea-9",
        },
    )

    payload = last_line()
    assert payload["history"] == [
        {"question": "[REDACTED]", "answer": "[REDACTED]", "timestamp": "t1"}
    ]
    assert payload["idea_id"] == "idea-9"


def test_quota_events_pass_through_with_request_id(capture) -> None:
    logger, last_line = capture
    set_request_id("req-42")

    logger.info("quota.flushed", extra={"user_hash": "ab12cd34", "amount": 3})

    payload = last_line()
    assert payload["message"] == "quota.flushed"
    assert payload["request_id"] == "req-42"
    assert payload["amount"] == 3
    assert "[REDACTED]" not in json.dumps(payload)
