"""Tests for structured logging."""

import json
import logging

import pytest

from jira_gateway.core.logging import (
    JSONFormatter,
    LogEvent,
    clear_context,
    log_event,
    set_request_id,
    set_user_context,
)


@pytest.fixture(autouse=True)
def reset_context():
    yield
    clear_context()


def _record(message="hello", **extra):
    record = logging.LogRecord("jira_gateway.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter(environment="staging").format(_record()))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["service"] == "jira-gateway"
        assert entry["environment"] == "staging"
        assert "request_id" not in entry

    def test_request_context(self):
        set_request_id("req-1")
        set_user_context(42)

        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["request_id"] == "req-1"
        assert entry["user_id"] == 42

    def test_extra_fields(self):
        entry = json.loads(JSONFormatter().format(_record(event_type="jira.call.failed", status=404)))
        assert entry["extra"] == {"event_type": "jira.call.failed", "status": 404}

    def test_generated_request_id(self):
        assert set_request_id()


def test_log_event(caplog):
    with caplog.at_level(logging.INFO, logger="jira_gateway.events"):
        log_event(LogEvent.JIRA_CALL_NOT_FOUND, "JIRA returned not found", jira_url="https://jira.example.com")

    record = caplog.records[-1]
    assert record.name == "jira_gateway.events"
    assert record.event_type == "jira.call.not_found"
    assert record.jira_url == "https://jira.example.com"
