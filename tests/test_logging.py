import json
import logging

from app.core import context
from app.core.logging import JsonFormatter, RequestContextFilter


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_request_context() -> None:
    token = context.bind_request("req-1", "PATCH", "/loan-applications/abc/approve")
    try:
        context.bind_actor("manager@example.com")
        record = _record("loan_application.approved", application_id="abc")
        RequestContextFilter().filter(record)
        payload = json.loads(JsonFormatter(stream_label="audit").format(record))
    finally:
        context.reset(token)

    assert payload["message"] == "loan_application.approved"
    assert payload["actor"] == "manager@example.com"
    assert payload["request_id"] == "req-1"
    assert payload["stream"] == "audit"
    assert payload["http"] == {"method": "PATCH", "path": "/loan-applications/abc/approve"}
    assert payload["fields"] == {"application_id": "abc"}


def test_context_defaults_outside_a_request() -> None:
    record = _record("idle")
    RequestContextFilter().filter(record)
    payload = json.loads(JsonFormatter().format(record))

    assert record.actor == "-"
    assert record.request_id == "-"
    assert "http" not in payload
    assert "fields" not in payload


def test_reset_restores_previous_context() -> None:
    outer = context.bind_request("outer", "GET", "/")
    inner = context.bind_request("inner", "GET", "/health/live")
    context.reset(inner)
    assert context.current().request_id == "outer"
    context.reset(outer)
    assert context.current().request_id == "-"
