"""Structured logging tests — JSON formatter fields and correlation id."""

from __future__ import annotations

import json
import logging

from leavedesk.common.logging import CustomJsonFormatter, request_id_var


def _format(message: str) -> dict:
    formatter = CustomJsonFormatter("%(timestamp) %(level) %(name) %(message)")
    record = logging.LogRecord(
        name="leavedesk.leave.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    return json.loads(formatter.format(record))


def test_record_is_json_with_level_and_timestamp():
    body = _format("Leave request approved")

    assert body["message"] == "Leave request approved"
    assert body["level"] == "INFO"
    assert body["name"] == "leavedesk.leave.service"
    assert body["timestamp"]
    assert "request_id" not in body


def test_request_id_from_context_is_stamped():
    token = request_id_var.set("req-123")
    try:
        body = _format("Leave request rejected")
    finally:
        request_id_var.reset(token)

    assert body["request_id"] == "req-123"


async def test_request_id_header_is_echoed(client):
    resp = await client.get("/api/v1/health", headers={"X-Request-ID": "abc-42"})
    assert resp.headers["X-Request-ID"] == "abc-42"
