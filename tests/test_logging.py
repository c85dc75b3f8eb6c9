"""
JSON log records and the request context merged into them.
"""
import json
import logging
import uuid

from backoffice.services.request_context import bind_context, get_request_context
from backoffice.services.structured_logging import JsonFormatter


def _record(message="hello", **fields):
    record = logging.LogRecord("backoffice.test", logging.INFO, __file__, 1, message, None, None)
    record.fields = fields
    return record


def test_record_outside_a_request_has_no_context():
    entry = json.loads(JsonFormatter().format(_record(order_id=3)))
    assert entry["msg"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["order_id"] == 3
    assert "request_id" not in entry


def test_bound_fields_follow_the_request(app):
    incoming = str(uuid.uuid4())
    with app.test_request_context('/api/admin/orders/approve', method='POST',
                                  headers={"X-Request-ID": incoming}):
        app.preprocess_request()
        bind_context(order_id=7, device_id=None)

        entry = json.loads(JsonFormatter().format(_record("approving")))

    assert entry["request_id"] == incoming
    assert entry["order_id"] == 7
    assert "device_id" not in entry
    assert entry["caller"] == "player"


def test_bind_context_is_ignored_outside_a_request(app):
    bind_context(order_id=7)
    assert get_request_context() == {}


def test_invalid_incoming_request_id_is_replaced(client):
    response = client.get('/healthz', headers={"X-Request-ID": "not-a-uuid"})
    generated = response.headers["X-Request-ID"]
    assert generated != "not-a-uuid"
    uuid.UUID(generated)
