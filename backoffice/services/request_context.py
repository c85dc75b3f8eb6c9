# -*- coding: utf-8 -*-
"""
Per-request context for backoffice log records.

Each request gets a request id (an incoming X-Request-ID is kept when it
parses as a UUID) and an empty set of bound fields. Services bind the
subject of the operation they run, e.g. ``bind_context(order_id=42)`` or
``bind_context(device_id="dev-1")``, so every record emitted afterwards in
the same request can be filtered by order, device or account.
"""

import time
import uuid
from typing import Optional
from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = 'X-Request-ID'


def _incoming_request_id() -> Optional[str]:
    value = request.headers.get(REQUEST_ID_HEADER)
    if not value:
        return None
    try:
        uuid.UUID(value)
    except ValueError:
        return None
    return value


def _open_context():
    g.request_id = _incoming_request_id() or str(uuid.uuid4())
    g.request_started = time.perf_counter()
    g.log_fields = {}
    # flipped by require_admin_token
    g.is_admin = False


def _stamp_response(response: Response) -> Response:
    if 'request_id' in g:
        response.headers[REQUEST_ID_HEADER] = g.request_id
        response.headers['X-Response-Time'] = f"{elapsed_ms()}ms"
    return response


def elapsed_ms() -> float:
    started = g.get('request_started')
    if started is None:
        return 0.0
    return round((time.perf_counter() - started) * 1000, 2)


def get_request_id() -> Optional[str]:
    if not has_request_context():
        return None
    return g.get('request_id')


def bind_context(**fields) -> None:
    """Attach subject fields (order_id, device_id, email, ...) to the current request's logs."""
    if not has_request_context() or 'log_fields' not in g:
        return
    g.log_fields.update({k: v for k, v in fields.items() if v is not None})


def get_request_context() -> dict:
    """Fields merged into every log record emitted while a request is active."""
    if not has_request_context():
        return {}
    context = {
        'request_id': g.get('request_id'),
        'endpoint': request.endpoint,
        'caller': 'admin' if g.get('is_admin') else 'player',
    }
    context.update(g.get('log_fields') or {})
    return context


def init_request_context(app: Flask):
    app.before_request(_open_context)
    app.after_request(_stamp_response)
