# -*- coding: utf-8 -*-
"""
Structured JSON logging for the backoffice service.

One JSON object per line. Inside a request the record also carries the
request context (request id, endpoint, caller, and whatever order/device/
account fields the services bound). Keyword arguments passed to the
BackofficeLogger methods land in the same object, and domain events carry
an ``event_type`` (order_created, license_issued, device_warned, ...) so
they can be queried directly in the log pipeline.
"""

import json
import logging
from datetime import datetime, timezone
from flask import Flask, request
from backoffice.services.request_context import elapsed_ms, get_request_context

# Probes and scrapes hit these every few seconds
QUIET_PATHS = frozenset(('/', '/health', '/healthz', '/status', '/metrics'))


class JsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'ts': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'msg': record.getMessage(),
        }
        entry.update(get_request_context())
        entry.update(getattr(record, 'fields', {}))
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class BackofficeLogger:
    """Wraps logging.Logger so call sites can pass fields as keyword arguments."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _emit(self, level: int, message: str, exc_info=False, **fields):
        self.logger.log(level, message, exc_info=exc_info, extra={'fields': fields})

    def info(self, message: str, **fields):
        self._emit(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._emit(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._emit(logging.ERROR, message, **fields)

    def exception(self, message: str, **fields):
        self._emit(logging.ERROR, message, exc_info=True, **fields)

    def log_domain_event(self, event_type: str, message: str, level: int = logging.INFO, **fields):
        self._emit(level, message, event_type=event_type, **fields)


def get_logger(name: str) -> BackofficeLogger:
    return BackofficeLogger(name)


_access_log = get_logger('backoffice.access')


def _log_response(response):
    if request.path in QUIET_PATHS:
        return response
    # 5xx are logged by the error handlers with the cause attached
    level = logging.WARNING if response.status_code == 429 else logging.INFO
    _access_log._emit(
        level,
        f"{request.method} {request.path} {response.status_code}",
        event_type='request',
        status=response.status_code,
        elapsed_ms=elapsed_ms(),
    )
    return response


def init_logging(app: Flask):
    """Route every logger through the JSON formatter and add the access log."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    handler = logging.StreamHandler()
    if app.config.get('BACKOFFICE_LOG_JSON', True):
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    app.logger.setLevel(level)

    app.after_request(_log_response)
