# -*- coding: utf-8 -*-
"""
Error handling middleware.

Maps domain errors and database failures onto the JSON envelope every
endpoint uses: ``{"success": false, "error": <code>, "message": ...}``.
"""
from flask import jsonify
from flask_limiter.errors import RateLimitExceeded
from sqlalchemy.exc import OperationalError, IntegrityError
from werkzeug.exceptions import HTTPException

from backoffice.errors import BackofficeError, RequestValidationError
from backoffice.services.structured_logging import get_logger

logger = get_logger(__name__)


def error_response(code: str, message: str, status_code: int, **extra):
    body = {'success': False, 'error': code, 'message': message}
    body.update(extra)
    return jsonify(body), status_code


def create_validation_error_response(message: str, field: str = None):
    """Create a consistent validation error response"""
    extra = {'field': field} if field else {}
    return error_response('validation_error', message, 400, **extra)


def register_error_handlers(app):
    """Register the JSON error handlers on the app."""

    @app.errorhandler(RequestValidationError)
    def handle_validation_error(e):
        return create_validation_error_response(e.message, e.field)

    @app.errorhandler(BackofficeError)
    def handle_backoffice_error(e):
        if e.status_code >= 500:
            logger.error(f"{e.code}: {e.message}", error_code=e.code)
        if e.status_code == 500:
            return error_response('server_error', e.message, e.status_code, code=e.code)
        return error_response(e.code, e.message, e.status_code)

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limited(e):
        # Flask-Limiter sets Retry-After
        return error_response('rate_limited', str(e.description), 429)

    @app.errorhandler(OperationalError)
    def handle_operational_error(e):
        """Database unreachable or schema missing."""
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.error(f"Database operational error: {error_msg}")
        return error_response('database_error', 'Database operation failed. Please try again later.', 503)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
        logger.error(f"Database integrity error: {error_msg}")
        return error_response('duplicate_entry', 'This entry already exists', 409)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return error_response(e.name.lower().replace(' ', '_'), e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception(f"Unhandled error: {e}")
        return error_response('server_error', 'Internal server error', 500)
