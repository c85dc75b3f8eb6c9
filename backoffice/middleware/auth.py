# -*- coding: utf-8 -*-
"""
Admin authentication for the /api/admin/* surface.

There is exactly one credential: the shared static BACKOFFICE_ADMIN_TOKEN.
"""
import hmac
from functools import wraps
from typing import Optional

from flask import request, jsonify, current_app, g

from backoffice.services.request_context import get_request_id


def _provided_token() -> Optional[str]:
    provided = request.headers.get('Authorization')
    if provided:
        # Support both "Bearer <token>" and direct token formats
        if provided.startswith('Bearer '):
            provided = provided[7:]
        return provided.strip()
    return request.headers.get('X-Admin-Token')


def require_admin_token(f):
    """Decorator to require BACKOFFICE_ADMIN_TOKEN for admin endpoints."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        admin_token = current_app.config.get('BACKOFFICE_ADMIN_TOKEN')
        if not admin_token:
            return jsonify({
                'success': False,
                'error': 'admin_not_configured',
                'message': 'Admin token not configured',
                'request_id': get_request_id()
            }), 500

        provided_token = _provided_token()
        if not provided_token:
            return jsonify({
                'success': False,
                'error': 'admin_token_required',
                'message': 'Authorization header required',
                'request_id': get_request_id()
            }), 401

        if not hmac.compare_digest(provided_token.encode('utf-8'), admin_token.encode('utf-8')):
            return jsonify({
                'success': False,
                'error': 'invalid_admin_token',
                'message': 'Invalid admin token',
                'request_id': get_request_id()
            }), 401

        g.is_admin = True
        return f(*args, **kwargs)
    return decorated_function
