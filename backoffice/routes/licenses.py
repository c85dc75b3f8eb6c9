# -*- coding: utf-8 -*-
"""
License key activation (game client) and key listings (admin).
"""
from flask import Blueprint, current_app, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from backoffice.middleware.auth import require_admin_token
from backoffice.schemas import parse_args, parse_body
from backoffice.schemas.requests import ActivateKeyRequest, LimitQuery
from backoffice.services.registry import get_services

# Storage and default limits come from app.config (RATELIMIT_*), see create_app
limiter = Limiter(key_func=get_remote_address)

licenses_bp = Blueprint('licenses', __name__, url_prefix='/api')


def _activation_limit() -> str:
    return current_app.config.get('ACTIVATION_RATE_LIMIT', '30 per minute')


@licenses_bp.route('/license/activate', methods=['POST'])
@limiter.limit(_activation_limit)
def activate_license():
    """
    Consume a license key exactly once.

    Unknown and already-used keys are normal outcomes, not errors:
    the response is 200 with ``valid: false`` and a ``reason``.
    """
    body = parse_body(ActivateKeyRequest)
    result = get_services().licensing.activate_key(body.key, device_hash=body.device_hash)
    return jsonify({'success': True, **result.to_dict()})


@licenses_bp.route('/admin/license-keys', methods=['GET'])
@require_admin_token
def list_license_keys():
    query = parse_args(LimitQuery)
    keys = get_services().licensing.list_license_keys(limit=query.limit)
    return jsonify({'success': True, 'keys': [k.to_dict() for k in keys]})


@licenses_bp.route('/admin/license-summary', methods=['GET'])
@require_admin_token
def license_summary():
    summary = get_services().licensing.summary()
    return jsonify({'success': True, **summary.to_dict()})
