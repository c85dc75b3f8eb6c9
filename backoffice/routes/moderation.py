# -*- coding: utf-8 -*-
"""
Admin ban/warning console.
"""
from flask import Blueprint, jsonify

from backoffice.middleware.auth import require_admin_token
from backoffice.schemas import parse_args, parse_body
from backoffice.schemas.requests import AccountRequest, SearchQuery, SetBanRequest, WarnDeviceRequest
from backoffice.services.registry import get_services

moderation_bp = Blueprint('moderation', __name__, url_prefix='/api/admin/ban')


@moderation_bp.route('/search', methods=['GET'])
@require_admin_token
def search():
    query = parse_args(SearchQuery)
    items = get_services().moderation.search(q=query.q, limit=query.limit)
    return jsonify({'success': True, 'items': items})


@moderation_bp.route('/warn-device', methods=['POST'])
@require_admin_token
def warn_device():
    """Warn every account that has ever played on the device."""
    body = parse_body(WarnDeviceRequest)
    affected = get_services().moderation.warn_device(body.device_id)
    return jsonify({'success': True, 'deviceId': body.device_id, 'affectedAccounts': affected})


@moderation_bp.route('/clear-warn', methods=['POST'])
@require_admin_token
def clear_warn():
    body = parse_body(AccountRequest)
    get_services().moderation.clear_warning(body.email, body.username)
    return jsonify({'success': True})


@moderation_bp.route('/set-ban', methods=['POST'])
@require_admin_token
def set_ban():
    body = parse_body(SetBanRequest)
    get_services().moderation.set_ban(body.device_id, body.is_banned)
    return jsonify({'success': True, 'deviceId': body.device_id, 'isBanned': body.is_banned})
