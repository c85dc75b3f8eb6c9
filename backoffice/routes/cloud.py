# -*- coding: utf-8 -*-
"""
Cloud saves and client log upload, plus the admin save browser.
"""
from flask import Blueprint, jsonify

from backoffice.middleware.auth import require_admin_token
from backoffice.schemas import parse_args, parse_body
from backoffice.schemas.requests import (
    AccountRequest,
    CloudLogRequest,
    CloudSaveSyncRequest,
    EmailQuery,
    LogQuery,
)
from backoffice.services.registry import get_services
from backoffice.utils.identity import normalize_email

cloud_bp = Blueprint('cloud', __name__, url_prefix='/api')


@cloud_bp.route('/cloud-save/sync', methods=['POST'])
def sync_save():
    body = parse_body(CloudSaveSyncRequest)
    saved = get_services().cloud_saves.sync(body.email, body.username, body.save_json)
    return jsonify({'success': True, **saved})


@cloud_bp.route('/cloud-save/fetch', methods=['GET'])
def fetch_save():
    query = parse_args(AccountRequest)
    save = get_services().cloud_saves.fetch(query.email, query.username)
    if save is None:
        return jsonify({'success': False, 'error': 'save_not_found', 'message': 'Save not found'}), 404
    return jsonify({
        'success': True,
        'email': save.email,
        'username': save.username,
        'saveJson': save.save_json,
        'updatedAt': save.updated_at.isoformat() if save.updated_at else None,
    })


@cloud_bp.route('/cloud-save/list-by-email', methods=['GET'])
def list_saves_by_email():
    query = parse_args(EmailQuery)
    entries = get_services().cloud_saves.list_by_email(query.email)
    return jsonify({'success': True, 'email': query.email, 'entries': entries})


@cloud_bp.route('/cloud-log', methods=['POST'])
def upload_log():
    body = parse_body(CloudLogRequest)
    entry = get_services().cloud_logs.append(body.email, body.username, body.device_id, body.content)
    return jsonify({'success': True, 'id': entry.id}), 201


# --- Admin ---------------------------------------------------------------

@cloud_bp.route('/admin/emails', methods=['GET'])
@require_admin_token
def list_emails():
    return jsonify({'success': True, 'emails': get_services().cloud_saves.list_emails()})


@cloud_bp.route('/admin/saves', methods=['GET'])
@require_admin_token
def list_saves():
    query = parse_args(EmailQuery)
    saves = get_services().cloud_saves.list_by_email(query.email)
    return jsonify({'success': True, 'email': query.email, 'saves': saves})


@cloud_bp.route('/admin/save', methods=['DELETE'])
@require_admin_token
def delete_save():
    query = parse_args(AccountRequest)
    if not get_services().cloud_saves.delete_save(query.email, query.username):
        return jsonify({'success': False, 'error': 'save_not_found', 'message': 'Save not found'}), 404
    return jsonify({'success': True, 'email': query.email, 'username': query.username})


@cloud_bp.route('/admin/email/<path:email>', methods=['DELETE'])
@cloud_bp.route('/admin/emails/<path:email>', methods=['DELETE'])
@require_admin_token
def wipe_email(email):
    """Delete every save and gameplay record of an email. Device bans are kept."""
    counts = get_services().cloud_saves.wipe_email(email)
    return jsonify({
        'success': True,
        'email': normalize_email(email),
        'deletedCount': counts['saves'],
        'deleted': counts,
    })


@cloud_bp.route('/admin/logs', methods=['GET'])
@require_admin_token
def list_logs():
    query = parse_args(LogQuery)
    entries = get_services().cloud_logs.recent(email=query.email, device_id=query.device_id, limit=query.limit)
    return jsonify({'success': True, 'logs': [e.to_dict() for e in entries]})
