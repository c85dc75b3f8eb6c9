# -*- coding: utf-8 -*-
"""
Endpoints called by the game client: gameplay reports and the
ban/warning check performed at startup.
"""
from flask import Blueprint, jsonify

from backoffice.middleware.auth import require_admin_token
from backoffice.schemas import parse_args, parse_body
from backoffice.schemas.requests import (
    AchievementReportRequest,
    AckWarningRequest,
    DeviceAccountRequest,
    SearchQuery,
)
from backoffice.services.registry import get_services

gameplay_bp = Blueprint('gameplay', __name__, url_prefix='/api')


@gameplay_bp.route('/report/register', methods=['POST'])
def report_register():
    body = parse_body(DeviceAccountRequest)
    report = get_services().reports.register(body.email, body.username, body.device_id)
    return jsonify({'success': True, **report})


@gameplay_bp.route('/report/win', methods=['POST'])
def report_win():
    body = parse_body(DeviceAccountRequest)
    report = get_services().reports.record_win(body.email, body.username, body.device_id)
    return jsonify({'success': True, **report})


@gameplay_bp.route('/report/lose', methods=['POST'])
def report_lose():
    body = parse_body(DeviceAccountRequest)
    report = get_services().reports.record_loss(body.email, body.username, body.device_id)
    return jsonify({'success': True, **report})


@gameplay_bp.route('/report/achievement', methods=['POST'])
def report_achievement():
    body = parse_body(AchievementReportRequest)
    report = get_services().reports.record_achievement(
        body.email, body.username, body.device_id, body.achievement_key
    )
    return jsonify({'success': True, **report})


@gameplay_bp.route('/ban/status', methods=['GET'])
def ban_status():
    query = parse_args(DeviceAccountRequest)
    status = get_services().moderation.device_status(query.email, query.username, query.device_id)
    return jsonify({'success': True, **status.to_dict()})


@gameplay_bp.route('/ban/ack-warning', methods=['POST'])
def ack_warning():
    """The player dismissed the warning dialog."""
    body = parse_body(AckWarningRequest)
    get_services().moderation.acknowledge_warning(body.email, body.username)
    return jsonify({'success': True})


@gameplay_bp.route('/admin/players', methods=['GET'])
@require_admin_token
def list_players():
    query = parse_args(SearchQuery)
    reports = get_services().reports.list_reports(q=query.q, limit=query.limit)
    return jsonify({'success': True, 'items': [r.to_dict() for r in reports]})
