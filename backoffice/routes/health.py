# -*- coding: utf-8 -*-

import time

from flask import Blueprint, jsonify
from sqlalchemy import text

from backoffice import __version__
from backoffice.database import db
from backoffice.services.structured_logging import get_logger

health_bp = Blueprint('health', __name__)

logger = get_logger(__name__)


@health_bp.route('/', methods=['GET'])
def index():
    """Route test used by the game client's connectivity check."""
    return jsonify({'ok': True, 'service': 'CloudSaveServer'})


@health_bp.route('/status', methods=['GET'])
def status():
    """Database round-trip check."""
    try:
        db.session.execute(text('SELECT 1'))
        db.session.rollback()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Status check failed: {e}")
        return jsonify({'ok': False, 'message': 'Database unavailable'}), 503
    return jsonify({'ok': True})


@health_bp.route('/health', methods=['GET', 'HEAD'])
@health_bp.route('/healthz', methods=['GET', 'HEAD'])
def healthz():
    """Liveness check (available at both /health and /healthz)."""
    return jsonify({
        'status': 'healthy',
        'service': 'backoffice',
        'version': __version__,
        'timestamp': time.time()
    }), 200
