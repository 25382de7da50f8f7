"""
API Routes - Basic health and utility endpoints
"""

from flask import Blueprint, jsonify
from datetime import datetime, timezone
import logging

from tiketnow.routes.helpers import get_ticketing, login_required

logger = logging.getLogger(__name__)
api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """Health check endpoint, reports configuration only (no sheet round trip)"""
    config = get_ticketing().config
    return jsonify({
        'status': 'ok',
        'sheet_configured': bool(config.sheet_id),
        'writes_configured': bool(config.script_url),
        'timestamp': datetime.now(timezone.utc).isoformat()
    })


@api_bp.route('/refresh', methods=['POST'])
@login_required
def refresh():
    """Manual refresh: drop cached sheet data and aggregates"""
    get_ticketing().refresh()
    logger.info("Caches refreshed on request")
    return jsonify({'success': True})
