"""
Route helpers - service lookup, signed-in user and shared error responses
"""

import logging
from functools import wraps

from flask import current_app, jsonify, request, session, g

from tiketnow.services.sheet_source import SheetLoadError

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'ticketing'


def get_ticketing():
    """The TicketingService built by create_app"""
    return current_app.extensions[EXTENSION_KEY]


def current_user():
    return get_ticketing().auth.get_current_user(session)


def login_required(view):
    """Reject the request with 401 unless an admin is signed in"""
    @wraps(view)
    def wrapped(*args, **kwargs):
        user = current_user()
        if user is None:
            return jsonify({'error': 'Authentication required'}), 401
        g.user = user
        return view(*args, **kwargs)
    return wrapped


def sort_args():
    """Read ?sort=date|capacity&order=asc|desc"""
    sort_by = request.args.get('sort', 'date')
    descending = request.args.get('order', 'asc').lower() == 'desc'
    return sort_by, descending


def load_error_response(error: SheetLoadError):
    logger.error(f"Sheet load failed: {error}")
    return jsonify({'error': str(error), 'retry': True}), 503


def json_body():
    """Request JSON object, or {} when the body is missing or not an object"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
