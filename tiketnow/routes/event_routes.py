"""
Event Routes - Public storefront listing and admin event management
"""

from flask import Blueprint, jsonify, g
import logging

from tiketnow.models import ValidationError
from tiketnow.routes.helpers import get_ticketing, login_required, sort_args, load_error_response, json_body
from tiketnow.services.sheet_source import SheetLoadError

logger = logging.getLogger(__name__)
event_bp = Blueprint('events', __name__)
admin_event_bp = Blueprint('admin_events', __name__)


@event_bp.route('/')
def get_public_events():
    """Active events for the storefront"""
    try:
        sort_by, descending = sort_args()
        events = get_ticketing().list_public_events(sort_by, descending)

        logger.info(f"Returned {len(events)} public events")
        return jsonify({'events': [event.to_dict() for event in events]})

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error fetching events: {e}")
        return jsonify({'error': str(e)}), 500


@admin_event_bp.route('/', methods=['GET'])
@login_required
def get_admin_events():
    """The signed-in admin's events with sold/capacity figures"""
    try:
        sort_by, descending = sort_args()
        events = get_ticketing().list_events(g.user, sort_by, descending)

        logger.info(f"Returned {len(events)} events for {g.user.username}")
        return jsonify({'events': events})

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error fetching admin events: {e}")
        return jsonify({'error': str(e)}), 500


@admin_event_bp.route('/', methods=['POST'])
@login_required
def create_event():
    try:
        data = json_body()
        if not data:
            return jsonify({'error': 'No data provided'}), 400

        event = get_ticketing().create_event(g.user, data)
        return jsonify({'event': event.to_dict()}), 201

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        logger.error(f"Error creating event: {e}")
        return jsonify({'error': 'Failed to create event'}), 500


@admin_event_bp.route('/<event_id>', methods=['PUT'])
@login_required
def update_event(event_id):
    try:
        data = json_body()
        if not data:
            return jsonify({'error': 'No data provided'}), 400

        event = get_ticketing().update_event(g.user, event_id, data)
        if event is None:
            return jsonify({'error': f'Event not found: {event_id}'}), 404
        return jsonify({'event': event.to_dict()})

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error updating event: {e}")
        return jsonify({'error': 'Failed to update event'}), 500


@admin_event_bp.route('/<event_id>', methods=['DELETE'])
@login_required
def delete_event(event_id):
    try:
        if not get_ticketing().delete_event(g.user, event_id):
            return jsonify({'error': f'Event not found: {event_id}'}), 404
        return jsonify({'success': True, 'id': event_id})

    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error deleting event: {e}")
        return jsonify({'error': 'Failed to delete event'}), 500
