"""
Dashboard Routes - Sales aggregates for the signed-in admin
"""

from flask import Blueprint, jsonify, request, g
import logging

from tiketnow.models import EventNotFound
from tiketnow.routes.helpers import get_ticketing, login_required, load_error_response
from tiketnow.services.sheet_source import SheetLoadError

logger = logging.getLogger(__name__)
dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/')
@login_required
def get_dashboard():
    """Revenue, tickets, status counts and occupancy; ?event_id= narrows to one event"""
    try:
        event_id = request.args.get('event_id') or None
        dashboard = get_ticketing().get_dashboard(g.user, event_id)
        summary = dashboard['summary']

        logger.info(f"Dashboard for {g.user.username}: {summary['total_tickets']} tickets, "
                    f"${summary['total_revenue']} revenue")
        return jsonify(dashboard)

    except EventNotFound as e:
        return jsonify({'error': str(e)}), 404
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error building dashboard: {e}")
        return jsonify({'error': str(e)}), 500
