"""
Purchase Routes - Admin purchase listing, QR delivery and status changes
"""

from flask import Blueprint, jsonify, request, g
import logging

from tiketnow.models import ValidationError, EventNotFound
from tiketnow.routes.helpers import get_ticketing, login_required, load_error_response, json_body
from tiketnow.services.sheet_source import SheetLoadError

logger = logging.getLogger(__name__)
purchase_bp = Blueprint('purchases', __name__)


@purchase_bp.route('/')
@login_required
def get_purchases():
    """Purchases for the admin's events, optionally for one event"""
    try:
        event_id = request.args.get('event_id') or None
        purchases = get_ticketing().list_purchases(g.user, event_id)

        logger.info(f"Returned {len(purchases)} purchases for {g.user.username}")
        return jsonify({'purchases': purchases})

    except EventNotFound as e:
        return jsonify({'error': str(e)}), 404
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error fetching purchases: {e}")
        return jsonify({'error': str(e)}), 500


@purchase_bp.route('/confirm', methods=['POST'])
@login_required
def confirm_purchase():
    """Generate ticket QRs and the WhatsApp link that delivers them"""
    try:
        data = json_body()
        purchase_id = data.get('purchase_id')
        if not purchase_id:
            return jsonify({'error': 'purchase_id required'}), 400

        result = get_ticketing().confirm_and_send(g.user, purchase_id)
        if result is None:
            return jsonify({'error': 'Purchase not found'}), 404

        logger.info(f"Prepared {len(result['qr_codes'])} QR codes for purchase {purchase_id}")
        return jsonify(result)

    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error confirming purchase: {e}")
        return jsonify({'error': str(e)}), 500


@purchase_bp.route('/status', methods=['PUT'])
@login_required
def update_purchase_status():
    try:
        data = json_body()
        purchase_id = data.get('purchase_id')
        status = data.get('status')
        if not purchase_id or not status:
            return jsonify({'error': 'purchase_id and status required'}), 400

        purchase = get_ticketing().update_purchase_status(g.user, purchase_id, status)
        if purchase is None:
            return jsonify({'error': 'Purchase not found'}), 404
        return jsonify({'purchase': purchase.to_dict()})

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error updating purchase status: {e}")
        return jsonify({'error': str(e)}), 500
