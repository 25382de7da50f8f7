"""
Storefront Routes - Public order quote and submission
"""

from flask import Blueprint, jsonify
import logging

from tiketnow.models import ValidationError
from tiketnow.routes.helpers import get_ticketing, load_error_response, json_body
from tiketnow.services.sheet_source import SheetLoadError

logger = logging.getLogger(__name__)
storefront_bp = Blueprint('storefront', __name__)


@storefront_bp.route('/quote', methods=['POST'])
def quote_order():
    """Price an order without writing it"""
    try:
        order = get_ticketing().quote_order(json_body())
        return jsonify({'total': order.total, 'event_name': order.event_name})

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error quoting order: {e}")
        return jsonify({'error': str(e)}), 500


@storefront_bp.route('/', methods=['POST'])
def submit_order():
    """
    Record a pending purchase and return the wa.me link the buyer uses to
    send the payment receipt. 'saved' is only false when the write could not
    be sent at all; a sent write is assumed to have landed.
    """
    try:
        result = get_ticketing().submit_order(json_body())
        return jsonify(result), 201

    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
    except SheetLoadError as e:
        return load_error_response(e)
    except Exception as e:
        logger.error(f"Error submitting order: {e}")
        return jsonify({'error': str(e)}), 500
