"""
Auth Routes - Admin sign-in and sign-out
"""

from flask import Blueprint, jsonify, session
import logging

from tiketnow.routes.helpers import get_ticketing, current_user, json_body

logger = logging.getLogger(__name__)
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    try:
        data = json_body()
        username = data.get('username')
        password = data.get('password')

        if not isinstance(username, str) or not isinstance(password, str) or not username or not password:
            return jsonify({'error': 'username and password required'}), 400

        user = get_ticketing().auth.login(session, username, password)
        if user is None:
            return jsonify({'error': 'Invalid credentials'}), 401

        return jsonify({'user': user.to_dict()})

    except Exception as e:
        logger.error(f"Error signing in: {e}")
        return jsonify({'error': str(e)}), 500


@auth_bp.route('/logout', methods=['POST'])
def logout():
    get_ticketing().auth.logout(session)
    return jsonify({'success': True})


@auth_bp.route('/me')
def me():
    user = current_user()
    if user is None:
        return jsonify({'authenticated': False}), 401
    return jsonify({'authenticated': True, 'user': user.to_dict()})
