"""
Authentication API endpoints.

Session-based admin login. Credentials come from ADMIN_USERNAME and
ADMIN_PASSWORD_HASH (or ADMIN_PASSWORD) in the app config.
"""

from flask import jsonify, session
from flask_wtf.csrf import generate_csrf

from franchise_auction.auth import check_admin_credentials
from franchise_auction.extensions import limiter
from franchise_auction.logger import get_logger, log_audit
from franchise_auction.routes import api_bp
from franchise_auction.utils import error_response, get_json_with_fields, is_admin

logger = get_logger(__name__)


@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    """Admin login with rate limiting protection."""
    data, error = get_json_with_fields(['username', 'password'])
    if error:
        return error

    username = str(data['username'])
    if not check_admin_credentials(username, str(data['password'])):
        logger.warning(f"Failed admin login for user '{username}'")
        return error_response('Invalid credentials', 401)

    session['is_admin'] = True
    session['username'] = username
    session.permanent = True  # Use PERMANENT_SESSION_LIFETIME

    log_audit('admin_login', 'user', None, {'username': username})
    return jsonify({'success': True, 'is_admin': True, 'username': username})


@api_bp.route('/auth/logout', methods=['POST'])
def logout():
    """Logout admin."""
    username = session.pop('username', None)
    session.pop('is_admin', None)
    if username:
        log_audit('admin_logout', 'user', None, {'username': username})
    return jsonify({'success': True})


@api_bp.route('/auth/session', methods=['GET'])
def current_session():
    """Report whether the caller is logged in as admin."""
    return jsonify({
        'success': True,
        'is_admin': is_admin(),
        'username': session.get('username') if is_admin() else None,
    })


@api_bp.route('/auth/csrf-token', methods=['GET'])
def csrf_token():
    """Token to send back in the X-CSRFToken header on writes."""
    return jsonify({'success': True, 'csrf_token': generate_csrf()})
