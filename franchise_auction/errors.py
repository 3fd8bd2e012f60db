"""
Error handlers that turn every failure into the JSON envelope
``{'success': False, 'error': ...}`` with the matching status code.

Service errors carry their own status and extra fields (``minimum`` for a
low bid, ``required``/``available`` for a short wallet, ``errors`` and
``warnings`` for a rejected roster).
"""

from flask import Flask, g, jsonify
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException

from franchise_auction.logger import get_logger
from franchise_auction.services.base import ServiceError

logger = get_logger(__name__)

HTTP_MESSAGES = {
    400: 'Bad request',
    403: 'Access forbidden',
    404: 'Resource not found',
    405: 'Method not allowed',
    413: 'Roster file too large',
    429: 'Too many requests. Please try again later.',
}


def _internal_error(log_message: str):
    logger.error(log_message, exc_info=True)
    return jsonify({
        'success': False,
        'error': 'An internal error occurred',
        'request_id': g.get('request_id'),
    }), 500


def register_error_handlers(app: Flask) -> None:
    """Register the JSON error handlers on ``app``."""

    @app.errorhandler(ServiceError)
    def handle_service_error(error: ServiceError):
        if error.status_code >= 500:
            logger.error(f"Service error: {error.message}")
        else:
            logger.warning(f"{type(error).__name__}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error: CSRFError):
        logger.warning(f"CSRF validation failed: {error.description}")
        return jsonify({'success': False, 'error': 'CSRF token missing or invalid'}), 400

    def handle_http_error(error: HTTPException):
        return jsonify({'success': False, 'error': HTTP_MESSAGES[error.code]}), error.code

    for code in HTTP_MESSAGES:
        app.register_error_handler(code, handle_http_error)

    @app.errorhandler(500)
    def handle_internal_error(error):
        return _internal_error(f"Internal server error: {error}")

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        """HTTP errors without an entry above keep their code; anything else is a 500."""
        if isinstance(error, HTTPException):
            return jsonify({'success': False, 'error': error.description or error.name}), error.code
        return _internal_error(f"Unexpected error: {error}")
