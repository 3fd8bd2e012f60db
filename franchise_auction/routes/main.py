"""
Service index and health check.
"""

from datetime import datetime, timezone

from flask import jsonify, url_for
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from franchise_auction import db
from franchise_auction.logger import get_logger
from franchise_auction.routes import main_bp
from franchise_auction.services.session_service import session_service

logger = get_logger(__name__)


@main_bp.route('/')
def index():
    """Entry point listing the main API resources."""
    return jsonify({
        'service': 'franchise-auction',
        'auction_state': url_for('api.auction_state'),
        'teams': url_for('api.list_teams'),
        'players': url_for('api.list_players'),
        'results': url_for('api.results_summary'),
        'health': url_for('main.health_check'),
    })


@main_bp.route('/health')
@main_bp.route('/api/health')
def health_check():
    """Database connectivity plus whether a lot is open, for load balancers
    and the operator's status light."""
    try:
        db.session.execute(text('SELECT 1'))
        auction_session = session_service.get_session()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'error': str(e),
        }), 503

    return jsonify({
        'status': 'healthy',
        'database': 'connected',
        'auction_active': auction_session.is_active,
        'round': auction_session.round,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
