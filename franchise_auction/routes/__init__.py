"""
Blueprints: ``main`` for the index and health check, ``api`` for the JSON
API mounted at ``/api``.
"""

from flask import Blueprint

main_bp = Blueprint('main', __name__)
api_bp = Blueprint('api', __name__)

# View modules register on the blueprints above, so they import last
from franchise_auction.routes import main  # noqa: E402,F401
from franchise_auction.routes.api import auction, auth, players, results, teams  # noqa: E402,F401

__all__ = ['main_bp', 'api_bp']
