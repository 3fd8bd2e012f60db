"""
API routes package for the franchise auction server.

Contains all API endpoints organized by functionality.
"""

# Import submodules to register routes
from franchise_auction.routes.api import auth, teams, players, auction, results

__all__ = ['auth', 'teams', 'players', 'auction', 'results']
