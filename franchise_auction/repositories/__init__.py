"""
Data access for players, teams, the bid ledger and the auction session.

Services receive repositories through their constructors so tests can pass
repositories bound to a private event hub.
"""

from franchise_auction.repositories.base import BaseRepository
from franchise_auction.repositories.bid_repository import BidRepository
from franchise_auction.repositories.player_repository import PlayerRepository
from franchise_auction.repositories.session_repository import AuctionSessionRepository
from franchise_auction.repositories.team_repository import TeamRepository

__all__ = [
    'AuctionSessionRepository',
    'BaseRepository',
    'BidRepository',
    'PlayerRepository',
    'TeamRepository',
]
