"""
Service layer for business logic.

This module provides service classes that encapsulate business logic,
separating it from HTTP handling in routes and data access in repositories.
"""

from franchise_auction.services.base import (
    BaseService,
    BidTooLowError,
    ImportFileError,
    InsufficientFundsError,
    InvalidStateError,
    NoBidsError,
    NotFoundError,
    SameBidderError,
    ServiceError,
    ValidationError,
)
from franchise_auction.services.session_service import AuctionSessionService, session_service
from franchise_auction.services.allocation_engine import AllocationEngine, allocation_engine
from franchise_auction.services.bidding_service import BiddingService, bidding_service
from franchise_auction.services.player_service import PlayerService, player_service
from franchise_auction.services.team_service import TeamService, team_service
from franchise_auction.services.import_service import ImportService, import_service
from franchise_auction.services.results_service import ResultsService, results_service

__all__ = [
    'BaseService',
    'ServiceError',
    'NotFoundError',
    'ValidationError',
    'InvalidStateError',
    'NoBidsError',
    'InsufficientFundsError',
    'BidTooLowError',
    'SameBidderError',
    'ImportFileError',
    'AuctionSessionService',
    'session_service',
    'AllocationEngine',
    'allocation_engine',
    'BiddingService',
    'bidding_service',
    'PlayerService',
    'player_service',
    'TeamService',
    'team_service',
    'ImportService',
    'import_service',
    'ResultsService',
    'results_service',
]
