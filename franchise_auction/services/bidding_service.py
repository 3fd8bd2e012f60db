"""
Bidding service: the surface bidders and displays talk to.

Encapsulates:
- Placing bids (validated by the allocation engine, recorded in the ledger)
- The live auction snapshot
- Bid history
"""

from typing import Any, Dict, List, Optional

from franchise_auction.constants import BID_INCREMENTS
from franchise_auction.dataclasses import AuctionSnapshot
from franchise_auction.db_utils import BidLock
from franchise_auction.logger import get_logger
from franchise_auction.models import Bid, Team
from franchise_auction.repositories.bid_repository import BidRepository
from franchise_auction.services.allocation_engine import (
    AllocationEngine,
    allocation_engine as default_engine,
)
from franchise_auction.services.base import BaseService, NotFoundError
from franchise_auction.services.player_service import player_to_dict

logger = get_logger(__name__)


def bid_to_dict(bid: Bid, team: Optional[Team] = None) -> Dict[str, Any]:
    """Serialize a ledger entry for API responses and subscribers."""
    team = team or bid.team
    return {
        'id': bid.id,
        'player_id': bid.player_id,
        'team_id': bid.team_id,
        'team_name': team.name if team else None,
        'amount': bid.amount,
        'lot': bid.lot,
        'round': bid.round,
        'timestamp': bid.timestamp.isoformat() if bid.timestamp else None,
    }


def quick_raises(minimum: int) -> List[int]:
    """Suggested bid amounts starting at the minimum.

    The step grows with the price: under 1000 it is 100, under 5000 it is
    500, and so on up the BID_INCREMENTS table.
    """
    step = BID_INCREMENTS[-1][1]
    for threshold, increment in BID_INCREMENTS:
        if minimum < threshold:
            step = increment
            break
    return [minimum, minimum + step, minimum + 2 * step, minimum + 5 * step]


class BiddingService(BaseService):
    """Service for placing bids and reading live auction state."""

    def __init__(
        self,
        engine: Optional[AllocationEngine] = None,
        bid_repo: Optional[BidRepository] = None
    ):
        """Initialize service with optional collaborator injection."""
        self.engine = engine or default_engine
        self.bid_repo = bid_repo or self.engine.bid_repo

    def place_bid(self, player_id: int, team_id: int, amount: Any) -> dict:
        """Place a bid on the player currently on the block.

        Bids are validated and recorded one at a time, so two bids can
        never both be checked against the same highest bid.

        Args:
            player_id: ID of the player being bid on.
            team_id: ID of the team placing the bid.
            amount: Bid amount.

        Returns:
            Dict with success status and the recorded bid.

        Raises:
            ServiceError: Any rejection raised by AllocationEngine.validate_bid.
        """
        with BidLock():
            with self.transaction():
                player, team, auction_session, value = self.engine.validate_bid(
                    player_id, team_id, amount
                )
                bid = self.bid_repo.record_bid(
                    player_id=player.id,
                    team_id=team.id,
                    amount=value,
                    lot=auction_session.current_lot,
                    round=auction_session.round,
                )
                self.flush()
                bid_data = bid_to_dict(bid, team)

                logger.info(
                    f"Bid placed: Team {team.name} bid {value} on {player.name}"
                )

        self.bid_repo.publish(bid_data)
        return {'success': True, 'bid': bid_data}

    def current_auction_state(self) -> AuctionSnapshot:
        """Build a read-only snapshot of the session and the open lot."""
        auction_session = self.engine.session_service.get_session()

        snapshot = AuctionSnapshot(
            is_active=auction_session.is_active,
            round=auction_session.round,
            lot=auction_session.current_lot,
            min_bid_increment=auction_session.min_bid_increment,
            unsold_price_reduction_factor=auction_session.unsold_price_reduction_factor,
            auction_date=(
                auction_session.auction_date.isoformat()
                if auction_session.auction_date else None
            ),
        )

        player = auction_session.current_player
        if auction_session.is_active and player is not None:
            current = player_to_dict(player)
            current['effective_base_price'] = self.engine.effective_base_price(player, auction_session)
            snapshot.current_player = current

            highest = self.bid_repo.highest_bid(player.id, lot=auction_session.current_lot)
            if highest is not None:
                snapshot.highest_bid = bid_to_dict(highest)

            snapshot.minimum_bid = self.engine.minimum_acceptable_bid(player, auction_session)
            snapshot.quick_raises = quick_raises(snapshot.minimum_bid)

        return snapshot

    def bid_history(self, player_id: int, lot: Optional[int] = None) -> List[dict]:
        """Get a player's bids, most recent first.

        Raises:
            NotFoundError: If player not found.
        """
        if not self.engine.player_repo.get(player_id):
            raise NotFoundError("Player not found")
        bids = self.bid_repo.bids_for(player_id, lot=lot, with_team=True)
        return [bid_to_dict(b) for b in bids]


# Singleton instance for use in routes
bidding_service = BiddingService()
