"""
Bid repository: the append-only bid ledger.

Bids are never updated or deleted. The highest bid is always computed by
the database, never taken from client state; ties at the same amount go
to the earliest arrival (lowest ID).
"""

from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from franchise_auction import db
from franchise_auction.events import ALL_BIDS_TOPIC, EventHub, bid_topic, event_hub
from franchise_auction.models import Bid
from franchise_auction.repositories.base import BaseRepository


class BidRepository(BaseRepository[Bid]):
    """Repository for bid ledger operations."""

    def __init__(self, hub: Optional[EventHub] = None):
        super().__init__(Bid)
        self.hub = hub or event_hub

    def record_bid(
        self,
        player_id: int,
        team_id: int,
        amount: int,
        lot: int,
        round: str
    ) -> Bid:
        """Append a bid to the ledger (not yet committed).

        Args:
            player_id: ID of the player bid on.
            team_id: ID of the bidding team.
            amount: Bid amount.
            lot: Session lot the bid belongs to.
            round: Auction round at the time of the bid.

        Returns:
            The new Bid instance.
        """
        return self.create(
            player_id=player_id,
            team_id=team_id,
            amount=amount,
            lot=lot,
            round=round
        )

    def highest_bid(self, player_id: int, lot: Optional[int] = None) -> Optional[Bid]:
        """Get the highest bid for a player.

        Args:
            player_id: ID of the player.
            lot: Restrict to one lot (None means every lot).

        Returns:
            Highest Bid (earliest on ties) or None.
        """
        query = select(Bid).where(Bid.player_id == player_id)
        if lot is not None:
            query = query.where(Bid.lot == lot)
        return db.session.execute(
            query.order_by(Bid.amount.desc(), Bid.id.asc()).limit(1)
        ).scalars().first()

    def bids_for(
        self,
        player_id: int,
        lot: Optional[int] = None,
        with_team: bool = False
    ) -> List[Bid]:
        """Get bid history for a player, most recent first.

        Args:
            player_id: ID of the player.
            lot: Restrict to one lot (None means every lot).
            with_team: Eager load team relationship.

        Returns:
            List of Bid instances.
        """
        query = select(Bid).where(Bid.player_id == player_id)
        if lot is not None:
            query = query.where(Bid.lot == lot)
        if with_team:
            query = query.options(joinedload(Bid.team))
        return db.session.execute(query.order_by(Bid.id.desc())).scalars().all()

    def count_for_player(self, player_id: int, lot: Optional[int] = None) -> int:
        """Count bids for a player, optionally within one lot."""
        if lot is None:
            return self.count(player_id=player_id)
        return self.count(player_id=player_id, lot=lot)

    def update(self, instance: Bid, **fields) -> Bid:
        raise NotImplementedError("The bid ledger is append-only")

    def delete(self, instance: Bid) -> None:
        raise NotImplementedError("The bid ledger is append-only")

    # ==================== SUBSCRIPTIONS ====================

    def subscribe(self, player_id: int, callback: Callable[[dict], None]) -> Callable[[], None]:
        """Receive every new bid on a player.

        Returns:
            Unsubscribe function.
        """
        return self.hub.subscribe(bid_topic(player_id), callback)

    def subscribe_all(self, callback: Callable[[dict], None]) -> Callable[[], None]:
        """Receive every new bid on any player."""
        return self.hub.subscribe(ALL_BIDS_TOPIC, callback)

    def publish(self, bid_data: dict) -> None:
        """Notify subscribers of a committed bid."""
        self.hub.publish(bid_topic(bid_data['player_id']), bid_data)
        self.hub.publish(ALL_BIDS_TOPIC, bid_data)
