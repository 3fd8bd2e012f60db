"""
Player repository for player data access.

Provides specialized queries for player entities.
"""

from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import joinedload

from franchise_auction import db
from franchise_auction.enums import PlayerStatus
from franchise_auction.models import Player
from franchise_auction.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for player data access operations."""

    def __init__(self):
        super().__init__(Player)

    def get_by_status(self, status: PlayerStatus | str) -> List[Player]:
        """Get players in a given auction status.

        Args:
            status: PlayerStatus or its string value.

        Returns:
            List of Player instances ordered by ID.
        """
        return self.filter_by(status=PlayerStatus(status).value)

    def count_by_status(self, status: PlayerStatus | str) -> int:
        """Count players in a given auction status."""
        return self.count(status=PlayerStatus(status).value)

    def status_counts(self) -> Dict[str, int]:
        """Count players per status.

        Returns:
            Dict keyed by every PlayerStatus value (zero when absent).
        """
        rows = db.session.execute(
            select(Player.status, func.count(Player.id)).group_by(Player.status)
        ).all()
        counts = {status.value: 0 for status in PlayerStatus}
        counts.update({status: total for status, total in rows})
        return counts

    def get_sold(self) -> List[Player]:
        """Get sold players with eager-loaded team."""
        return db.session.execute(
            select(Player)
            .options(joinedload(Player.team))
            .where(Player.status == PlayerStatus.SOLD.value)
            .order_by(Player.sold_to_id, Player.acquisition_order)
        ).scalars().all()

    def next_acquisition_order(self, team_id: int) -> int:
        """Next squad position for a team (1-based)."""
        current = db.session.execute(
            select(func.max(Player.acquisition_order)).where(Player.sold_to_id == team_id)
        ).scalar()
        return (current or 0) + 1
