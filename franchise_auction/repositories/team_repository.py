"""
Team repository for team data access.

Provides specialized queries for team entities.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from franchise_auction import db
from franchise_auction.models import Team
from franchise_auction.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for team data access operations."""

    def __init__(self):
        super().__init__(Team)

    def get_with_players(self, team_id: int) -> Optional[Team]:
        """Get a team with eager-loaded players.

        Args:
            team_id: ID of the team.

        Returns:
            Team instance with players loaded, or None.
        """
        return db.session.execute(
            select(Team)
            .options(selectinload(Team.players))
            .where(Team.id == team_id)
        ).scalars().first()

    def get_all_with_players(self) -> List[Team]:
        """Get all teams with eager-loaded players, ordered by name."""
        return db.session.execute(
            select(Team)
            .options(selectinload(Team.players))
            .order_by(Team.name)
        ).scalars().all()

    def find_by_name(self, name: str) -> Optional[Team]:
        """Find a team by case-insensitive name."""
        return db.session.execute(
            select(Team).where(func.lower(Team.name) == name.strip().lower())
        ).scalars().first()
