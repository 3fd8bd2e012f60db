"""
Team service for managing team operations.

Encapsulates all business logic related to:
- Team CRUD operations
- Wallet adjustments (audited)
- Squad management
"""

from typing import Any, Dict, List, Optional

from flask import current_app

from franchise_auction.constants import DEFAULT_WALLET, MAX_TEAM_NAME_LENGTH
from franchise_auction.db_utils import AuctionLock, with_lock
from franchise_auction.logger import get_logger, log_audit
from franchise_auction.models import Team
from franchise_auction.repositories.session_repository import AuctionSessionRepository
from franchise_auction.repositories.team_repository import TeamRepository
from franchise_auction.services.base import (
    BaseService,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from franchise_auction.services.player_service import player_to_dict
from franchise_auction.utils import validate_positive_int

logger = get_logger(__name__)


def spend_percentage(team: Team) -> float:
    """Share of the team's budget spent so far, rounded to one decimal."""
    budget = team.initial_wallet + team.wallet_adjustment
    if budget <= 0:
        return 0.0
    return round(team.spent * 100 / budget, 1)


def team_to_dict(team: Team, with_players: bool = False) -> Dict[str, Any]:
    """Serialize a team for API responses."""
    data = {
        'id': team.id,
        'name': team.name,
        'owner_name': team.owner_name,
        'owner_email': team.owner_email,
        'wallet': team.wallet,
        'initial_wallet': team.initial_wallet,
        'wallet_adjustment': team.wallet_adjustment,
        'spent': team.spent,
        'spent_percentage': spend_percentage(team),
        'player_count': len(team.players),
    }
    if with_players:
        data['players'] = [player_to_dict(p) for p in team.players]
    return data


def validate_team_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Team name is required")
    name = name.strip()
    if len(name) > MAX_TEAM_NAME_LENGTH:
        raise ValidationError(f"Team name must be at most {MAX_TEAM_NAME_LENGTH} characters")
    return name


class TeamService(BaseService):
    """Service for team-related operations.

    Handles team CRUD, wallet tracking, and squad queries. The wallet only
    changes through a sale or through ``adjust_wallet``.
    """

    def __init__(
        self,
        team_repo: Optional[TeamRepository] = None,
        session_repo: Optional[AuctionSessionRepository] = None
    ):
        """Initialize service with optional repository injection."""
        self.team_repo = team_repo or TeamRepository()
        self.session_repo = session_repo or AuctionSessionRepository()

    def create_team(
        self,
        name: str,
        owner_name: str = '',
        owner_email: str = '',
        wallet: Optional[Any] = None
    ) -> dict:
        """Create a new team.

        Args:
            name: Team name (unique, case-insensitive).
            owner_name: Owner's display name.
            owner_email: Owner's contact email.
            wallet: Starting budget (defaults to DEFAULT_WALLET).

        Returns:
            Dict with success status and team ID.

        Raises:
            ValidationError: If validation fails or the name is taken.
        """
        name = validate_team_name(name)

        if wallet is None:
            wallet = current_app.config.get('DEFAULT_WALLET', DEFAULT_WALLET)
        budget, error = validate_positive_int(wallet, 'Wallet', allow_zero=True)
        if error:
            raise ValidationError(error)

        with self.transaction():
            if self.team_repo.find_by_name(name):
                raise ValidationError(f"A team named {name} already exists")

            team = self.team_repo.create(
                name=name,
                owner_name=(owner_name or '').strip(),
                owner_email=(owner_email or '').strip(),
                wallet=budget,
                initial_wallet=budget,
                wallet_adjustment=0,
            )
            self.flush()

            logger.info(f"Created team: {team.name} (ID: {team.id})")

            return {'success': True, 'team_id': team.id}

    def update_team(
        self,
        team_id: int,
        name: Optional[str] = None,
        owner_name: Optional[str] = None,
        owner_email: Optional[str] = None
    ) -> dict:
        """Update a team's descriptive fields.

        Raises:
            NotFoundError: If team not found.
            ValidationError: If validation fails.
        """
        with self.transaction():
            team = self.team_repo.get(team_id)
            if not team:
                raise NotFoundError("Team not found")

            if name is not None:
                name = validate_team_name(name)
                existing = self.team_repo.find_by_name(name)
                if existing and existing.id != team.id:
                    raise ValidationError(f"A team named {name} already exists")
                team.name = name
            if owner_name is not None:
                team.owner_name = owner_name.strip()
            if owner_email is not None:
                team.owner_email = owner_email.strip()

            logger.info(f"Updated team: {team.name}")

            return {'success': True, 'team': team_to_dict(team)}

    @with_lock(AuctionLock)
    def adjust_wallet(
        self,
        team_id: int,
        delta: Any,
        reason: str = '',
        operator: Optional[str] = None
    ) -> dict:
        """Credit or debit a team's wallet outside of a sale.

        Args:
            team_id: ID of the team.
            delta: Signed amount to add to the wallet.
            reason: Free-text justification, kept in the audit log.
            operator: Admin performing the change.

        Returns:
            Dict with success status and the new wallet.

        Raises:
            NotFoundError: If team not found.
            ValidationError: If delta is not a non-zero integer or the
                wallet would go negative.
        """
        if isinstance(delta, bool):
            raise ValidationError("delta must be an integer")
        try:
            value = float(delta)
        except (TypeError, ValueError):
            raise ValidationError("delta must be an integer") from None
        if not value.is_integer() or value == 0:
            raise ValidationError("delta must be a non-zero whole number")
        amount = int(value)

        with self.transaction():
            team = self.team_repo.get_for_update(team_id)
            if not team:
                raise NotFoundError("Team not found")

            if team.wallet + amount < 0:
                raise ValidationError(
                    f"Adjustment would leave {team.name} with a negative wallet"
                )

            previous = team.wallet
            team.wallet += amount
            team.wallet_adjustment += amount
            wallet = team.wallet

            log_audit('wallet_adjusted', 'team', team.id, {
                'delta': amount,
                'previous_wallet': previous,
                'new_wallet': wallet,
                'reason': reason,
                'operator': operator or 'unknown',
            })

        return {'success': True, 'team_id': team_id, 'wallet': wallet}

    def delete_team(self, team_id: int) -> dict:
        """Delete a team that owns no players and has no bids.

        Raises:
            NotFoundError: If team not found.
            InvalidStateError: If the team has players or bids, or a lot is open.
        """
        with AuctionLock():
            with self.transaction():
                team = self.team_repo.get_for_update(team_id)
                if not team:
                    raise NotFoundError("Team not found")

                auction_session = self.session_repo.get_session()
                if auction_session and auction_session.is_active:
                    raise InvalidStateError("Cannot delete teams while a player is on the block")
                if team.players:
                    raise InvalidStateError("Cannot delete a team that has bought players")
                if team.bids:
                    raise InvalidStateError("Cannot delete a team with recorded bids")

                name = team.name
                self.team_repo.delete(team)

                logger.info(f"Deleted team: {name}")

                return {'success': True}

    def get_teams(self) -> List[dict]:
        """Get all teams with spend figures, ordered by name."""
        return [team_to_dict(t) for t in self.team_repo.get_all_with_players()]

    def get_team(self, team_id: int) -> dict:
        """Get a specific team by ID.

        Raises:
            NotFoundError: If team not found.
        """
        team = self.team_repo.get(team_id)
        if not team:
            raise NotFoundError("Team not found")
        return team_to_dict(team)

    def get_team_squad(self, team_id: int) -> dict:
        """Get team with its players in acquisition order.

        Raises:
            NotFoundError: If team not found.
        """
        team = self.team_repo.get_with_players(team_id)
        if not team:
            raise NotFoundError("Team not found")
        return team_to_dict(team, with_players=True)


# Singleton instance for use in routes
team_service = TeamService()
