"""
Player service for managing player operations.

Encapsulates all business logic related to:
- Player CRUD operations
- Player queries and filtering by auction status

Auction outcome fields (status, sold_to, sold_amount) are owned by the
allocation engine and can never be set here.
"""

from typing import Any, Dict, List, Optional

from franchise_auction.constants import DEFAULT_BASE_PRICE, MAX_PLAYER_NAME_LENGTH, MAX_ROLE_LENGTH
from franchise_auction.db_utils import AuctionLock
from franchise_auction.enums import PlayerRole, PlayerStatus
from franchise_auction.logger import get_logger
from franchise_auction.models import Player
from franchise_auction.repositories.player_repository import PlayerRepository
from franchise_auction.repositories.session_repository import AuctionSessionRepository
from franchise_auction.services.base import (
    BaseService,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from franchise_auction.utils import validate_positive_int

logger = get_logger(__name__)

# Fields an admin may edit
EDITABLE_FIELDS = ('name', 'role', 'batting_style', 'bowling_style', 'base_price', 'stats')


def player_to_dict(player: Player) -> Dict[str, Any]:
    """Serialize a player for API responses."""
    return {
        'id': player.id,
        'name': player.name,
        'role': player.role,
        'batting_style': player.batting_style,
        'bowling_style': player.bowling_style,
        'base_price': player.base_price,
        'status': player.status,
        'sold_to_id': player.sold_to_id,
        'sold_to': player.team.name if player.team else None,
        'sold_amount': player.sold_amount,
        'acquisition_order': player.acquisition_order,
        'times_unsold': player.times_unsold,
        'stats': player.stats or {},
    }


def validate_player_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Player name is required")
    name = name.strip()
    if len(name) > MAX_PLAYER_NAME_LENGTH:
        raise ValidationError(f"Player name must be at most {MAX_PLAYER_NAME_LENGTH} characters")
    return name


def validate_role(value: Any) -> str:
    role = PlayerRole.normalize(str(value))
    if len(role) > MAX_ROLE_LENGTH:
        raise ValidationError(f"Role must be at most {MAX_ROLE_LENGTH} characters")
    return role


def validate_base_price(value: Any) -> int:
    price, error = validate_positive_int(value, 'Base price', allow_zero=True)
    if error:
        raise ValidationError(error)
    return price


class PlayerService(BaseService):
    """Service for player-related operations.

    Handles player CRUD and status queries.
    """

    def __init__(
        self,
        player_repo: Optional[PlayerRepository] = None,
        session_repo: Optional[AuctionSessionRepository] = None
    ):
        """Initialize service with optional repository injection."""
        self.player_repo = player_repo or PlayerRepository()
        self.session_repo = session_repo or AuctionSessionRepository()

    def create_player(
        self,
        name: str,
        role: str = '',
        batting_style: str = '',
        bowling_style: str = '',
        base_price: Any = DEFAULT_BASE_PRICE,
        stats: Optional[Dict[str, Any]] = None
    ) -> dict:
        """Create a new available player.

        Args:
            name: Player's name.
            role: Player's role (e.g., 'Batsman', 'Bowler').
            batting_style: Batting style.
            bowling_style: Bowling style.
            base_price: Opening price for the main round.
            stats: Optional career statistics.

        Returns:
            Dict with success status and player ID.

        Raises:
            ValidationError: If validation fails.
        """
        name = validate_player_name(name)
        price = validate_base_price(base_price)

        with self.transaction():
            player = self.player_repo.create(
                name=name,
                role=validate_role(role) if role else '',
                batting_style=batting_style or '',
                bowling_style=bowling_style or '',
                base_price=price,
                status=PlayerStatus.AVAILABLE.value,
                stats=stats or {},
            )
            self.flush()

            logger.info(f"Created player: {player.name} (ID: {player.id})")

            return {'success': True, 'player_id': player.id}

    def update_player(self, player_id: int, fields: Dict[str, Any]) -> dict:
        """Update a player's descriptive fields.

        Args:
            player_id: ID of the player to update.
            fields: Any of name, role, batting_style, bowling_style,
                base_price, stats.

        Returns:
            Dict with success status and the updated player.

        Raises:
            NotFoundError: If player not found.
            ValidationError: If a field is unknown, read-only or invalid.
            InvalidStateError: If the base price of the player on the block
                would change.
        """
        unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(unknown)}")

        changes: Dict[str, Any] = {}
        if fields.get('name') is not None:
            changes['name'] = validate_player_name(fields['name'])
        if fields.get('role') is not None:
            changes['role'] = validate_role(fields['role'])
        for key in ('batting_style', 'bowling_style'):
            if fields.get(key) is not None:
                changes[key] = str(fields[key]).strip()
        if fields.get('base_price') is not None:
            changes['base_price'] = validate_base_price(fields['base_price'])
        if fields.get('stats') is not None:
            if not isinstance(fields['stats'], dict):
                raise ValidationError("stats must be an object")
            changes['stats'] = fields['stats']

        with AuctionLock():
            with self.transaction():
                player = self.player_repo.get_for_update(player_id)
                if not player:
                    raise NotFoundError("Player not found")

                auction_session = self.session_repo.get_session()
                if ('base_price' in changes and auction_session
                        and auction_session.current_player_id == player.id):
                    raise InvalidStateError("Cannot change the base price of the player on the block")

                self.player_repo.update(player, **changes)

                logger.info(f"Updated player: {player.name}")

                return {'success': True, 'player': player_to_dict(player)}

    def delete_player(self, player_id: int) -> dict:
        """Delete a player who has not been auctioned.

        Raises:
            NotFoundError: If player not found.
            InvalidStateError: If the player is on the block, sold, or has bids.
        """
        with AuctionLock():
            with self.transaction():
                player = self.player_repo.get_for_update(player_id)
                if not player:
                    raise NotFoundError("Player not found")

                auction_session = self.session_repo.get_session()
                if auction_session and auction_session.current_player_id == player.id:
                    raise InvalidStateError("Cannot delete the player currently on the block")
                if player.status == PlayerStatus.SOLD.value:
                    raise InvalidStateError("Cannot delete a sold player")
                if player.bids:
                    raise InvalidStateError("Cannot delete a player with recorded bids")

                name = player.name
                self.player_repo.delete(player)

                logger.info(f"Deleted player: {name}")

                return {'success': True}

    def get_player(self, player_id: int) -> dict:
        """Get a specific player by ID.

        Raises:
            NotFoundError: If player not found.
        """
        player = self.player_repo.get(player_id)
        if not player:
            raise NotFoundError("Player not found")
        return player_to_dict(player)

    def get_players(self, status: Optional[str] = None) -> List[dict]:
        """List players, optionally filtered by auction status.

        Raises:
            ValidationError: If the status is unknown.
        """
        if status:
            try:
                players = self.player_repo.get_by_status(status)
            except ValueError:
                raise ValidationError(f"Unknown player status: {status}") from None
        else:
            players = self.player_repo.get_all()
        return [player_to_dict(p) for p in players]

    def get_status_counts(self) -> Dict[str, int]:
        return self.player_repo.status_counts()


# Singleton instance for use in routes
player_service = PlayerService()
