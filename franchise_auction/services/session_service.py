"""
Auction session service: the session state machine.

States:
- Idle: no player on the block (is_active False, no current player)
- Bidding: one player on the block for the current lot

The round axis (main / unsold_replay) only changes while Idle. Starting a
lot while another is open is rejected, never queued.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from flask import current_app

from franchise_auction.constants import MIN_BID_INCREMENT, UNSOLD_PRICE_REDUCTION
from franchise_auction.db_utils import AuctionLock
from franchise_auction.enums import AuctionRound, PlayerStatus
from franchise_auction.logger import get_logger, log_audit
from franchise_auction.models import AuctionSession
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


def session_to_dict(auction_session: AuctionSession) -> Dict[str, Any]:
    """Serialize the session record for API responses and subscribers."""
    return {
        'is_active': auction_session.is_active,
        'current_player_id': auction_session.current_player_id,
        'round': auction_session.round,
        'lot': auction_session.current_lot,
        'min_bid_increment': auction_session.min_bid_increment,
        'unsold_price_reduction_factor': auction_session.unsold_price_reduction_factor,
        'auction_date': (
            auction_session.auction_date.isoformat()
            if auction_session.auction_date else None
        ),
    }


def parse_auction_date(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 auction date.

    Raises:
        ValidationError: If the value is not a valid date.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError("auction_date must be an ISO-8601 date") from None


def validate_reduction_factor(value: Any) -> float:
    """Validate the unsold price reduction factor, a fraction in (0, 1]."""
    try:
        factor = float(value)
    except (TypeError, ValueError):
        raise ValidationError("unsold_price_reduction_factor must be a number") from None
    if not 0 < factor <= 1:
        raise ValidationError("unsold_price_reduction_factor must be greater than 0 and at most 1")
    return factor


class AuctionSessionService(BaseService):
    """Service owning the auction session state machine.

    Handles lot start/end and round transitions with locking and
    transaction handling. Sale resolution lives in the allocation engine,
    which closes lots through ``close_lot``.
    """

    def __init__(
        self,
        session_repo: Optional[AuctionSessionRepository] = None,
        player_repo: Optional[PlayerRepository] = None
    ):
        """Initialize service with optional repository injection."""
        self.session_repo = session_repo or AuctionSessionRepository()
        self.player_repo = player_repo or PlayerRepository()

    # ==================== LIFECYCLE ====================

    def init(self) -> AuctionSession:
        """Create the session record with configured defaults if absent.

        Idempotent: an existing record is returned untouched.
        """
        with self.transaction():
            auction_session = self.session_repo.get_session()
            if auction_session is None:
                config = current_app.config
                auction_session = self.session_repo.get_or_create(
                    is_active=False,
                    current_player_id=None,
                    round=AuctionRound.MAIN.value,
                    min_bid_increment=config.get('MIN_BID_INCREMENT', MIN_BID_INCREMENT),
                    unsold_price_reduction_factor=validate_reduction_factor(
                        config.get('UNSOLD_PRICE_REDUCTION', UNSOLD_PRICE_REDUCTION)
                    ),
                    auction_date=parse_auction_date(config.get('DEFAULT_AUCTION_DATE')),
                    current_lot=0,
                )
                logger.info("Auction session initialized")
        return auction_session

    def get_session(self) -> AuctionSession:
        """Get the session record, initializing it on first use."""
        return self.session_repo.get_session() or self.init()

    def _session_for_update(self) -> AuctionSession:
        auction_session = self.session_repo.get_session_for_update()
        if auction_session is None:
            raise InvalidStateError("Auction session has not been initialized")
        return auction_session

    # ==================== LOTS ====================

    def start_auction(self, player_id: int) -> dict:
        """Put a player on the block (Idle -> Bidding).

        Args:
            player_id: ID of the player to auction.

        Returns:
            Dict with success status, player and lot number.

        Raises:
            InvalidStateError: If a lot is already open.
            NotFoundError: If the player does not exist or is not available.
        """
        self.get_session()

        with AuctionLock():
            with self.transaction():
                auction_session = self._session_for_update()
                if auction_session.is_active:
                    raise InvalidStateError(
                        "An auction is already in progress; resolve it before starting another"
                    )

                player = self.player_repo.get_for_update(player_id)
                if not player:
                    raise NotFoundError("Player not found")
                if player.status != PlayerStatus.AVAILABLE.value:
                    raise NotFoundError(
                        f"Player {player.name} is not available for auction (status: {player.status})"
                    )

                self.session_repo.update(
                    auction_session,
                    is_active=True,
                    current_player_id=player.id,
                    current_lot=auction_session.current_lot + 1,
                )
                payload = session_to_dict(auction_session)

                logger.info(
                    f"Auction started for player: {player.name} "
                    f"(lot {auction_session.current_lot}, round {auction_session.round})"
                )

        self.session_repo.publish(payload)
        return {'success': True, 'player_id': player_id, 'lot': payload['lot']}

    def close_lot(self, auction_session: AuctionSession) -> None:
        """Return the session to Idle inside the caller's transaction."""
        self.session_repo.update(
            auction_session,
            is_active=False,
            current_player_id=None,
        )

    def end_auction(self) -> dict:
        """Close the open lot without resolving the player (Bidding -> Idle).

        The player stays available; its bids remain in the ledger under the
        closed lot and do not carry over to a later lot.

        Raises:
            InvalidStateError: If no lot is open.
        """
        self.get_session()

        with AuctionLock():
            with self.transaction():
                auction_session = self._session_for_update()
                if not auction_session.is_active:
                    raise InvalidStateError("No auction in progress")

                player_id = auction_session.current_player_id
                self.close_lot(auction_session)
                payload = session_to_dict(auction_session)

                logger.info(f"Auction ended without resolution for player {player_id}")

        self.session_repo.publish(payload)
        return {'success': True, 'player_id': player_id}

    # ==================== ROUNDS ====================

    def advance_round(self) -> dict:
        """Move from the main round to the unsold replay round.

        Every unsold player becomes available again; their stored base
        price is untouched and the reduced floor is computed at bid time.

        Raises:
            InvalidStateError: If a lot is open, the replay round is already
                running, players remain available, or nobody went unsold.
        """
        self.get_session()

        with AuctionLock():
            with self.transaction():
                auction_session = self._session_for_update()
                if auction_session.is_active:
                    raise InvalidStateError("Cannot change rounds while a player is on the block")
                if auction_session.round == AuctionRound.UNSOLD_REPLAY.value:
                    raise InvalidStateError("The unsold replay round is already running")

                remaining = self.player_repo.count_by_status(PlayerStatus.AVAILABLE)
                if remaining:
                    raise InvalidStateError(
                        f"{remaining} player(s) are still available in the main round"
                    )

                unsold = self.player_repo.get_by_status(PlayerStatus.UNSOLD)
                if not unsold:
                    raise InvalidStateError("There are no unsold players to replay")

                for player in unsold:
                    player.status = PlayerStatus.AVAILABLE.value

                self.session_repo.update(auction_session, round=AuctionRound.UNSOLD_REPLAY.value)
                payload = session_to_dict(auction_session)
                replayed = [p.id for p in unsold]

                log_audit('round_advanced', 'auction_session', auction_session.id, {
                    'round': AuctionRound.UNSOLD_REPLAY.value,
                    'replayed_players': replayed,
                })

        self.session_repo.publish(payload)
        return {'success': True, 'round': payload['round'], 'replayed': len(replayed)}

    def reopen_main_round(self, operator: Optional[str] = None) -> dict:
        """Operator override: return to the main round.

        Never happens automatically; always written to the audit log.

        Raises:
            InvalidStateError: If a lot is open or the main round is running.
        """
        self.get_session()

        with AuctionLock():
            with self.transaction():
                auction_session = self._session_for_update()
                if auction_session.is_active:
                    raise InvalidStateError("Cannot change rounds while a player is on the block")
                if auction_session.round == AuctionRound.MAIN.value:
                    raise InvalidStateError("The main round is already running")

                self.session_repo.update(auction_session, round=AuctionRound.MAIN.value)
                payload = session_to_dict(auction_session)

                logger.warning(f"Main round reopened by operator {operator or 'unknown'}")
                log_audit('main_round_reopened', 'auction_session', auction_session.id, {
                    'operator': operator or 'unknown',
                    'previous_round': AuctionRound.UNSOLD_REPLAY.value,
                })

        self.session_repo.publish(payload)
        return {'success': True, 'round': payload['round']}

    # ==================== SETTINGS ====================

    def update_settings(
        self,
        min_bid_increment: Optional[Any] = None,
        unsold_price_reduction_factor: Optional[Any] = None,
        auction_date: Optional[Any] = None
    ) -> dict:
        """Update bid increment policy, replay price factor or auction date.

        Raises:
            InvalidStateError: If a lot is open.
            ValidationError: If a value is invalid.
        """
        fields: Dict[str, Any] = {}

        if min_bid_increment is not None:
            increment, error = validate_positive_int(min_bid_increment, 'min_bid_increment')
            if error:
                raise ValidationError(error)
            fields['min_bid_increment'] = increment

        if unsold_price_reduction_factor is not None:
            fields['unsold_price_reduction_factor'] = validate_reduction_factor(
                unsold_price_reduction_factor
            )

        if auction_date is not None:
            fields['auction_date'] = parse_auction_date(auction_date)

        if not fields:
            raise ValidationError("No settings provided")

        self.get_session()

        with AuctionLock():
            with self.transaction():
                auction_session = self._session_for_update()
                if auction_session.is_active:
                    raise InvalidStateError("Settings cannot change while a player is on the block")

                self.session_repo.update(auction_session, **fields)
                payload = session_to_dict(auction_session)

                log_audit('settings_updated', 'auction_session', auction_session.id, {
                    key: payload.get(key) for key in fields
                })

        self.session_repo.publish(payload)
        return {'success': True, 'session': payload}


# Singleton instance for use in routes
session_service = AuctionSessionService()
