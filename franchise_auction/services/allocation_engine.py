"""
Allocation engine: decides who wins a lot and applies the consequences.

Encapsulates the business rules for:
- Minimum acceptable bid and the replay-round price floor
- Bid validation (advisory wallet check)
- Completing a sale (authoritative wallet check, debit, squad, status)
- Marking players unsold / permanently unsold
- Reconciliation of sale and wallet records

A sale is applied in one database transaction, in the order: debit the
wallet, add the player to the squad, mark the player sold, close the lot.
"""

from decimal import ROUND_FLOOR, Decimal
from typing import List, Optional, Tuple

from flask import current_app

from franchise_auction.dataclasses import ReconciliationIssue, SaleResult
from franchise_auction.db_utils import AuctionLock, BidLock
from franchise_auction.enums import AuctionRound, PlayerStatus
from franchise_auction.logger import get_logger, log_audit
from franchise_auction.models import AuctionSession, Bid, Player, Team
from franchise_auction.repositories.bid_repository import BidRepository
from franchise_auction.repositories.player_repository import PlayerRepository
from franchise_auction.repositories.session_repository import AuctionSessionRepository
from franchise_auction.repositories.team_repository import TeamRepository
from franchise_auction.services.base import (
    BaseService,
    BidTooLowError,
    InsufficientFundsError,
    InvalidStateError,
    NoBidsError,
    NotFoundError,
    SameBidderError,
    ValidationError,
)
from franchise_auction.services.session_service import (
    AuctionSessionService,
    session_service as default_session_service,
    session_to_dict,
)
from franchise_auction.utils import validate_positive_int

logger = get_logger(__name__)


class AllocationEngine(BaseService):
    """Service resolving lots into sales or unsold outcomes.

    The engine holds explicit handles to the session state machine and the
    ledgers it reads; nothing is looked up from globals at call time.
    """

    def __init__(
        self,
        session_service: Optional[AuctionSessionService] = None,
        bid_repo: Optional[BidRepository] = None,
        player_repo: Optional[PlayerRepository] = None,
        team_repo: Optional[TeamRepository] = None
    ):
        """Initialize engine with optional collaborator injection."""
        self.session_service = session_service or default_session_service
        self.bid_repo = bid_repo or BidRepository()
        self.player_repo = player_repo or PlayerRepository()
        self.team_repo = team_repo or TeamRepository()

    @property
    def session_repo(self) -> AuctionSessionRepository:
        return self.session_service.session_repo

    # ==================== PRICING ====================

    def effective_base_price(self, player: Player, auction_session: AuctionSession) -> int:
        """Bidding floor for a player in the current round.

        In the unsold replay round a previously unsold player opens at
        floor(base_price * unsold_price_reduction_factor). The stored base
        price is never changed.
        """
        if (auction_session.round == AuctionRound.UNSOLD_REPLAY.value
                and player.times_unsold > 0):
            reduced = Decimal(player.base_price) * Decimal(str(auction_session.unsold_price_reduction_factor))
            return int(reduced.to_integral_value(rounding=ROUND_FLOOR))
        return player.base_price

    def minimum_acceptable_bid(self, player: Player, auction_session: AuctionSession,
                               highest: Optional[Bid] = None) -> int:
        """Smallest bid accepted for the player in the open lot.

        Highest bid in the lot plus the increment, or the effective base
        price when the lot has no bids yet. Pass ``highest`` when the caller
        has already read it.
        """
        if highest is None:
            highest = self.bid_repo.highest_bid(player.id, lot=auction_session.current_lot)
        if highest is not None:
            return highest.amount + auction_session.min_bid_increment
        return self.effective_base_price(player, auction_session)

    # ==================== BID VALIDATION ====================

    def validate_bid(
        self,
        player_id: int,
        team_id: int,
        amount
    ) -> Tuple[Player, Team, AuctionSession, int]:
        """Check a bid against the rules before it enters the ledger.

        The wallet check here is advisory; resolve_player_sale re-checks it.

        Returns:
            Tuple of (player, team, session, amount as int).

        Raises:
            ValidationError: If the amount is not a positive integer.
            InvalidStateError: If the player is not on the block.
            NotFoundError: If the player or team does not exist.
            SameBidderError: If self-raising is disabled and the team already leads.
            BidTooLowError: If the amount is below the minimum.
            InsufficientFundsError: If the team's wallet cannot cover the amount.
        """
        amount, error = validate_positive_int(amount, 'Bid amount')
        if error:
            raise ValidationError(error)

        auction_session = self.session_service.get_session()
        if not auction_session.is_active or auction_session.current_player_id != player_id:
            raise InvalidStateError("Player is not up for auction")

        player = self.player_repo.get(player_id)
        if not player:
            raise NotFoundError("Player not found")

        team = self.team_repo.get(team_id)
        if not team:
            raise NotFoundError("Team not found")

        highest = self.bid_repo.highest_bid(player.id, lot=auction_session.current_lot)

        if (highest is not None and highest.team_id == team.id
                and not current_app.config.get('ALLOW_SELF_RAISE', True)):
            raise SameBidderError(f"{team.name} already holds the highest bid")

        minimum = self.minimum_acceptable_bid(player, auction_session, highest)
        if amount < minimum:
            raise BidTooLowError(minimum)

        if team.wallet < amount:
            raise InsufficientFundsError(
                f"{team.name} cannot afford {amount} (wallet {team.wallet})",
                required=amount,
                available=team.wallet
            )

        return player, team, auction_session, amount

    # ==================== RESOLUTION ====================

    def _require_current(self, auction_session: Optional[AuctionSession], player_id: int) -> None:
        if (auction_session is None or not auction_session.is_active
                or auction_session.current_player_id != player_id):
            raise InvalidStateError("Player is not currently on the block")

    def resolve_player_sale(self, player_id: int) -> SaleResult:
        """Complete the sale of the player on the block to the highest bidder.

        Args:
            player_id: ID of the player being sold.

        Returns:
            SaleResult with the winning team and amount.

        Raises:
            NotFoundError: If the player or winning team does not exist.
            InvalidStateError: If the player is not the open lot's player.
            NoBidsError: If the lot has no bids.
            InsufficientFundsError: If the winner's wallet no longer covers
                the bid; nothing is changed and the lot stays open.
        """
        with AuctionLock():
            with BidLock():
                with self.transaction():
                    auction_session = self.session_repo.get_session_for_update()
                    player = self.player_repo.get_for_update(player_id)
                    if not player:
                        raise NotFoundError("Player not found")

                    self._require_current(auction_session, player.id)
                    if player.status != PlayerStatus.AVAILABLE.value:
                        raise InvalidStateError(
                            f"Player {player.name} cannot be sold (status: {player.status})"
                        )

                    highest = self.bid_repo.highest_bid(player.id, lot=auction_session.current_lot)
                    if highest is None:
                        raise NoBidsError()

                    team = self.team_repo.get_for_update(highest.team_id)
                    if not team:
                        raise NotFoundError("Winning team not found")

                    # Authoritative check: the wallet may have changed since the bid
                    if team.wallet < highest.amount:
                        raise InsufficientFundsError(
                            f"{team.name} has {team.wallet} but the winning bid is {highest.amount}",
                            required=highest.amount,
                            available=team.wallet
                        )

                    amount = highest.amount
                    acquisition_order = self.player_repo.next_acquisition_order(team.id)

                    team.wallet -= amount
                    player.sold_to_id = team.id
                    player.acquisition_order = acquisition_order
                    player.sold_amount = amount
                    player.status = PlayerStatus.SOLD.value
                    self.session_service.close_lot(auction_session)
                    self.flush()

                    result = SaleResult(
                        player_id=player.id,
                        player_name=player.name,
                        team_id=team.id,
                        team_name=team.name,
                        amount=amount,
                        remaining_wallet=team.wallet,
                    )
                    payload = session_to_dict(auction_session)

        logger.info(f"Player {result.player_name} sold to {result.team_name} for {result.amount}")
        log_audit('player_sold', 'player', result.player_id, {
            'team_id': result.team_id,
            'amount': result.amount,
            'remaining_wallet': result.remaining_wallet,
        })
        self.session_repo.publish(payload)
        return result

    def mark_unsold(self, player_id: int) -> dict:
        """Close the open lot with no sale.

        A player going unsold becomes ``unsold`` and may be replayed once at
        the reduced floor. A player who already went unsold and is unsold
        again in the replay round becomes ``permanently_unsold``. No team is
        touched.

        Raises:
            InvalidStateError: If the player is not the open lot's player.
            NotFoundError: If the player does not exist.
        """
        with AuctionLock():
            with self.transaction():
                auction_session = self.session_repo.get_session_for_update()
                self._require_current(auction_session, player_id)

                player = self.player_repo.get_for_update(player_id)
                if not player:
                    raise NotFoundError("Player not found")

                replaying = auction_session.round == AuctionRound.UNSOLD_REPLAY.value
                if player.times_unsold > 0 and replaying:
                    player.status = PlayerStatus.PERMANENTLY_UNSOLD.value
                else:
                    player.status = PlayerStatus.UNSOLD.value
                player.times_unsold += 1
                player.sold_to_id = None
                player.sold_amount = 0
                player.acquisition_order = None

                self.session_service.close_lot(auction_session)

                status = player.status
                player_name = player.name
                payload = session_to_dict(auction_session)

        logger.info(f"Player {player_name} marked as {status}")
        self.session_repo.publish(payload)
        return {'success': True, 'player_id': player_id, 'status': status}

    # ==================== RECONCILIATION ====================

    def reconcile(self) -> List[ReconciliationIssue]:
        """Check sale and wallet records for inconsistencies.

        Read-only. Each finding is logged as a warning and returned.
        """
        issues: List[ReconciliationIssue] = []

        for player in self.player_repo.get_all():
            is_sold = player.status == PlayerStatus.SOLD.value
            if is_sold and (player.sold_to_id is None or player.sold_amount <= 0):
                issues.append(ReconciliationIssue(
                    'player', player.id, 'sold player has no sale record',
                    expected='team and positive amount',
                    actual={'sold_to_id': player.sold_to_id, 'sold_amount': player.sold_amount}
                ))
            elif not is_sold and (player.sold_to_id is not None or player.sold_amount != 0):
                issues.append(ReconciliationIssue(
                    'player', player.id, f'{player.status} player carries sale data',
                    expected={'sold_to_id': None, 'sold_amount': 0},
                    actual={'sold_to_id': player.sold_to_id, 'sold_amount': player.sold_amount}
                ))

        for team in self.team_repo.get_all_with_players():
            expected = team.initial_wallet + team.wallet_adjustment - team.spent
            if team.wallet != expected:
                issues.append(ReconciliationIssue(
                    'team', team.id, 'wallet does not match recorded purchases',
                    expected=expected, actual=team.wallet
                ))
            if team.wallet < 0:
                issues.append(ReconciliationIssue(
                    'team', team.id, 'wallet is negative', expected='>= 0', actual=team.wallet
                ))

        auction_session = self.session_repo.get_session()
        if auction_session is not None and auction_session.current_player_id is not None:
            current = auction_session.current_player
            if not auction_session.is_active:
                issues.append(ReconciliationIssue(
                    'auction_session', auction_session.id, 'idle session still names a current player',
                    expected=None, actual=auction_session.current_player_id
                ))
            elif current is None or current.status != PlayerStatus.AVAILABLE.value:
                issues.append(ReconciliationIssue(
                    'auction_session', auction_session.id, 'current player is not available',
                    expected=PlayerStatus.AVAILABLE.value,
                    actual=current.status if current else None
                ))

        for issue in issues:
            logger.warning(
                f"Reconciliation: {issue.entity_type} {issue.entity_id}: {issue.problem}"
            )

        return issues


# Singleton instance for use in routes
allocation_engine = AllocationEngine()
