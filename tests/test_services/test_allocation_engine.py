"""
Tests for the AllocationEngine.

Covers pricing, bid validation, sale resolution, unsold handling and
reconciliation.
"""

import pytest

from franchise_auction import db
from franchise_auction.models import AuctionSession, Bid, Player, Team
from franchise_auction.repositories.bid_repository import BidRepository
from franchise_auction.services.allocation_engine import AllocationEngine
from franchise_auction.services.base import (
    BidTooLowError,
    InsufficientFundsError,
    InvalidStateError,
    NoBidsError,
    NotFoundError,
    SameBidderError,
    ValidationError,
)
from franchise_auction.services.bidding_service import BiddingService
from franchise_auction.services.session_service import session_service
from franchise_auction.services.team_service import team_service


@pytest.fixture
def engine():
    return AllocationEngine()


@pytest.fixture
def bidding(engine):
    return BiddingService(engine=engine)


def current_session() -> AuctionSession:
    return session_service.get_session()


class TestHighestBid:
    """Highest bid is computed from the ledger, earliest wins ties."""

    def test_tie_goes_to_first_bid_at_max_amount(self, app, sample_teams, open_lot):
        team_a, team_b = sample_teams
        repo = BidRepository()
        lot = current_session().current_lot

        repo.record_bid(open_lot.id, team_a.id, 1000, lot, 'main')
        repo.record_bid(open_lot.id, team_b.id, 1500, lot, 'main')
        repo.record_bid(open_lot.id, team_a.id, 1500, lot, 'main')
        db.session.commit()

        highest = repo.highest_bid(open_lot.id, lot=lot)
        assert highest.team_id == team_b.id
        assert highest.amount == 1500

    def test_ledger_is_append_only(self, app, sample_teams, open_lot):
        repo = BidRepository()
        bid = repo.record_bid(open_lot.id, sample_teams[0].id, 1000, 1, 'main')
        db.session.commit()

        with pytest.raises(NotImplementedError):
            repo.update(bid, amount=5)
        with pytest.raises(NotImplementedError):
            repo.delete(bid)


class TestMinimumBid:
    """Minimum acceptable bid and increment enforcement."""

    def test_first_bid_minimum_is_base_price(self, app, engine, open_lot):
        assert engine.minimum_acceptable_bid(open_lot, current_session()) == 1000

    def test_increment_enforced(self, app, bidding, sample_teams, open_lot):
        team_a, team_b = sample_teams
        bidding.place_bid(open_lot.id, team_a.id, 1000)

        with pytest.raises(BidTooLowError) as exc:
            bidding.place_bid(open_lot.id, team_b.id, 1050)
        assert exc.value.minimum == 1100

        result = bidding.place_bid(open_lot.id, team_b.id, 1100)
        assert result['bid']['amount'] == 1100

    def test_first_bid_below_base_rejected(self, app, bidding, sample_teams, open_lot):
        with pytest.raises(BidTooLowError) as exc:
            bidding.place_bid(open_lot.id, sample_teams[0].id, 900)
        assert exc.value.minimum == 1000
        assert Bid.query.count() == 0

    def test_bid_on_player_not_on_block(self, app, bidding, sample_teams, sample_players):
        with pytest.raises(InvalidStateError):
            bidding.place_bid(sample_players[0].id, sample_teams[0].id, 5000)

    def test_bid_over_wallet_rejected(self, app, bidding, sample_teams, open_lot):
        with pytest.raises(InsufficientFundsError) as exc:
            bidding.place_bid(open_lot.id, sample_teams[0].id, 10_001)
        assert exc.value.available == 10_000

    @pytest.mark.parametrize('amount', [0, -100, 'abc', 1000.5, True])
    def test_invalid_amounts(self, app, bidding, sample_teams, open_lot, amount):
        with pytest.raises(ValidationError):
            bidding.place_bid(open_lot.id, sample_teams[0].id, amount)

    def test_self_raise_allowed_by_default(self, app, bidding, sample_teams, open_lot):
        bidding.place_bid(open_lot.id, sample_teams[0].id, 1000)
        result = bidding.place_bid(open_lot.id, sample_teams[0].id, 1300)
        assert result['success'] is True

    def test_self_raise_rejected_when_disabled(self, app, bidding, sample_teams, open_lot):
        app.config['ALLOW_SELF_RAISE'] = False
        bidding.place_bid(open_lot.id, sample_teams[0].id, 1000)

        with pytest.raises(SameBidderError):
            bidding.place_bid(open_lot.id, sample_teams[0].id, 1300)

        # Another team may still raise
        bidding.place_bid(open_lot.id, sample_teams[1].id, 1300)


class TestResolvePlayerSale:
    """Sale resolution."""

    def test_end_to_end_sale(self, app, engine, bidding, sample_teams, open_lot):
        team = sample_teams[0]
        bidding.place_bid(open_lot.id, team.id, 1000)
        bidding.place_bid(open_lot.id, team.id, 1300)

        result = engine.resolve_player_sale(open_lot.id)

        assert result.team_id == team.id
        assert result.amount == 1300
        assert result.remaining_wallet == 8700

        team = db.session.get(Team, team.id)
        player = db.session.get(Player, open_lot.id)
        auction_session = current_session()
        assert team.wallet == 8700
        assert player.status == 'sold'
        assert player.sold_to_id == team.id
        assert player.sold_amount == 1300
        assert player.acquisition_order == 1
        assert auction_session.is_active is False
        assert auction_session.current_player_id is None

    def test_no_bids_leaves_state_unchanged(self, app, engine, open_lot):
        with pytest.raises(NoBidsError):
            engine.resolve_player_sale(open_lot.id)

        player = db.session.get(Player, open_lot.id)
        auction_session = current_session()
        assert player.status == 'available'
        assert auction_session.is_active is True
        assert auction_session.current_player_id == open_lot.id

    def test_wallet_rechecked_at_sale(self, app, engine, bidding, sample_teams, open_lot):
        team = sample_teams[0]
        bidding.place_bid(open_lot.id, team.id, 5000)
        team_service.adjust_wallet(team.id, -6000, reason='penalty')

        with pytest.raises(InsufficientFundsError):
            engine.resolve_player_sale(open_lot.id)

        team = db.session.get(Team, team.id)
        player = db.session.get(Player, open_lot.id)
        assert team.wallet == 4000
        assert player.status == 'available'
        assert player.sold_to_id is None
        assert current_session().is_active is True

    def test_cannot_sell_twice(self, app, engine, bidding, sample_teams, open_lot):
        bidding.place_bid(open_lot.id, sample_teams[0].id, 1000)
        engine.resolve_player_sale(open_lot.id)

        with pytest.raises(InvalidStateError):
            engine.resolve_player_sale(open_lot.id)
        assert db.session.get(Team, sample_teams[0].id).wallet == 9000

    def test_acquisition_order_follows_purchases(self, app, engine, bidding, sample_teams, sample_players):
        team = sample_teams[0]
        for player in sample_players[:2]:
            session_service.start_auction(player.id)
            bidding.place_bid(player.id, team.id, player.base_price)
            engine.resolve_player_sale(player.id)

        team = db.session.get(Team, team.id)
        assert [p.id for p in team.players] == [sample_players[0].id, sample_players[1].id]
        assert [p.acquisition_order for p in team.players] == [1, 2]
        assert team.wallet == 10_000 - 1000 - 2000

    def test_bids_from_closed_lot_do_not_count(self, app, engine, bidding, sample_teams, open_lot):
        bidding.place_bid(open_lot.id, sample_teams[0].id, 3000)
        session_service.end_auction()
        session_service.start_auction(open_lot.id)

        assert engine.minimum_acceptable_bid(open_lot, current_session()) == 1000
        with pytest.raises(NoBidsError):
            engine.resolve_player_sale(open_lot.id)


class TestMarkUnsold:
    """Unsold and permanently unsold handling."""

    def test_first_unsold(self, app, engine, open_lot):
        result = engine.mark_unsold(open_lot.id)

        assert result['status'] == 'unsold'
        player = db.session.get(Player, open_lot.id)
        assert player.times_unsold == 1
        assert player.sold_to_id is None
        assert current_session().is_active is False

    def test_requires_current_player(self, app, engine, sample_player):
        with pytest.raises(InvalidStateError):
            engine.mark_unsold(sample_player.id)

    def test_replay_reduces_floor_without_touching_base_price(self, app, engine, bidding, sample_teams):
        player = Player(name='Replay Player', base_price=2000, status='available')
        db.session.add(player)
        db.session.commit()

        session_service.start_auction(player.id)
        engine.mark_unsold(player.id)
        session_service.advance_round()

        player = db.session.get(Player, player.id)
        auction_session = current_session()
        assert player.status == 'available'
        assert auction_session.round == 'unsold_replay'
        assert engine.effective_base_price(player, auction_session) == 1000
        assert player.base_price == 2000

        session_service.start_auction(player.id)
        bidding.place_bid(player.id, sample_teams[0].id, 1000)
        result = engine.resolve_player_sale(player.id)
        assert result.amount == 1000

    def test_second_unsold_is_permanent(self, app, engine):
        player = Player(name='Twice Unsold', base_price=1000, status='available')
        db.session.add(player)
        db.session.commit()

        session_service.start_auction(player.id)
        engine.mark_unsold(player.id)
        session_service.advance_round()
        session_service.start_auction(player.id)
        result = engine.mark_unsold(player.id)

        assert result['status'] == 'permanently_unsold'
        player = db.session.get(Player, player.id)
        assert player.times_unsold == 2

        with pytest.raises(NotFoundError):
            session_service.start_auction(player.id)


    def test_unsold_in_reopened_main_round_keeps_replay(self, app, engine):
        player = Player(name='Reopened', base_price=2000, status='available')
        db.session.add(player)
        db.session.commit()

        session_service.start_auction(player.id)
        engine.mark_unsold(player.id)
        session_service.advance_round()
        session_service.reopen_main_round(operator='admin')

        session_service.start_auction(player.id)
        assert engine.mark_unsold(player.id)['status'] == 'unsold'

        session_service.advance_round()
        player = db.session.get(Player, player.id)
        assert engine.effective_base_price(player, current_session()) == 1000

        session_service.start_auction(player.id)
        assert engine.mark_unsold(player.id)['status'] == 'permanently_unsold'

class TestReconcile:
    """Reconciliation of wallets and sale records."""

    def test_clean_auction_has_no_issues(self, app, engine, bidding, sample_teams, open_lot):
        bidding.place_bid(open_lot.id, sample_teams[0].id, 1500)
        engine.resolve_player_sale(open_lot.id)
        team_service.adjust_wallet(sample_teams[1].id, 500, reason='bonus')

        assert engine.reconcile() == []

    def test_detects_wallet_drift(self, app, engine, sample_teams):
        team = db.session.get(Team, sample_teams[0].id)
        team.wallet = 9000
        db.session.commit()

        issues = engine.reconcile()
        assert len(issues) == 1
        assert issues[0].entity_type == 'team'
        assert issues[0].expected == 10_000
        assert issues[0].actual == 9000

    def test_detects_sold_player_without_team(self, app, engine, sample_player):
        player = db.session.get(Player, sample_player.id)
        player.status = 'sold'
        db.session.commit()

        issues = engine.reconcile()
        assert [i.entity_id for i in issues] == [sample_player.id]
        assert issues[0].entity_type == 'player'
