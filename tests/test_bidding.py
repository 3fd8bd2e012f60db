"""
Tests for auction and bidding endpoints.

Tests bid placement, the lot lifecycle, sale resolution and rounds over HTTP.
"""

from franchise_auction import db
from franchise_auction.models import Player, Team


def start(client, player_id):
    return client.post(f'/api/auction/start/{player_id}')


def bid(client, player_id, team_id, amount):
    return client.post('/api/bid', json={
        'player_id': player_id,
        'team_id': team_id,
        'amount': amount,
    })


class TestPlaceBid:
    """Tests for the bid placement endpoint."""

    def test_bid_requires_auth(self, client):
        response = bid(client, 1, 1, 5000)
        assert response.status_code == 403

    def test_bid_requires_all_fields(self, auth_client):
        response = auth_client.post('/api/bid', json={'player_id': 1, 'team_id': 1})
        assert response.status_code == 400
        assert 'amount' in response.get_json()['error']

    def test_first_bid_at_base_price(self, auth_client, sample_teams, sample_player):
        start(auth_client, sample_player.id)

        response = bid(auth_client, sample_player.id, sample_teams[0].id, 1000)

        assert response.status_code == 201
        data = response.get_json()
        assert data['success'] is True
        assert data['bid']['amount'] == 1000

    def test_bid_below_minimum_reports_minimum(self, auth_client, sample_teams, sample_player):
        start(auth_client, sample_player.id)
        bid(auth_client, sample_player.id, sample_teams[0].id, 1000)

        response = bid(auth_client, sample_player.id, sample_teams[1].id, 1050)

        assert response.status_code == 400
        assert response.get_json()['minimum'] == 1100

    def test_bid_over_wallet(self, auth_client, sample_teams, sample_player):
        start(auth_client, sample_player.id)

        response = bid(auth_client, sample_player.id, sample_teams[0].id, 20_000)

        assert response.status_code == 400
        data = response.get_json()
        assert data['required'] == 20_000
        assert data['available'] == 10_000

    def test_bid_when_idle(self, auth_client, sample_teams, sample_player):
        response = bid(auth_client, sample_player.id, sample_teams[0].id, 1000)
        assert response.status_code == 409

    def test_bid_unknown_team(self, auth_client, sample_player):
        start(auth_client, sample_player.id)
        response = bid(auth_client, sample_player.id, 999, 1000)
        assert response.status_code == 404

    def test_bid_invalid_ids(self, auth_client):
        response = bid(auth_client, 'abc', 1, 1000)
        assert response.status_code == 400


class TestAuctionLifecycle:
    """Tests for start, end, sell and unsold endpoints."""

    def test_state_is_public(self, client):
        response = client.get('/api/auction/state')
        assert response.status_code == 200
        assert response.get_json()['state']['is_active'] is False

    def test_start_requires_admin(self, client, sample_player):
        assert start(client, sample_player.id).status_code == 403

    def test_start_twice_conflicts(self, auth_client, sample_players):
        assert start(auth_client, sample_players[0].id).status_code == 200
        assert start(auth_client, sample_players[1].id).status_code == 409

    def test_start_missing_player(self, auth_client):
        assert start(auth_client, 999).status_code == 404

    def test_end_to_end_sale(self, auth_client, sample_teams, sample_player):
        team = sample_teams[0]
        start(auth_client, sample_player.id)
        bid(auth_client, sample_player.id, team.id, 1000)
        bid(auth_client, sample_player.id, team.id, 1300)

        state = auth_client.get('/api/auction/state').get_json()['state']
        assert state['highest_bid']['amount'] == 1300
        assert state['minimum_bid'] == 1400

        response = auth_client.post(f'/api/auction/sell/{sample_player.id}')

        assert response.status_code == 200
        data = response.get_json()
        assert data['amount'] == 1300
        assert data['remaining_wallet'] == 8700

        db.session.expire_all()
        assert db.session.get(Team, team.id).wallet == 8700
        player = db.session.get(Player, sample_player.id)
        assert player.status == 'sold'
        assert player.sold_to_id == team.id
        assert auth_client.get('/api/auction/state').get_json()['state']['is_active'] is False

    def test_sell_without_bids(self, auth_client, sample_player):
        start(auth_client, sample_player.id)

        response = auth_client.post(f'/api/auction/sell/{sample_player.id}')

        assert response.status_code == 409
        state = auth_client.get('/api/auction/state').get_json()['state']
        assert state['current_player']['id'] == sample_player.id

    def test_end_auction(self, auth_client, sample_player):
        start(auth_client, sample_player.id)
        assert auth_client.post('/api/auction/end').status_code == 200
        assert auth_client.post('/api/auction/end').status_code == 409

    def test_unsold_then_replay(self, auth_client, sample_teams):
        player = Player(name='Replayed', base_price=2000)
        db.session.add(player)
        db.session.commit()

        start(auth_client, player.id)
        response = auth_client.post(f'/api/auction/unsold/{player.id}')
        assert response.get_json()['status'] == 'unsold'

        response = auth_client.post('/api/auction/advance-round')
        assert response.status_code == 200
        assert response.get_json()['round'] == 'unsold_replay'

        start(auth_client, player.id)
        state = auth_client.get('/api/auction/state').get_json()['state']
        assert state['current_player']['effective_base_price'] == 1000
        assert state['current_player']['base_price'] == 2000
        assert bid(auth_client, player.id, sample_teams[0].id, 1000).status_code == 201

    def test_reopen_main(self, auth_client, sample_player):
        assert auth_client.post('/api/auction/reopen-main').status_code == 409

    def test_update_settings(self, auth_client):
        response = auth_client.put('/api/auction/settings', json={'min_bid_increment': 200})
        assert response.status_code == 200
        assert response.get_json()['session']['min_bid_increment'] == 200

        response = auth_client.put('/api/auction/settings', json={'unsold_price_reduction_factor': 2})
        assert response.status_code == 400

    def test_reconcile(self, auth_client, client):
        response = auth_client.get('/api/auction/reconcile')
        assert response.status_code == 200
        assert response.get_json()['consistent'] is True


class TestBidHistory:
    """Tests for the bid history endpoint."""

    def test_history(self, auth_client, sample_teams, sample_player):
        start(auth_client, sample_player.id)
        bid(auth_client, sample_player.id, sample_teams[0].id, 1000)
        bid(auth_client, sample_player.id, sample_teams[1].id, 1100)

        data = auth_client.get(f'/api/bids/{sample_player.id}').get_json()

        assert [b['team_name'] for b in data['bids']] == ['Team Beta', 'Team Alpha']

    def test_history_unknown_player(self, client):
        assert client.get('/api/bids/999').status_code == 404
