"""
Tests for results and export endpoints, plus the health check.
"""

import io

import pandas as pd

from franchise_auction.constants import PLAYER_EXPORT_HEADERS, TEAM_EXPORT_HEADERS
from franchise_auction.services.allocation_engine import allocation_engine
from franchise_auction.services.bidding_service import bidding_service


def sell(team, player, amount):
    bidding_service.place_bid(player.id, team.id, amount)
    return allocation_engine.resolve_player_sale(player.id)


class TestResults:

    def test_summary(self, client, sample_teams, open_lot):
        sell(sample_teams[0], open_lot, 1800)

        data = client.get('/api/results').get_json()

        assert data['total_spent'] == 1800
        assert data['players_sold'] == 1
        assert data['highest_sales'][0]['sold_to'] == 'Team Alpha'
        alpha = data['teams'][0]
        assert alpha['players'][0]['name'] == 'Test Player'
        assert alpha['wallet'] == 8200
        assert alpha['spent_percentage'] == 18.0

    def test_export_players_csv(self, client, sample_teams, open_lot):
        sell(sample_teams[1], open_lot, 1000)

        response = client.get('/api/results/export/players')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'auction_players.csv' in response.headers['Content-Disposition']
        frame = pd.read_csv(io.StringIO(response.get_data(as_text=True)))
        assert list(frame.columns) == PLAYER_EXPORT_HEADERS
        assert frame.loc[0, 'Team'] == 'Team Beta'
        assert frame.loc[0, 'Sold For'] == 1000

    def test_export_teams_csv(self, client, sample_teams):
        response = client.get('/api/results/export/teams')

        frame = pd.read_csv(io.StringIO(response.get_data(as_text=True)))
        assert list(frame.columns) == TEAM_EXPORT_HEADERS
        assert len(frame) == 2

    def test_unknown_export(self, client):
        assert client.get('/api/results/export/bids').status_code == 400


class TestMainRoutes:

    def test_health(self, client):
        data = client.get('/health').get_json()
        assert data['status'] == 'healthy'

    def test_index(self, client):
        data = client.get('/').get_json()
        assert data['auction_state'] == '/api/auction/state'
