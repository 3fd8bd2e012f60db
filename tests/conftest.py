"""
Pytest fixtures for franchise auction tests.

Provides fixtures for app, client, database, and sample data.
"""

import pytest

from franchise_auction import create_app, db
from franchise_auction.models import Player, Team
from franchise_auction.services.session_service import session_service


@pytest.fixture
def app():
    """Create application for testing with fresh database."""
    app = create_app('testing')

    # Disable CSRF for testing
    app.config['WTF_CSRF_ENABLED'] = False
    # Disable rate limiting for testing
    app.config['RATELIMIT_ENABLED'] = False

    with app.app_context():
        db.create_all()
        session_service.init()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def auth_client(client, app):
    """Authenticated test client with admin session."""
    with client.session_transaction() as session:
        session['is_admin'] = True
        session['username'] = 'admin'
    return client


@pytest.fixture
def sample_teams(app):
    """Two teams with 10000 each."""
    team1 = Team(name='Team Alpha', owner_name='Asha', wallet=10_000, initial_wallet=10_000)
    team2 = Team(name='Team Beta', owner_name='Ben', wallet=10_000, initial_wallet=10_000)
    db.session.add_all([team1, team2])
    db.session.commit()
    return [team1, team2]


@pytest.fixture
def sample_player(app):
    """One available player with base price 1000."""
    player = Player(
        name='Test Player',
        role='Batsman',
        batting_style='Right-hand bat',
        base_price=1_000,
        status='available',
    )
    db.session.add(player)
    db.session.commit()
    return player


@pytest.fixture
def sample_players(app):
    """Several available players."""
    players = [
        Player(
            name=f'Player {i}',
            role='Batsman' if i % 2 == 0 else 'Bowler',
            base_price=1_000 * (i + 1),
            status='available',
        )
        for i in range(4)
    ]
    db.session.add_all(players)
    db.session.commit()
    return players


@pytest.fixture
def open_lot(app, sample_player):
    """The sample player on the block."""
    session_service.start_auction(sample_player.id)
    return sample_player
