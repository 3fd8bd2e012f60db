from datetime import datetime, timezone

from franchise_auction import db
from franchise_auction.enums import AuctionRound, PlayerStatus


def utc_now():
    """Get current time in UTC"""
    return datetime.now(timezone.utc)


class Team(db.Model):
    """Franchise team bidding for players"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    owner_name = db.Column(db.String(100), default='')
    owner_email = db.Column(db.String(120), default='')
    wallet = db.Column(db.Integer, nullable=False, default=10000)
    initial_wallet = db.Column(db.Integer, nullable=False, default=10000)  # Snapshot for spend reporting
    wallet_adjustment = db.Column(db.Integer, nullable=False, default=0)  # Net audited admin edits
    created_at = db.Column(db.DateTime, default=utc_now)

    players = db.relationship(
        'Player',
        backref='team',
        lazy=True,
        order_by='Player.acquisition_order'
    )

    __table_args__ = (
        db.CheckConstraint('wallet >= 0', name='ck_team_wallet_non_negative'),
    )

    @property
    def spent(self) -> int:
        return sum(p.sold_amount for p in self.players)

    def __repr__(self):
        return f'<Team {self.name}>'


class Player(db.Model):
    """Player offered in the auction"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(50), default='')
    batting_style = db.Column(db.String(50), default='')
    bowling_style = db.Column(db.String(50), default='')
    base_price = db.Column(db.Integer, nullable=False, default=1000)
    status = db.Column(db.String(20), nullable=False, default=PlayerStatus.AVAILABLE.value)
    sold_to_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=True)
    sold_amount = db.Column(db.Integer, nullable=False, default=0)
    acquisition_order = db.Column(db.Integer, nullable=True)  # Position in the winning team's squad
    times_unsold = db.Column(db.Integer, nullable=False, default=0)
    stats = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, default=utc_now)

    __table_args__ = (
        db.CheckConstraint('base_price >= 0', name='ck_player_base_price_non_negative'),
        db.CheckConstraint('sold_amount >= 0', name='ck_player_sold_amount_non_negative'),
    )

    def __repr__(self):
        return f'<Player {self.name}>'


class Bid(db.Model):
    """Append-only bid ledger entry. Arrival order is the primary key."""
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    team_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    lot = db.Column(db.Integer, nullable=False, index=True)
    round = db.Column(db.String(20), nullable=False, default=AuctionRound.MAIN.value)
    timestamp = db.Column(db.DateTime, default=utc_now)

    player = db.relationship('Player', backref='bids')
    team = db.relationship('Team', backref='bids')

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='ck_bid_amount_positive'),
    )

    def __repr__(self):
        return f'<Bid {self.amount} by Team {self.team_id}>'


class AuctionSession(db.Model):
    """Singleton auction session record"""
    id = db.Column(db.Integer, primary_key=True)
    is_active = db.Column(db.Boolean, nullable=False, default=False)
    current_player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    round = db.Column(db.String(20), nullable=False, default=AuctionRound.MAIN.value)
    min_bid_increment = db.Column(db.Integer, nullable=False, default=100)
    unsold_price_reduction_factor = db.Column(db.Float, nullable=False, default=0.5)
    auction_date = db.Column(db.DateTime, nullable=True)
    current_lot = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    current_player = db.relationship('Player')

    def __repr__(self):
        return f'<AuctionSession active={self.is_active} round={self.round}>'
