"""
Centralized constants for the franchise auction server.

Contains the magic numbers, column aliases and export headers used
throughout the application. Tunable auction defaults live in config.py.
"""

from typing import Final

# ==================== BUDGET & PRICING ====================
DEFAULT_WALLET: Final[int] = 10_000
DEFAULT_BASE_PRICE: Final[int] = 1_000    # Used when an imported price is missing or invalid
MIN_BID_INCREMENT: Final[int] = 100
UNSOLD_PRICE_REDUCTION: Final[float] = 0.5

# Quick-raise steps offered to bidders, keyed by the next minimum bid
BID_INCREMENTS: Final[list] = [
    (1_000, 100),
    (5_000, 500),
    (10_000, 1_000),
    (50_000, 5_000),
    (100_000, 10_000),
]

# ==================== SESSION ====================
AUCTION_SESSION_ID: Final[int] = 1

# ==================== IMPORT ====================
SUPPORTED_IMPORT_EXTENSIONS: Final[tuple] = ('.csv', '.xlsx', '.xls')

# Header aliases (lower-cased, trimmed) for roster files
PLAYER_COLUMN_ALIASES: Final[dict] = {
    'name': ['name', 'player_name', 'playername', 'player name', 'fullname', 'full name'],
    'role': ['role', 'player_role', 'playerrole', 'position', 'specialization'],
    'batting_style': ['battingstyle', 'batting_style', 'batting style', 'batting'],
    'bowling_style': ['bowlingstyle', 'bowling_style', 'bowling style', 'bowling'],
    'base_price': ['baseprice', 'base_price', 'base price', 'base', 'price',
                   'minimum_bidding_amount', 'basebid', 'minimumbid'],
}

# Stat columns carried into Player.stats
PLAYER_STAT_COLUMNS: Final[dict] = {
    'matches': 'matches',
    'runs': 'runs',
    'wickets': 'wickets',
    'average': 'average',
    'strikerate': 'strike_rate',
    'strike_rate': 'strike_rate',
    'economy': 'economy',
    'centuries': 'centuries',
    'fifties': 'fifties',
}

# ==================== EXPORT ====================
PLAYER_EXPORT_HEADERS: Final[list] = [
    'Player Name',
    'Role',
    'Batting Style',
    'Bowling Style',
    'Base Price',
    'Sold For',
    'Team',
]

TEAM_EXPORT_HEADERS: Final[list] = [
    'Team Name',
    'Owner',
    'Total Players',
    'Total Spent',
    'Remaining Budget',
    'Players',
]

# ==================== VALIDATION ====================
MAX_TEAM_NAME_LENGTH: Final[int] = 100
MAX_PLAYER_NAME_LENGTH: Final[int] = 100
MAX_ROLE_LENGTH: Final[int] = 50
