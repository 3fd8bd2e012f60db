"""
Enums for the franchise auction server.

Provides type-safe constants for player roles, statuses and auction rounds.
"""

from enum import Enum


class PlayerRole(str, Enum):
    """Player specializations in cricket."""
    BATSMAN = "Batsman"
    BOWLER = "Bowler"
    ALL_ROUNDER = "All-rounder"
    WICKET_KEEPER = "Wicket-keeper"

    @classmethod
    def normalize(cls, value: str) -> str:
        """Canonical role name for a known alias, otherwise the text as given.

        >>> PlayerRole.normalize('wk')
        'Wicket-keeper'
        >>> PlayerRole.normalize('Spinner')
        'Spinner'
        """
        text = (value or '').strip()
        value_lower = text.lower()
        mapping = {
            "batsman": cls.BATSMAN,
            "batter": cls.BATSMAN,
            "bowler": cls.BOWLER,
            "allrounder": cls.ALL_ROUNDER,
            "all-rounder": cls.ALL_ROUNDER,
            "all rounder": cls.ALL_ROUNDER,
            "keeper": cls.WICKET_KEEPER,
            "wicketkeeper": cls.WICKET_KEEPER,
            "wicket-keeper": cls.WICKET_KEEPER,
            "wicket keeper": cls.WICKET_KEEPER,
            "wk": cls.WICKET_KEEPER,
        }
        role = mapping.get(value_lower)
        return role.value if role else text


class PlayerStatus(str, Enum):
    """Player auction status."""
    AVAILABLE = "available"
    SOLD = "sold"
    UNSOLD = "unsold"
    PERMANENTLY_UNSOLD = "permanently_unsold"


class AuctionRound(str, Enum):
    """Auction rounds. The replay round re-offers unsold players once."""
    MAIN = "main"
    UNSOLD_REPLAY = "unsold_replay"
