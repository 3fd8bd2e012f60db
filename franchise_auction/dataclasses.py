"""
Data classes for structured results in the franchise auction server.

Provides type-safe structures for sale outcomes, live auction snapshots,
roster import results and reconciliation findings.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SaleResult:
    """Outcome of a completed sale."""
    player_id: int
    player_name: str
    team_id: int
    team_name: str
    amount: int
    remaining_wallet: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "player_id": self.player_id,
            "player_name": self.player_name,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "amount": self.amount,
            "remaining_wallet": self.remaining_wallet,
        }


@dataclass
class AuctionSnapshot:
    """Read-only projection of the session, current player and highest bid."""
    is_active: bool
    round: str
    lot: int
    min_bid_increment: int
    unsold_price_reduction_factor: float
    auction_date: Optional[str] = None
    current_player: Optional[Dict[str, Any]] = None
    highest_bid: Optional[Dict[str, Any]] = None
    minimum_bid: Optional[int] = None
    quick_raises: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response and socket payloads."""
        return {
            "is_active": self.is_active,
            "round": self.round,
            "lot": self.lot,
            "min_bid_increment": self.min_bid_increment,
            "unsold_price_reduction_factor": self.unsold_price_reduction_factor,
            "auction_date": self.auction_date,
            "current_player": self.current_player,
            "highest_bid": self.highest_bid,
            "minimum_bid": self.minimum_bid,
            "quick_raises": self.quick_raises,
        }


@dataclass
class ImportResult:
    """Result of importing a roster file."""
    created: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    player_ids: List[int] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "success": self.success,
            "created": self.created,
            "warnings": self.warnings,
            "errors": self.errors,
            "player_ids": self.player_ids,
        }


@dataclass
class ReconciliationIssue:
    """A sale or wallet record that does not add up."""
    entity_type: str
    entity_id: int
    problem: str
    expected: Optional[Any] = None
    actual: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "problem": self.problem,
            "expected": self.expected,
            "actual": self.actual,
        }
