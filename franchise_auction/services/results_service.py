"""
Results service: auction summary and CSV exports.
"""

from typing import Any, Dict, Optional

import pandas as pd

from franchise_auction.constants import PLAYER_EXPORT_HEADERS, TEAM_EXPORT_HEADERS
from franchise_auction.enums import PlayerStatus
from franchise_auction.logger import get_logger
from franchise_auction.repositories.player_repository import PlayerRepository
from franchise_auction.repositories.team_repository import TeamRepository
from franchise_auction.services.base import BaseService, ValidationError
from franchise_auction.services.player_service import player_to_dict
from franchise_auction.services.team_service import team_to_dict

logger = get_logger(__name__)

EXPORT_KINDS = ('players', 'teams')


class ResultsService(BaseService):
    """Read-only reporting over the roster store."""

    def __init__(
        self,
        player_repo: Optional[PlayerRepository] = None,
        team_repo: Optional[TeamRepository] = None
    ):
        self.player_repo = player_repo or PlayerRepository()
        self.team_repo = team_repo or TeamRepository()

    def get_summary(self) -> Dict[str, Any]:
        """Per-team spend and squads, plus player status totals."""
        teams = self.team_repo.get_all_with_players()
        sold = self.player_repo.get_sold()
        total_spent = sum(p.sold_amount for p in sold)

        top_buys = sorted(sold, key=lambda p: (-p.sold_amount, p.id))[:5]

        return {
            'teams': [team_to_dict(t, with_players=True) for t in teams],
            'status_counts': self.player_repo.status_counts(),
            'total_spent': total_spent,
            'players_sold': len(sold),
            'highest_sales': [player_to_dict(p) for p in top_buys],
        }

    def players_frame(self) -> pd.DataFrame:
        rows = [
            [
                p.name,
                p.role,
                p.batting_style,
                p.bowling_style,
                p.base_price,
                p.sold_amount,
                p.team.name if p.team else '',
            ]
            for p in self.player_repo.get_by_status(PlayerStatus.SOLD)
        ]
        return pd.DataFrame(rows, columns=PLAYER_EXPORT_HEADERS)

    def teams_frame(self) -> pd.DataFrame:
        rows = [
            [
                t.name,
                t.owner_name,
                len(t.players),
                t.spent,
                t.wallet,
                '; '.join(p.name for p in t.players),
            ]
            for t in self.team_repo.get_all_with_players()
        ]
        return pd.DataFrame(rows, columns=TEAM_EXPORT_HEADERS)

    def export_csv(self, kind: str) -> str:
        """Render sold players or teams as CSV text.

        Raises:
            ValidationError: If kind is not 'players' or 'teams'.
        """
        if kind not in EXPORT_KINDS:
            raise ValidationError(f"Unknown export '{kind}'. Use one of: {', '.join(EXPORT_KINDS)}")

        frame = self.players_frame() if kind == 'players' else self.teams_frame()
        logger.info(f"Exporting {len(frame)} {kind} rows")
        return frame.to_csv(index=False)


# Singleton instance for use in routes
results_service = ResultsService()
