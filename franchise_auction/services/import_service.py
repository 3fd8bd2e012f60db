"""
Import service for roster files.

Reads CSV and Excel rosters with pandas and creates available players.
Row-level problems become warnings; file-level problems reject the whole
file and nothing is created.
"""

import math
import os
from typing import IO, Any, Dict, List, Optional, Union

import pandas as pd
from flask import current_app

from franchise_auction.constants import (
    DEFAULT_BASE_PRICE,
    MAX_PLAYER_NAME_LENGTH,
    MAX_ROLE_LENGTH,
    PLAYER_COLUMN_ALIASES,
    PLAYER_STAT_COLUMNS,
    SUPPORTED_IMPORT_EXTENSIONS,
)
from franchise_auction.dataclasses import ImportResult
from franchise_auction.enums import PlayerRole, PlayerStatus
from franchise_auction.logger import get_logger, log_audit
from franchise_auction.repositories.player_repository import PlayerRepository
from franchise_auction.services.base import BaseService, ImportFileError
from franchise_auction.utils import normalize_player_name

logger = get_logger(__name__)

INTEGER_STATS = {'matches', 'runs', 'wickets', 'centuries', 'fifties'}

Source = Union[str, os.PathLike, IO[bytes]]


def _compact(header: Any) -> str:
    """Header key ignoring case, spaces, underscores and hyphens."""
    return ''.join(ch for ch in str(header).strip().lower() if ch not in ' _-')


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _cell_text(value: Any) -> str:
    if _is_blank(value):
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def resolve_columns(columns: List[Any]) -> Dict[str, Any]:
    """Map canonical field names to the file's actual headers.

    Returns:
        Dict of field -> header for every roster and stat field found.
    """
    by_key = {}
    for column in columns:
        by_key.setdefault(_compact(column), column)

    mapping = {}
    for field, aliases in PLAYER_COLUMN_ALIASES.items():
        for alias in aliases:
            if _compact(alias) in by_key:
                mapping[field] = by_key[_compact(alias)]
                break

    for key, stat in PLAYER_STAT_COLUMNS.items():
        header = by_key.get(_compact(key))
        if header is not None and f'stats.{stat}' not in mapping:
            mapping[f'stats.{stat}'] = header

    return mapping


def parse_price(value: Any) -> Optional[int]:
    """Positive whole price from a cell, or None if missing or invalid."""
    if _is_blank(value):
        return None
    try:
        price = float(str(value).replace(',', '').strip())
    except ValueError:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return int(price)


def parse_stat(stat: str, value: Any) -> Optional[Union[int, float]]:
    if _is_blank(value) or str(value).strip() == '-':
        return None
    try:
        number = float(str(value).replace(',', '').strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if stat in INTEGER_STATS else number


class ImportService(BaseService):
    """Service importing player rosters from CSV and Excel files."""

    def __init__(self, player_repo: Optional[PlayerRepository] = None):
        """Initialize service with optional repository injection."""
        self.player_repo = player_repo or PlayerRepository()

    def read_frame(self, source: Source, filename: str) -> pd.DataFrame:
        """Load a roster file into a DataFrame.

        Raises:
            ImportFileError: If the file type is unsupported, unreadable or empty.
        """
        extension = os.path.splitext(filename or '')[1].lower()
        if extension not in SUPPORTED_IMPORT_EXTENSIONS:
            raise ImportFileError([
                f"Unsupported file type '{extension or filename}'. "
                f"Use one of: {', '.join(SUPPORTED_IMPORT_EXTENSIONS)}"
            ])

        try:
            if extension == '.csv':
                frame = pd.read_csv(source, dtype=object, skipinitialspace=True)
            else:
                engine = 'openpyxl' if extension == '.xlsx' else 'xlrd'
                frame = pd.read_excel(source, dtype=object, engine=engine)
        except pd.errors.EmptyDataError:
            raise ImportFileError(["The file is empty"]) from None
        except Exception as e:
            logger.warning(f"Could not read roster file {filename}: {e}")
            raise ImportFileError([f"Could not read {filename}: {e}"]) from e

        frame = frame.dropna(how='all')
        if frame.empty:
            raise ImportFileError(["The file contains no player rows"])
        return frame

    def import_players(self, source: Source, filename: Optional[str] = None) -> ImportResult:
        """Import players from a roster file.

        Args:
            source: Path or binary file object (e.g. an uploaded FileStorage).
            filename: Name used to pick the parser; defaults to the source's
                ``filename`` attribute or the path itself.

        Returns:
            ImportResult with the number of players created and any warnings.

        Raises:
            ImportFileError: If the file as a whole is rejected.
        """
        if filename is None:
            filename = getattr(source, 'filename', None) or str(source)
        stream = getattr(source, 'stream', source)

        frame = self.read_frame(stream, filename)
        columns = resolve_columns(list(frame.columns))
        if 'name' not in columns:
            raise ImportFileError([
                "No player name column found. Expected one of: "
                + ', '.join(PLAYER_COLUMN_ALIASES['name'])
            ])

        default_price = current_app.config.get('DEFAULT_BASE_PRICE', DEFAULT_BASE_PRICE)
        result = ImportResult()
        seen = {normalize_player_name(p.name) for p in self.player_repo.get_all()}
        rows = []

        # Row 1 is the header
        for row_number, record in enumerate(frame.to_dict('records'), start=2):
            name = _cell_text(record.get(columns['name']))
            if not name:
                result.warnings.append(f"Row {row_number}: missing player name, row skipped")
                continue
            if len(name) > MAX_PLAYER_NAME_LENGTH:
                result.warnings.append(f"Row {row_number}: player name too long, row skipped")
                continue

            key = normalize_player_name(name)
            if key in seen:
                result.warnings.append(f"Row {row_number}: duplicate player {name}, row skipped")
                continue
            seen.add(key)

            raw_price = record.get(columns['base_price']) if 'base_price' in columns else None
            price = parse_price(raw_price)
            if price is None:
                result.warnings.append(
                    f"Row {row_number}: invalid or missing base price for {name}, "
                    f"using {default_price}"
                )
                price = default_price

            role = _cell_text(record.get(columns['role'])) if 'role' in columns else ''
            role = PlayerRole.normalize(role)
            if len(role) > MAX_ROLE_LENGTH:
                result.warnings.append(
                    f"Row {row_number}: role for {name} cut to {MAX_ROLE_LENGTH} characters"
                )
                role = role[:MAX_ROLE_LENGTH]

            stats = {}
            for field, header in columns.items():
                if field.startswith('stats.'):
                    stat = field.split('.', 1)[1]
                    value = parse_stat(stat, record.get(header))
                    if value is not None:
                        stats[stat] = value

            rows.append({
                'name': name,
                'role': role,
                'batting_style': _cell_text(record.get(columns['batting_style'])) if 'batting_style' in columns else '',
                'bowling_style': _cell_text(record.get(columns['bowling_style'])) if 'bowling_style' in columns else '',
                'base_price': price,
                'stats': stats,
            })

        if not rows:
            raise ImportFileError(["No valid player rows found"], warnings=result.warnings)

        with self.transaction():
            players = [
                self.player_repo.create(status=PlayerStatus.AVAILABLE.value, **row)
                for row in rows
            ]
            self.flush()
            result.player_ids = [p.id for p in players]
            result.created = len(players)

        logger.info(
            f"Imported {result.created} players from {filename} "
            f"({len(result.warnings)} warnings)"
        )
        log_audit('players_imported', 'player', None, {
            'file': os.path.basename(filename),
            'created': result.created,
            'warnings': len(result.warnings),
        })
        return result


# Singleton instance for use in routes
import_service = ImportService()
