"""Helpers to load past-season gameweek CSVs into match records."""

from __future__ import annotations

import csv
import logging
import math
import re
from io import StringIO
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from fplsquad.models import HistoricalMatch, HistoricalSeason


logger = logging.getLogger(__name__)

# Upstream column names, matched case-insensitively.
HISTORY_COLUMNS = {
    "name": "name",
    "element": "element",
    "opponent_team": "opponent_team",
    "total_points": "total_points",
    "goals_scored": "goals_scored",
    "assists": "assists",
    "clean_sheets": "clean_sheets",
    "was_home": "was_home",
    "gameweek": "GW",
    "minutes": "minutes",
}

_SEASON_FILE_PATTERN = re.compile(r"(?P<start>\d{4})[-_](?P<end>\d{2})")


def season_from_filename(path: Path) -> str:
    """Derive ``2021/22`` from names such as ``2021-22_gw.csv``."""

    match = _SEASON_FILE_PATTERN.search(path.stem)
    if match is None:
        return path.stem
    return f"{match.group('start')}/{match.group('end')}"


def _parse_float(raw: Optional[str]) -> float:
    text = (raw or "").strip()
    if not text:
        return 0.0
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value {text!r}")
    return number


def _parse_int(raw: Optional[str]) -> int:
    return int(_parse_float(raw))


def _parse_flag(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in {"true", "1", "t", "yes"}


def _resolve_columns(fieldnames: Sequence[str]) -> Dict[str, Optional[str]]:
    lookup = {name.strip().lower(): name for name in fieldnames if name}
    return {key: lookup.get(column.lower()) for key, column in HISTORY_COLUMNS.items()}


def parse_historical_csv(text: str, season: str) -> List[HistoricalMatch]:
    """Parse one season of per-gameweek rows.

    Rows with a non-numeric value in a numeric column are skipped; rows where
    the player did not play are dropped.
    """

    reader = csv.DictReader(StringIO(text.strip()))
    if not reader.fieldnames:
        return []
    columns = _resolve_columns(reader.fieldnames)
    if columns["name"] is None:
        logger.warning("Historical data for %s has no name column; ignoring", season)
        return []

    def value(row: Mapping[str, Optional[str]], key: str) -> Optional[str]:
        column = columns[key]
        return row.get(column) if column is not None else None

    matches: List[HistoricalMatch] = []
    skipped = 0
    for line_number, row in enumerate(reader, start=2):
        try:
            match = HistoricalMatch(
                season=season,
                player_name=(value(row, "name") or "").strip(),
                player_element=_parse_int(value(row, "element")),
                opponent_team=_parse_int(value(row, "opponent_team")),
                total_points=_parse_float(value(row, "total_points")),
                goals_scored=_parse_float(value(row, "goals_scored")),
                assists=_parse_float(value(row, "assists")),
                clean_sheets=_parse_float(value(row, "clean_sheets")),
                was_home=_parse_flag(value(row, "was_home")),
                gameweek=_parse_int(value(row, "gameweek")),
                minutes=_parse_float(value(row, "minutes")),
            )
        except ValueError as exc:
            skipped += 1
            logger.debug("Skipping %s row %s: %s", season, line_number, exc)
            continue
        if match.minutes > 0:
            matches.append(match)

    if skipped:
        logger.info("Skipped %s malformed rows in %s", skipped, season)
    return matches


def load_historical_csv(path: Path, *, season: str | None = None) -> HistoricalSeason:
    label = season or season_from_filename(path)
    matches = parse_historical_csv(path.read_text(encoding="utf-8"), label)
    logger.info("Loaded %s matches from %s", len(matches), label)
    return HistoricalSeason(season=label, matches=tuple(matches))


def load_historical_seasons(paths: Iterable[Path]) -> List[HistoricalSeason]:
    """Load every readable season file; unreadable ones are logged and skipped."""

    seasons: List[HistoricalSeason] = []
    for path in paths:
        try:
            seasons.append(load_historical_csv(path))
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to load historical data from %s: %s", path, exc)
    return seasons


def discover_season_files(directory: Path) -> List[Path]:
    return sorted(directory.glob("*_gw.csv"))
