"""Input records shared by every layer."""

from .history import (
    HistoricalInput,
    HistoricalMatch,
    HistoricalSeason,
    HistoryIndex,
    as_history_index,
    find_historical_matches,
    normalize_player_name,
)
from .player import Fixture, Player, Position
from .strategy import NEUTRAL_STRATEGY, Strategy

__all__ = [
    "Fixture",
    "HistoricalInput",
    "HistoricalMatch",
    "HistoricalSeason",
    "HistoryIndex",
    "NEUTRAL_STRATEGY",
    "Player",
    "Position",
    "Strategy",
    "as_history_index",
    "find_historical_matches",
    "normalize_player_name",
]
