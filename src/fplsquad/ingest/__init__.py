"""Input adapters that normalize raw game and history data."""

from .bootstrap import (
    GameData,
    UpstreamDataError,
    current_event,
    fetch_game_data,
    fixtures_from_payload,
    players_from_bootstrap,
    upcoming_events,
)
from .history import (
    discover_season_files,
    load_historical_csv,
    load_historical_seasons,
    parse_historical_csv,
    season_from_filename,
)

__all__ = [
    "GameData",
    "UpstreamDataError",
    "current_event",
    "discover_season_files",
    "fetch_game_data",
    "fixtures_from_payload",
    "load_historical_csv",
    "load_historical_seasons",
    "parse_historical_csv",
    "players_from_bootstrap",
    "season_from_filename",
    "upcoming_events",
]
