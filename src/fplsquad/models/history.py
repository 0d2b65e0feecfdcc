"""Past-season match records and the name-keyed lookup used to join them."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


_NON_LETTERS = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")


class HistoricalMatch(BaseModel):
    """One player's recorded performance in one past-season match."""

    season: str
    player_name: str
    player_element: int = 0
    opponent_team: int = 0
    total_points: float = 0.0
    goals_scored: float = 0.0
    assists: float = 0.0
    clean_sheets: float = 0.0
    was_home: bool = False
    gameweek: int = 0
    minutes: float = Field(default=0.0, ge=0.0)

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


class HistoricalSeason(BaseModel):
    season: str
    matches: Tuple[HistoricalMatch, ...] = ()

    model_config = ConfigDict(frozen=True)


def normalize_player_name(name: str) -> str:
    """Lowercase, drop anything but ``a-z`` and whitespace, collapse spaces.

    Accented characters are dropped rather than transliterated, so
    ``"Ødegaard"`` becomes ``"degaard"``. Matching stays on this key anyway:
    the historical files carry no identifier shared with the current season.
    """

    lowered = name.lower()
    cleaned = _NON_LETTERS.sub("", lowered)
    return _WHITESPACE.sub(" ", cleaned).strip()


def find_historical_matches(player_name: str, seasons: Sequence[HistoricalSeason]) -> List[HistoricalMatch]:
    """All matches whose normalized name equals ``player_name``'s, across seasons."""

    target = normalize_player_name(player_name)
    found: List[HistoricalMatch] = []
    for season in seasons:
        found.extend(match for match in season.matches if normalize_player_name(match.player_name) == target)
    return found


class HistoryIndex:
    """Name-keyed lookup over one or more seasons, built once per scoring run."""

    def __init__(self, by_name: Mapping[str, Tuple[HistoricalMatch, ...]]):
        self._by_name = dict(by_name)

    @classmethod
    def from_seasons(cls, seasons: Iterable[HistoricalSeason]) -> "HistoryIndex":
        grouped: Dict[str, List[HistoricalMatch]] = {}
        for season in seasons:
            for match in season.matches:
                grouped.setdefault(normalize_player_name(match.player_name), []).append(match)
        return cls({key: tuple(matches) for key, matches in grouped.items()})

    def matches_for(self, player_name: str) -> Tuple[HistoricalMatch, ...]:
        return self._by_name.get(normalize_player_name(player_name), ())

    def __len__(self) -> int:
        return len(self._by_name)


HistoricalInput = Union[HistoryIndex, Sequence[HistoricalSeason], None]


def as_history_index(historical: HistoricalInput) -> HistoryIndex:
    if isinstance(historical, HistoryIndex):
        return historical
    return HistoryIndex.from_seasons(historical or ())
