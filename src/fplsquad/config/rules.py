"""Squad composition rules for supported fantasy games."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

from fplsquad.models import Position


@dataclass(frozen=True)
class SquadRules:
    game: str
    default_budget: int
    squad_size: int
    quotas: Mapping[Position, int]
    team_max_players: int
    starters: int
    starter_minimums: Mapping[Position, int]
    starting_goalkeepers: int = 1

    @property
    def bench_size(self) -> int:
        return self.squad_size - self.starters

    @property
    def outfield_starters(self) -> int:
        return self.starters - self.starting_goalkeepers


_SQUAD_RULES: Dict[str, SquadRules] = {
    "FPL": SquadRules(
        game="FPL",
        default_budget=1000,
        squad_size=15,
        quotas={
            Position.GOALKEEPER: 2,
            Position.DEFENDER: 5,
            Position.MIDFIELDER: 5,
            Position.FORWARD: 3,
        },
        team_max_players=3,
        starters=11,
        # Checked in this order when repairing a starting XI.
        starter_minimums={
            Position.DEFENDER: 3,
            Position.FORWARD: 1,
        },
    ),
}


def iter_rules() -> Iterable[SquadRules]:
    """Return an iterator of all configured rule sets."""

    return _SQUAD_RULES.values()


def get_rules(game: str = "FPL") -> SquadRules:
    """Fetch rules for a game key, raising KeyError if missing."""

    key = game.upper()
    if key not in _SQUAD_RULES:
        raise KeyError(f"No squad rules configured for game={game!r}")
    return _SQUAD_RULES[key]


FPL_RULES = get_rules("FPL")
