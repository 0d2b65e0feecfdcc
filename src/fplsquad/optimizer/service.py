"""Greedy squad selection with local repair."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from fplsquad.config import FPL_RULES, SquadRules
from fplsquad.estimator import ScoredPlayer, score_players
from fplsquad.models import NEUTRAL_STRATEGY, Fixture, HistoricalSeason, Player, Position, Strategy


logger = logging.getLogger(__name__)

FILL_ORDER = (
    Position.GOALKEEPER,
    Position.DEFENDER,
    Position.MIDFIELDER,
    Position.FORWARD,
)
RECONCILE_POOL_SIZE = 4


class SquadOptimizationError(ValueError):
    """Raised when no squad with a captain and vice-captain can be formed."""


class SquadSettings(BaseModel):
    budget: int = Field(default=FPL_RULES.default_budget, ge=0)
    horizon: int = Field(default=1, ge=1)
    excluded_ids: FrozenSet[int] = frozenset()
    forced_ids: FrozenSet[int] = frozenset()
    historical: Tuple[HistoricalSeason, ...] = ()
    strategy: Strategy = NEUTRAL_STRATEGY
    reserve_budget: bool = True

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class OptimizedSquad:
    starters: Tuple[ScoredPlayer, ...]
    bench: Tuple[ScoredPlayer, ...]
    captain: ScoredPlayer
    vice_captain: ScoredPlayer
    total_expected_points: float
    total_cost: int
    formation: str
    warnings: Tuple[str, ...] = ()

    @property
    def players(self) -> Tuple[ScoredPlayer, ...]:
        return self.starters + self.bench

    @property
    def player_ids(self) -> Tuple[int, ...]:
        return tuple(sp.player_id for sp in self.players)


class _SelectionState:
    """Running cost, team counts and position counts for one selection."""

    def __init__(self, rules: SquadRules, budget: int):
        self.rules = rules
        self.budget = budget
        self.selected: List[ScoredPlayer] = []
        self.cost = 0
        self.team_counts: Counter = Counter()
        self.position_counts: Counter = Counter()

    @property
    def selected_ids(self) -> set:
        return {sp.player_id for sp in self.selected}

    def contains(self, sp: ScoredPlayer) -> bool:
        return any(chosen.player_id == sp.player_id for chosen in self.selected)

    def open_slots(self, position: Position) -> int:
        return self.rules.quotas.get(position, 0) - self.position_counts[position]

    def team_has_room(self, team: int) -> bool:
        return self.team_counts[team] < self.rules.team_max_players

    def can_add(self, sp: ScoredPlayer, reserve: int = 0) -> bool:
        return (
            not self.contains(sp)
            and self.open_slots(sp.position) > 0
            and self.team_has_room(sp.team)
            and self.cost + sp.price + reserve <= self.budget
        )

    def add(self, sp: ScoredPlayer) -> None:
        self.selected.append(sp)
        self.cost += sp.price
        self.team_counts[sp.team] += 1
        self.position_counts[sp.position] += 1

    def remove(self, sp: ScoredPlayer) -> None:
        self.selected = [chosen for chosen in self.selected if chosen.player_id != sp.player_id]
        self.cost -= sp.price
        self.team_counts[sp.team] -= 1
        self.position_counts[sp.position] -= 1

    def caps_hold_after(self, removed: Iterable[ScoredPlayer], added: Iterable[ScoredPlayer]) -> bool:
        counts = Counter(self.team_counts)
        for sp in removed:
            counts[sp.team] -= 1
        touched = set()
        for sp in added:
            counts[sp.team] += 1
            touched.add(sp.team)
        return all(counts[team] <= self.rules.team_max_players for team in touched)


def _rank(scored: Sequence[ScoredPlayer]) -> List[ScoredPlayer]:
    return sorted(scored, key=lambda sp: sp.projected_points, reverse=True)


def _by_position(ranked: Sequence[ScoredPlayer]) -> Dict[Position, List[ScoredPlayer]]:
    grouped: Dict[Position, List[ScoredPlayer]] = {position: [] for position in FILL_ORDER}
    for sp in ranked:
        grouped.setdefault(sp.position, []).append(sp)
    return grouped


def _reservation(
    state: _SelectionState,
    min_prices: Mapping[Position, int],
    adding: Position,
) -> int:
    """Cheapest spend still needed for every slot left open after adding one ``adding`` player."""

    reserve = 0
    for position in FILL_ORDER:
        remaining = state.open_slots(position) - (1 if position == adding else 0)
        if remaining > 0:
            reserve += remaining * min_prices.get(position, 0)
    return reserve


def _fill_quotas(
    state: _SelectionState,
    by_position: Mapping[Position, List[ScoredPlayer]],
    reserve_budget: bool,
) -> None:
    min_prices = {position: min((sp.price for sp in pool), default=0) for position, pool in by_position.items()}
    for position in FILL_ORDER:
        for sp in by_position.get(position, []):
            if state.open_slots(position) <= 0:
                break
            reserve = _reservation(state, min_prices, position) if reserve_budget else 0
            if state.can_add(sp, reserve):
                state.add(sp)


def _repair_slot(
    state: _SelectionState,
    by_position: Mapping[Position, List[ScoredPlayer]],
    position: Position,
    forced_ids: FrozenSet[int],
) -> bool:
    """Fill one open ``position`` slot, freeing budget elsewhere if needed."""

    candidate = next(
        (sp for sp in by_position.get(position, []) if not state.contains(sp) and state.team_has_room(sp.team)),
        None,
    )
    if candidate is None:
        return False
    if state.can_add(candidate):
        state.add(candidate)
        return True

    victims = sorted(
        (sp for sp in state.selected if sp.position != position and sp.player_id not in forced_ids),
        key=lambda sp: sp.price,
        reverse=True,
    )
    for victim in victims:
        for replacement in by_position.get(victim.position, []):
            if state.contains(replacement) or replacement.price >= victim.price:
                continue
            new_cost = state.cost - victim.price + replacement.price + candidate.price
            if new_cost > state.budget:
                continue
            if not state.caps_hold_after([victim], [replacement, candidate]):
                continue
            logger.debug(
                "Repair: %s -> %s to fit %s",
                victim.player.name,
                replacement.player.name,
                candidate.player.name,
            )
            state.remove(victim)
            state.add(replacement)
            state.add(candidate)
            return True
    return False


def _repair_open_slots(
    state: _SelectionState,
    by_position: Mapping[Position, List[ScoredPlayer]],
    forced_ids: FrozenSet[int],
) -> None:
    for position in FILL_ORDER:
        while state.open_slots(position) > 0:
            if not _repair_slot(state, by_position, position, forced_ids):
                logger.warning(
                    "Unable to fill %s %s slot(s) within budget",
                    state.open_slots(position),
                    position.short_name,
                )
                break


def _reconcile_budget(
    state: _SelectionState,
    by_position: Mapping[Position, List[ScoredPlayer]],
    forced_ids: FrozenSet[int],
) -> None:
    """Swap low-value players for cheaper ones until the squad is within budget."""

    while state.cost > state.budget:
        weakest = sorted(
            (sp for sp in state.selected if sp.player_id not in forced_ids),
            key=lambda sp: sp.projected_points,
        )[:RECONCILE_POOL_SIZE]
        swapped = False
        for victim in sorted(weakest, key=lambda sp: sp.price, reverse=True):
            alternatives = [
                sp
                for sp in by_position.get(victim.position, [])
                if not state.contains(sp) and sp.price < victim.price and state.caps_hold_after([victim], [sp])
            ]
            if not alternatives:
                continue
            cheapest = min(alternatives, key=lambda sp: sp.price)
            logger.debug("Reconcile: %s -> %s", victim.player.name, cheapest.player.name)
            state.remove(victim)
            state.add(cheapest)
            swapped = True
            break
        if not swapped:
            logger.warning("Squad remains over budget (%s > %s)", state.cost, state.budget)
            return


def _by_projection(players: Iterable[ScoredPlayer]) -> List[ScoredPlayer]:
    return sorted(players, key=lambda sp: sp.projected_points, reverse=True)


def split_lineup(
    players: Sequence[ScoredPlayer],
    rules: SquadRules = FPL_RULES,
) -> Tuple[List[ScoredPlayer], List[ScoredPlayer]]:
    """Pick starters and bench, then repair the formation minimums.

    Each repair step brings in the best bench player of the short position
    and drops the weakest starter whose position sits above its own minimum.
    """

    keepers = _by_projection(sp for sp in players if sp.position == Position.GOALKEEPER)
    outfield = _by_projection(sp for sp in players if sp.position != Position.GOALKEEPER)
    starters = outfield[: rules.outfield_starters]
    bench = outfield[rules.outfield_starters :]

    for position, minimum in rules.starter_minimums.items():
        while sum(1 for sp in starters if sp.position == position) < minimum:
            incoming = next((sp for sp in bench if sp.position == position), None)
            if incoming is None:
                break
            counts = Counter(sp.position for sp in starters)
            removable = [sp for sp in starters if counts[sp.position] > rules.starter_minimums.get(sp.position, 0)]
            if not removable:
                break
            outgoing = removable[-1]
            starters = _by_projection([sp for sp in starters if sp is not outgoing] + [incoming])
            bench = _by_projection([sp for sp in bench if sp is not incoming] + [outgoing])

    starting_keepers = keepers[: rules.starting_goalkeepers]
    bench_keepers = keepers[rules.starting_goalkeepers :]
    return starting_keepers + starters, bench_keepers + bench


def formation_of(starters: Iterable[ScoredPlayer]) -> str:
    counts = Counter(sp.position for sp in starters)
    return "-".join(str(counts[position]) for position in FILL_ORDER[1:])


def _assemble(players: Sequence[ScoredPlayer], rules: SquadRules) -> OptimizedSquad:
    starters, bench = split_lineup(players, rules)
    if len(starters) < 2:
        raise SquadOptimizationError(
            f"Need at least two starters to name a captain and vice-captain, found {len(starters)}"
        )
    captain, vice_captain = _by_projection(starters)[:2]
    total = sum(sp.projected_points for sp in starters) + captain.projected_points
    return OptimizedSquad(
        starters=tuple(starters),
        bench=tuple(bench),
        captain=captain,
        vice_captain=vice_captain,
        total_expected_points=total,
        total_cost=sum(sp.price for sp in players),
        formation=formation_of(starters),
    )


def validate_squad(
    squad: OptimizedSquad,
    settings: SquadSettings | None = None,
    rules: SquadRules = FPL_RULES,
) -> List[str]:
    """Return every squad invariant ``squad`` violates; empty when all hold.

    Budget, forced and excluded checks need ``settings``.
    """

    problems: List[str] = []
    players = squad.players
    if len(players) != rules.squad_size:
        problems.append(f"squad has {len(players)} players, expected {rules.squad_size}")
    positions = Counter(sp.position for sp in players)
    for position, quota in rules.quotas.items():
        if positions[position] != quota:
            problems.append(f"{positions[position]} {position.short_name} selected, expected {quota}")
    for team, count in sorted(Counter(sp.team for sp in players).items()):
        if count > rules.team_max_players:
            problems.append(f"team {team} has {count} players, limit {rules.team_max_players}")

    if len(squad.starters) != rules.starters:
        problems.append(f"{len(squad.starters)} starters, expected {rules.starters}")
    starting = Counter(sp.position for sp in squad.starters)
    if starting[Position.GOALKEEPER] != rules.starting_goalkeepers:
        problems.append(f"{starting[Position.GOALKEEPER]} starting goalkeepers, expected {rules.starting_goalkeepers}")
    for position, minimum in rules.starter_minimums.items():
        if starting[position] < minimum:
            problems.append(f"{starting[position]} starting {position.short_name}, need at least {minimum}")
    if squad.captain.player_id == squad.vice_captain.player_id:
        problems.append("captain and vice-captain are the same player")

    if settings is not None:
        if squad.total_cost > settings.budget:
            problems.append(f"cost {squad.total_cost} exceeds budget {settings.budget}")
        ids = set(squad.player_ids)
        for player_id in sorted(settings.forced_ids - ids):
            problems.append(f"forced player {player_id} not selected")
        for player_id in sorted(settings.excluded_ids & ids):
            problems.append(f"excluded player {player_id} selected")
    return problems


def _with_warnings(squad: OptimizedSquad, problems: Sequence[str]) -> OptimizedSquad:
    for problem in problems:
        logger.warning("Squad constraint not met: %s", problem)
    return OptimizedSquad(
        starters=squad.starters,
        bench=squad.bench,
        captain=squad.captain,
        vice_captain=squad.vice_captain,
        total_expected_points=squad.total_expected_points,
        total_cost=squad.total_cost,
        formation=squad.formation,
        warnings=tuple(problems),
    )


def optimize(
    players: Sequence[Player],
    fixtures: Sequence[Fixture],
    settings: SquadSettings | None = None,
    *,
    rules: SquadRules = FPL_RULES,
) -> OptimizedSquad:
    """Build the highest-projected squad the greedy fill and repairs can find."""

    settings = settings or SquadSettings()
    candidates = [p for p in players if p.player_id not in settings.excluded_ids]
    scored = score_players(candidates, fixtures, settings.horizon, settings.historical, settings.strategy)
    eligible = [sp for sp in scored if sp.projected_points > 0 or sp.player_id in settings.forced_ids]
    ranked = _rank(eligible)
    by_position = _by_position(ranked)
    logger.info(
        "Optimizing from %s eligible of %s players (budget %s, horizon %s)",
        len(eligible),
        len(players),
        settings.budget,
        settings.horizon,
    )

    state = _SelectionState(rules, settings.budget)
    for sp in ranked:
        if sp.player_id not in settings.forced_ids:
            continue
        if state.can_add(sp):
            state.add(sp)
        else:
            logger.warning("Forced player %s (%s) could not be admitted", sp.player.name, sp.player_id)

    _fill_quotas(state, by_position, settings.reserve_budget)
    _repair_open_slots(state, by_position, settings.forced_ids)
    _reconcile_budget(state, by_position, settings.forced_ids)

    squad = _assemble(state.selected, rules)
    squad = _with_warnings(squad, validate_squad(squad, settings, rules))
    logger.info(
        "Selected %s players, cost %s, %.2f expected points, formation %s",
        len(squad.players),
        squad.total_cost,
        squad.total_expected_points,
        squad.formation,
    )
    return squad


def pick_lineup(
    squad_players: Sequence[Player],
    fixtures: Sequence[Fixture],
    *,
    horizon: int = 1,
    historical: Sequence[HistoricalSeason] | None = None,
    strategy: Optional[Strategy] = None,
    rules: SquadRules = FPL_RULES,
) -> OptimizedSquad:
    """Choose starters, bench and captaincy for an existing squad."""

    scored = score_players(squad_players, fixtures, horizon, historical, strategy or NEUTRAL_STRATEGY)
    squad = _assemble(scored, rules)
    return _with_warnings(squad, validate_squad(squad, None, rules))
