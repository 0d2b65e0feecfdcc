"""Week-by-week transfer plan over a short gameweek window."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from fplsquad.config import FPL_RULES, SquadRules
from fplsquad.estimator import ScoredPlayer, score_players
from fplsquad.models import NEUTRAL_STRATEGY, Fixture, HistoricalSeason, HistoryIndex, Player, Strategy


logger = logging.getLogger(__name__)

HIGH_PRIORITY_RATIO = 2.0
MEDIUM_PRIORITY_RATIO = 1.33
MAX_FREE_TRANSFERS = 2


class TransferSettings(BaseModel):
    bank: int = Field(default=0, ge=0)
    free_transfers: int = Field(default=1, ge=1, le=MAX_FREE_TRANSFERS)
    budget_flex: int = 0
    consider_rolling: bool = True
    improvement_threshold: float = Field(default=1.5, ge=0.0)
    rolling_threshold: float = Field(default=2.5, ge=0.0)
    candidates_per_player: int = Field(default=3, ge=1)
    min_minutes: int = Field(default=100, ge=0)
    alternatives: int = Field(default=2, ge=0)
    # Sale value per squad player id; current price when absent.
    selling_prices: Dict[int, int] = Field(default_factory=dict)
    historical: Tuple[HistoricalSeason, ...] = ()
    strategy: Strategy = NEUTRAL_STRATEGY

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class TransferOption:
    player_out: ScoredPlayer
    player_in: ScoredPlayer
    improvement: float
    priority: str

    @property
    def price_change(self) -> int:
        return self.player_in.price - self.player_out.price


@dataclass(frozen=True)
class TransferStep:
    gameweek: int
    action: str
    free_transfers: int
    bank: int
    threshold: float
    transfer: Optional[TransferOption] = None
    alternatives: Tuple[TransferOption, ...] = ()
    best_improvement: float = 0.0


@dataclass(frozen=True)
class TransferPlan:
    steps: Tuple[TransferStep, ...]
    squad_ids: Tuple[int, ...]
    bank: int


def priority_for(improvement: float, threshold: float) -> str:
    if improvement > HIGH_PRIORITY_RATIO * threshold:
        return "high"
    if improvement > MEDIUM_PRIORITY_RATIO * threshold:
        return "medium"
    return "low"


def _candidate_pairs(
    squad: Sequence[ScoredPlayer],
    pool: Sequence[ScoredPlayer],
    bank: int,
    selling_prices: Mapping[int, int],
    settings: TransferSettings,
    rules: SquadRules,
) -> List[Tuple[ScoredPlayer, ScoredPlayer, float]]:
    squad_ids = {sp.player_id for sp in squad}
    team_counts = Counter(sp.team for sp in squad)
    ranked_pool = sorted(pool, key=lambda sp: sp.projected_points, reverse=True)

    pairs: List[Tuple[ScoredPlayer, ScoredPlayer, float]] = []
    for current in squad:
        selling = selling_prices.get(current.player_id, current.price)
        funds = bank + selling + settings.budget_flex
        kept = 0
        for target in ranked_pool:
            if kept >= settings.candidates_per_player:
                break
            player = target.player
            if (
                target.position != current.position
                or target.player_id in squad_ids
                or player.minutes <= settings.min_minutes
                or player.chance_of_playing == 0
                or target.price > funds
            ):
                continue
            if target.team != current.team and team_counts[target.team] >= rules.team_max_players:
                continue
            pairs.append((current, target, target.projected_points - current.projected_points))
            kept += 1
    pairs.sort(key=lambda pair: pair[2], reverse=True)
    return pairs


def plan_transfers(
    squad: Sequence[Player],
    players: Sequence[Player],
    fixtures: Sequence[Fixture],
    gameweeks: Sequence[int],
    settings: TransferSettings | None = None,
    *,
    rules: SquadRules = FPL_RULES,
) -> TransferPlan:
    """Recommend at most one transfer, or a hold, for each gameweek in turn.

    Window ``i`` scores players over ``i + 1`` fixtures, so later weeks look
    further ahead. Each recommended move is applied to a virtual squad and
    bank before the next window is planned.
    """

    settings = settings or TransferSettings()
    history = HistoryIndex.from_seasons(settings.historical)
    by_id: Dict[int, Player] = {p.player_id: p for p in players}
    virtual: List[Player] = list(squad)
    selling: Dict[int, int] = dict(settings.selling_prices)
    bank = settings.bank
    free_transfers = settings.free_transfers
    steps: List[TransferStep] = []

    for index, gameweek in enumerate(gameweeks):
        horizon = index + 1
        squad_ids = {p.player_id for p in virtual}
        scored_squad = score_players(virtual, fixtures, horizon, history, settings.strategy)
        pool = [p for p in by_id.values() if p.player_id not in squad_ids]
        scored_pool = score_players(pool, fixtures, horizon, history, settings.strategy)
        pairs = _candidate_pairs(scored_squad, scored_pool, bank, selling, settings, rules)

        rolling = settings.consider_rolling and free_transfers == 1
        base_threshold = settings.improvement_threshold
        threshold = settings.rolling_threshold if rolling else base_threshold
        best = pairs[0][2] if pairs else 0.0

        if pairs and best > threshold:
            out_sp, in_sp, improvement = pairs[0]
            option = TransferOption(out_sp, in_sp, improvement, priority_for(improvement, base_threshold))
            alternatives: Tuple[TransferOption, ...] = ()
            if index == 0:
                alternatives = tuple(
                    TransferOption(o, i, gain, priority_for(gain, base_threshold))
                    for o, i, gain in pairs[1 : 1 + settings.alternatives]
                )
            bank += selling.pop(out_sp.player_id, out_sp.price) - in_sp.price
            virtual = [in_sp.player if p.player_id == out_sp.player_id else p for p in virtual]
            logger.info(
                "GW%s: %s -> %s (+%.2f, %s priority)",
                gameweek,
                out_sp.player.name,
                in_sp.player.name,
                improvement,
                option.priority,
            )
            steps.append(
                TransferStep(
                    gameweek=gameweek,
                    action="transfer",
                    free_transfers=free_transfers,
                    bank=bank,
                    threshold=threshold,
                    transfer=option,
                    alternatives=alternatives,
                    best_improvement=improvement,
                )
            )
            free_transfers = 1
        else:
            logger.info("GW%s: hold (best improvement %.2f, threshold %.2f)", gameweek, best, threshold)
            steps.append(
                TransferStep(
                    gameweek=gameweek,
                    action="hold",
                    free_transfers=free_transfers,
                    bank=bank,
                    threshold=threshold,
                    best_improvement=best,
                )
            )
            if rolling:
                free_transfers = min(MAX_FREE_TRANSFERS, free_transfers + 1)

    return TransferPlan(
        steps=tuple(steps),
        squad_ids=tuple(p.player_id for p in virtual),
        bank=bank,
    )


def summarize(plan: TransferPlan) -> Mapping[str, int]:
    """Count recommended moves and holds."""

    actions = Counter(step.action for step in plan.steps)
    return {"transfers": actions["transfer"], "holds": actions["hold"]}
