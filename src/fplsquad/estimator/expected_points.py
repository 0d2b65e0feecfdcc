"""Expected-points model: blended scoring rate scaled by upcoming fixtures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from fplsquad.models import (
    NEUTRAL_STRATEGY,
    Fixture,
    HistoricalInput,
    Player,
    Strategy,
    as_history_index,
)


logger = logging.getLogger(__name__)

DIFFICULTY_MULTIPLIERS: Dict[int, float] = {
    1: 1.25,
    2: 1.15,
    3: 1.00,
    4: 0.85,
    5: 0.70,
}
HOME_MULTIPLIER = 1.05
AWAY_MULTIPLIER = 0.95

SUFFICIENT_HISTORY_MATCHES = 10
CONSISTENCY_THRESHOLD = 4.5
CONSISTENCY_BONUS = 0.5

CONFIDENCE_WITH_HISTORY = 90
CONFIDENCE_REGULAR = 70
CONFIDENCE_SPARSE = 40
REGULAR_MINUTES = 500

CAUTIOUS_SHRINK = 0.30
PROVEN_STARTER_MINUTES = 1500
PROVEN_STARTER_BOOST = 0.05
HOT_FORM_RATIO = 1.2
HOT_FORM_BOOST = 0.15
DIFFERENTIAL_MINUTES = 1000
DIFFERENTIAL_BASE = 5.0
DIFFERENTIAL_BOOST = 0.10

AVAILABILITY_THRESHOLD = 75


@dataclass(frozen=True)
class Breakdown:
    """Intermediate values behind a projection, kept for explainability."""

    base_points: float
    recent_form_component: float
    season_ppg_component: float
    historical_ppg_component: float
    recent_form: float
    season_ppg: float
    historical_ppg: float
    historical_matches: int
    consistency_bonus: float
    difficulty_multiplier: float
    home_away_multiplier: float
    fixtures_considered: int
    confidence: int
    reason: str = ""


@dataclass(frozen=True)
class ScoredPlayer:
    player: Player
    projected_points: float
    breakdown: Breakdown

    @property
    def player_id(self) -> int:
        return self.player.player_id

    @property
    def position(self):
        return self.player.position

    @property
    def team(self) -> int:
        return self.player.team

    @property
    def price(self) -> int:
        return self.player.price


def blend_weights(time_horizon: float, *, sufficient_history: bool) -> Tuple[float, float, float]:
    """Return (recent, season, historical) weights summing to 1.

    With enough history the weights slide from recent form at -1 through
    0.35/0.35/0.30 at 0 to multi-season history at +1. Without it only
    recent form and season PPG are blended.
    """

    t = max(-1.0, min(1.0, time_horizon))
    if not sufficient_history:
        return 0.60 - 0.10 * t, 0.40 + 0.10 * t, 0.0

    raw = (
        max(0.0, 0.35 - 0.275 * t),
        max(0.0, 0.35 - 0.05 * t),
        max(0.0, 0.30 + 0.325 * t),
    )
    total = sum(raw)
    return raw[0] / total, raw[1] / total, raw[2] / total


def _confidence(sufficient_history: bool, minutes: int) -> int:
    if sufficient_history:
        return CONFIDENCE_WITH_HISTORY
    if minutes > REGULAR_MINUTES:
        return CONFIDENCE_REGULAR
    return CONFIDENCE_SPARSE


def apply_risk_tolerance(
    base: float,
    *,
    risk_tolerance: float,
    confidence: int,
    minutes: int,
    recent_form: float,
    season_ppg: float,
) -> float:
    if risk_tolerance < 0:
        caution = -risk_tolerance
        if confidence < CONFIDENCE_REGULAR:
            base *= 1.0 - CAUTIOUS_SHRINK * caution
        if minutes > PROVEN_STARTER_MINUTES:
            base *= 1.0 + PROVEN_STARTER_BOOST
    elif risk_tolerance > 0:
        if recent_form > HOT_FORM_RATIO * season_ppg:
            base *= 1.0 + HOT_FORM_BOOST * risk_tolerance
        if minutes < DIFFERENTIAL_MINUTES and base > DIFFERENTIAL_BASE:
            base *= 1.0 + DIFFERENTIAL_BOOST * risk_tolerance
    return base


def availability_gate(player: Player) -> Optional[str]:
    """Return why ``player`` cannot score, or None when available."""

    chance = player.chance_of_playing
    if player.minutes == 0 and chance != 100:
        return "no minutes this season and not certain to play"
    if chance is not None and chance < AVAILABILITY_THRESHOLD:
        return f"{chance}% chance of playing"
    return None


def upcoming_fixtures(team: int, fixtures: Sequence[Fixture], horizon: int) -> List[Fixture]:
    """First ``horizon`` unfinished, scheduled fixtures for ``team`` by event."""

    pending = [f for f in fixtures if f.involves(team) and not f.finished and f.event is not None]
    pending.sort(key=lambda f: f.event)
    return pending[:horizon]


def estimate(
    player: Player,
    fixtures: Sequence[Fixture],
    horizon: int,
    historical: HistoricalInput = None,
    strategy: Strategy | None = None,
) -> Tuple[float, Breakdown]:
    """Project ``player``'s points over their next ``horizon`` fixtures."""

    if horizon < 1:
        raise ValueError(f"horizon must be at least 1, got {horizon}")
    strategy = strategy or NEUTRAL_STRATEGY
    index = as_history_index(historical)

    recent_form = float(player.form)
    season_ppg = float(player.points_per_game)
    matches = index.matches_for(player.name)
    historical_ppg = sum(m.total_points for m in matches) / len(matches) if matches else 0.0
    sufficient_history = len(matches) > SUFFICIENT_HISTORY_MATCHES

    w_recent, w_season, w_history = blend_weights(strategy.time_horizon, sufficient_history=sufficient_history)
    recent_component = recent_form * w_recent
    season_component = season_ppg * w_season
    historical_component = historical_ppg * w_history
    base = recent_component + season_component + historical_component

    bonus = 0.0
    if sufficient_history and historical_ppg > CONSISTENCY_THRESHOLD:
        bonus = CONSISTENCY_BONUS
        base += bonus

    confidence = _confidence(sufficient_history, player.minutes)
    base = apply_risk_tolerance(
        base,
        risk_tolerance=strategy.risk_tolerance,
        confidence=confidence,
        minutes=player.minutes,
        recent_form=recent_form,
        season_ppg=season_ppg,
    )

    def breakdown(**overrides) -> Breakdown:
        values = dict(
            base_points=base,
            recent_form_component=recent_component,
            season_ppg_component=season_component,
            historical_ppg_component=historical_component,
            recent_form=recent_form,
            season_ppg=season_ppg,
            historical_ppg=historical_ppg,
            historical_matches=len(matches),
            consistency_bonus=bonus,
            difficulty_multiplier=1.0,
            home_away_multiplier=1.0,
            fixtures_considered=0,
            confidence=confidence,
        )
        values.update(overrides)
        return Breakdown(**values)

    reason = availability_gate(player)
    if reason is not None:
        return 0.0, breakdown(reason=reason)

    selected = upcoming_fixtures(player.team, fixtures, horizon)
    total = 0.0
    difficulty_sum = 0.0
    venue_sum = 0.0
    for fixture in selected:
        is_home = fixture.team_h == player.team
        difficulty = DIFFICULTY_MULTIPLIERS[fixture.difficulty_for(player.team)]
        venue = HOME_MULTIPLIER if is_home else AWAY_MULTIPLIER
        total += base * difficulty * venue
        difficulty_sum += difficulty
        venue_sum += venue

    if not selected:
        return 0.0, breakdown(reason="no upcoming fixtures")

    count = len(selected)
    return total, breakdown(
        difficulty_multiplier=difficulty_sum / count,
        home_away_multiplier=venue_sum / count,
        fixtures_considered=count,
    )


def score_players(
    players: Sequence[Player],
    fixtures: Sequence[Fixture],
    horizon: int,
    historical: HistoricalInput = None,
    strategy: Strategy | None = None,
) -> List[ScoredPlayer]:
    """Score every player, building the history lookup once for the whole pool."""

    index = as_history_index(historical)
    scored = []
    for player in players:
        points, detail = estimate(player, fixtures, horizon, index, strategy)
        scored.append(ScoredPlayer(player=player, projected_points=points, breakdown=detail))
    logger.debug("Scored %s players over %s fixture(s) (history for %s names)", len(scored), horizon, len(index))
    return scored
