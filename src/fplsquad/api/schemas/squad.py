from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from fplsquad.models import Fixture, HistoricalSeason, Player, Strategy
from fplsquad.optimizer import SquadSettings


class EstimateRequest(BaseModel):
    players: List[Player]
    fixtures: List[Fixture] = Field(default_factory=list)
    horizon: int = Field(default=1, ge=1)
    historical: List[HistoricalSeason] = Field(default_factory=list)
    strategy: Strategy = Field(default_factory=Strategy)


class OptimizeRequest(BaseModel):
    players: List[Player]
    fixtures: List[Fixture] = Field(default_factory=list)
    settings: SquadSettings = Field(default_factory=SquadSettings)


class LineupRequest(BaseModel):
    squad: List[Player] = Field(..., min_length=2)
    fixtures: List[Fixture] = Field(default_factory=list)
    horizon: int = Field(default=1, ge=1)
    historical: List[HistoricalSeason] = Field(default_factory=list)
    strategy: Strategy = Field(default_factory=Strategy)


class BreakdownResponse(BaseModel):
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


class ScoredPlayerResponse(BaseModel):
    player_id: int
    name: str
    team: int
    position: str
    price: int
    projected_points: float
    breakdown: BreakdownResponse


class EstimateResponse(BaseModel):
    players: List[ScoredPlayerResponse]


class SquadResponse(BaseModel):
    starters: List[ScoredPlayerResponse]
    bench: List[ScoredPlayerResponse]
    captain_id: int
    vice_captain_id: int
    total_expected_points: float
    total_cost: int
    formation: str
    warnings: List[str] = Field(default_factory=list)
