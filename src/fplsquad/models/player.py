"""Canonical player and fixture models shared across ingestion, scoring and optimizer layers."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Position(IntEnum):
    """Squad roles, numbered as the upstream ``element_type`` codes."""

    GOALKEEPER = 1
    DEFENDER = 2
    MIDFIELDER = 3
    FORWARD = 4

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]


_SHORT_NAMES = {
    Position.GOALKEEPER: "GKP",
    Position.DEFENDER: "DEF",
    Position.MIDFIELDER: "MID",
    Position.FORWARD: "FWD",
}


class Player(BaseModel):
    """Normalized player payload used by the estimator and optimizer."""

    player_id: int
    name: str
    team: int
    position: Position
    price: int = Field(..., ge=0)
    points_per_game: float = 0.0
    form: float = 0.0
    minutes: int = Field(default=0, ge=0)
    chance_of_playing: Optional[int] = Field(default=None, ge=0, le=100)
    first_name: str = ""
    second_name: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)


class Fixture(BaseModel):
    fixture_id: Optional[int] = None
    event: Optional[int] = None
    team_h: int
    team_a: int
    team_h_difficulty: int = Field(default=3, ge=1, le=5)
    team_a_difficulty: int = Field(default=3, ge=1, le=5)
    finished: bool = False

    model_config = ConfigDict(frozen=True)

    def involves(self, team: int) -> bool:
        return team in (self.team_h, self.team_a)

    def difficulty_for(self, team: int) -> int:
        """Difficulty rating faced by ``team`` in this fixture."""

        return self.team_h_difficulty if team == self.team_h else self.team_a_difficulty
