"""Strategy dials that bias the expected-points blend."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Strategy(BaseModel):
    """Manager preferences, each dial in [-1, 1] with 0 as neutral.

    ``time_horizon`` below zero favours recent form, above zero favours
    multi-season history. ``risk_tolerance`` below zero penalises thinly
    evidenced players and rewards proven starters; above zero boosts in-form
    players and low-minutes differentials.
    """

    time_horizon: float = Field(default=0.0, ge=-1.0, le=1.0)
    risk_tolerance: float = Field(default=0.0, ge=-1.0, le=1.0)

    model_config = ConfigDict(frozen=True)


NEUTRAL_STRATEGY = Strategy()
