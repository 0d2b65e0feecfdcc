from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from fplsquad.models import Fixture, Player
from fplsquad.transfers import TransferSettings


class TransferRequest(BaseModel):
    squad_ids: List[int] = Field(..., min_length=1)
    players: List[Player]
    fixtures: List[Fixture] = Field(default_factory=list)
    gameweeks: List[int] = Field(..., min_length=1)
    settings: TransferSettings = Field(default_factory=TransferSettings)


class TransferOptionResponse(BaseModel):
    out_id: int
    out_name: str
    in_id: int
    in_name: str
    improvement: float
    priority: str
    price_change: int


class TransferStepResponse(BaseModel):
    gameweek: int
    action: str
    free_transfers: int
    bank: int
    threshold: float
    best_improvement: float
    transfer: TransferOptionResponse | None = None
    alternatives: List[TransferOptionResponse] = Field(default_factory=list)


class TransferPlanResponse(BaseModel):
    steps: List[TransferStepResponse]
    squad_ids: List[int]
    bank: int
