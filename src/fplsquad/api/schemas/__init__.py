"""Pydantic models for API I/O."""

from .history import HistoryPreviewResponse, SeasonPreview
from .squad import (
    BreakdownResponse,
    EstimateRequest,
    EstimateResponse,
    LineupRequest,
    OptimizeRequest,
    ScoredPlayerResponse,
    SquadResponse,
)
from .transfers import (
    TransferOptionResponse,
    TransferPlanResponse,
    TransferRequest,
    TransferStepResponse,
)

__all__ = [
    "BreakdownResponse",
    "EstimateRequest",
    "EstimateResponse",
    "HistoryPreviewResponse",
    "LineupRequest",
    "OptimizeRequest",
    "ScoredPlayerResponse",
    "SeasonPreview",
    "SquadResponse",
    "TransferOptionResponse",
    "TransferPlanResponse",
    "TransferRequest",
    "TransferStepResponse",
]
