from __future__ import annotations

from typing import List

from pydantic import BaseModel


class SeasonPreview(BaseModel):
    filename: str
    season: str
    matches: int
    players: int


class HistoryPreviewResponse(BaseModel):
    seasons: List[SeasonPreview]
    total_matches: int
