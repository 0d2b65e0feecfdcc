"""REST API for the squad optimizer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response

from fplsquad.api.schemas import (
    EstimateRequest,
    EstimateResponse,
    HistoryPreviewResponse,
    LineupRequest,
    OptimizeRequest,
    SeasonPreview,
    SquadResponse,
    TransferPlanResponse,
    TransferRequest,
)
from fplsquad.estimator import score_players
from fplsquad.export import plan_to_report, scored_player_to_dict, squad_to_csv, squad_to_report
from fplsquad.ingest import parse_historical_csv, season_from_filename
from fplsquad.models import normalize_player_name
from fplsquad.optimizer import OptimizedSquad, SquadOptimizationError, optimize, pick_lineup
from fplsquad.transfers import plan_transfers


logger = logging.getLogger(__name__)


def _optimize_or_400(payload: OptimizeRequest) -> OptimizedSquad:
    try:
        return optimize(payload.players, payload.fixtures, payload.settings)
    except SquadOptimizationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


async def _read_upload(upload: UploadFile) -> str:
    contents = await upload.read()
    if not contents:
        raise HTTPException(status_code=400, detail=f"{upload.filename or 'upload'} is empty")
    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=400, detail=f"{upload.filename} is not UTF-8 text") from exc


def create_app() -> FastAPI:
    app = FastAPI(title="fplsquad optimizer")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/estimate", response_model=EstimateResponse)
    async def estimate(payload: EstimateRequest) -> EstimateResponse:
        scored = score_players(
            payload.players,
            payload.fixtures,
            payload.horizon,
            payload.historical,
            payload.strategy,
        )
        return EstimateResponse.model_validate({"players": [scored_player_to_dict(sp) for sp in scored]})

    @app.post("/optimize", response_model=SquadResponse)
    async def optimize_squad(payload: OptimizeRequest) -> SquadResponse:
        squad = _optimize_or_400(payload)
        return SquadResponse.model_validate(squad_to_report(squad))

    @app.post("/optimize/export.csv")
    async def export_csv(payload: OptimizeRequest):
        squad = _optimize_or_400(payload)
        return Response(
            content=squad_to_csv(squad),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=squad.csv"},
        )

    @app.post("/lineup", response_model=SquadResponse)
    async def lineup(payload: LineupRequest) -> SquadResponse:
        try:
            squad = pick_lineup(
                payload.squad,
                payload.fixtures,
                horizon=payload.horizon,
                historical=payload.historical,
                strategy=payload.strategy,
            )
        except SquadOptimizationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return SquadResponse.model_validate(squad_to_report(squad))

    @app.post("/transfers", response_model=TransferPlanResponse)
    async def transfers(payload: TransferRequest) -> TransferPlanResponse:
        by_id = {player.player_id: player for player in payload.players}
        missing = [player_id for player_id in payload.squad_ids if player_id not in by_id]
        if missing:
            raise HTTPException(status_code=400, detail=f"Unknown squad player ids: {missing}")
        squad = [by_id[player_id] for player_id in payload.squad_ids]
        plan = plan_transfers(squad, payload.players, payload.fixtures, payload.gameweeks, payload.settings)
        return TransferPlanResponse.model_validate(plan_to_report(plan))

    @app.post("/history/preview", response_model=HistoryPreviewResponse)
    async def history_preview(files: List[UploadFile] = File(...)) -> HistoryPreviewResponse:
        seasons: List[SeasonPreview] = []
        for upload in files:
            text = await _read_upload(upload)
            filename = upload.filename or "upload.csv"
            season = season_from_filename(Path(filename))
            matches = parse_historical_csv(text, season)
            seasons.append(
                SeasonPreview(
                    filename=filename,
                    season=season,
                    matches=len(matches),
                    players=len({normalize_player_name(m.player_name) for m in matches}),
                )
            )
        logger.info("Previewed %s historical file(s)", len(seasons))
        return HistoryPreviewResponse(seasons=seasons, total_matches=sum(s.matches for s in seasons))

    return app
