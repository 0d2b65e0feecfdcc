"""CSV and JSON renderings of optimizer and planner results."""

from __future__ import annotations

import csv
from dataclasses import asdict
from io import StringIO
from typing import Any, Dict

from fplsquad.estimator import ScoredPlayer
from fplsquad.optimizer import OptimizedSquad
from fplsquad.transfers import TransferOption, TransferPlan


SQUAD_CSV_HEADERS = (
    "slot",
    "role",
    "player_id",
    "name",
    "team",
    "position",
    "price",
    "projected_points",
    "armband",
)


def _armband(squad: OptimizedSquad, sp: ScoredPlayer) -> str:
    if sp.player_id == squad.captain.player_id:
        return "C"
    if sp.player_id == squad.vice_captain.player_id:
        return "VC"
    return ""


def squad_to_csv(squad: OptimizedSquad) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(SQUAD_CSV_HEADERS)
    rows = [("starter", sp) for sp in squad.starters] + [("bench", sp) for sp in squad.bench]
    for slot, (role, sp) in enumerate(rows, start=1):
        writer.writerow([
            slot,
            role,
            sp.player_id,
            sp.player.name,
            sp.team,
            sp.position.short_name,
            sp.price,
            f"{sp.projected_points:.4f}",
            _armband(squad, sp),
        ])
    return buffer.getvalue()


def scored_player_to_dict(sp: ScoredPlayer) -> Dict[str, Any]:
    return {
        "player_id": sp.player_id,
        "name": sp.player.name,
        "team": sp.team,
        "position": sp.position.short_name,
        "price": sp.price,
        "projected_points": sp.projected_points,
        "breakdown": asdict(sp.breakdown),
    }


def squad_to_report(squad: OptimizedSquad) -> Dict[str, Any]:
    return {
        "starters": [scored_player_to_dict(sp) for sp in squad.starters],
        "bench": [scored_player_to_dict(sp) for sp in squad.bench],
        "captain_id": squad.captain.player_id,
        "vice_captain_id": squad.vice_captain.player_id,
        "total_expected_points": squad.total_expected_points,
        "total_cost": squad.total_cost,
        "formation": squad.formation,
        "warnings": list(squad.warnings),
    }


def transfer_option_to_dict(option: TransferOption) -> Dict[str, Any]:
    return {
        "out_id": option.player_out.player_id,
        "out_name": option.player_out.player.name,
        "in_id": option.player_in.player_id,
        "in_name": option.player_in.player.name,
        "improvement": option.improvement,
        "priority": option.priority,
        "price_change": option.price_change,
    }


def plan_to_report(plan: TransferPlan) -> Dict[str, Any]:
    steps = []
    for step in plan.steps:
        steps.append({
            "gameweek": step.gameweek,
            "action": step.action,
            "free_transfers": step.free_transfers,
            "bank": step.bank,
            "threshold": step.threshold,
            "best_improvement": step.best_improvement,
            "transfer": transfer_option_to_dict(step.transfer) if step.transfer else None,
            "alternatives": [transfer_option_to_dict(alt) for alt in step.alternatives],
        })
    return {"steps": steps, "squad_ids": list(plan.squad_ids), "bank": plan.bank}
