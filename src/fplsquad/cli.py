"""Command-line interface for building a squad from game-data exports."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Sequence

from fplsquad.config import history_dir
from fplsquad.config_loader import StrategyProfile
from fplsquad.export import plan_to_report, squad_to_csv, squad_to_report
from fplsquad.ingest import (
    discover_season_files,
    fixtures_from_payload,
    load_historical_seasons,
    players_from_bootstrap,
    upcoming_events,
)
from fplsquad.models import HistoricalSeason, Strategy
from fplsquad.optimizer import SquadOptimizationError, SquadSettings, optimize, pick_lineup
from fplsquad.transfers import TransferSettings, plan_transfers, summarize


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recommend a fantasy football squad")
    parser.add_argument("bootstrap", type=Path, help="Path to bootstrap-static JSON")
    parser.add_argument("fixtures", type=Path, help="Path to fixtures JSON")
    parser.add_argument(
        "--history",
        type=Path,
        nargs="*",
        default=[],
        help="Past-season gameweek CSVs (e.g., 2022-23_gw.csv)",
    )
    parser.add_argument(
        "--history-dir",
        type=Path,
        default=None,
        help="Directory scanned for *_gw.csv files (defaults to FPLSQUAD_HISTORY_DIR)",
    )
    parser.add_argument("--budget", type=int, default=None, help="Budget in tenths of a million (1000 = 100.0m)")
    parser.add_argument("--horizon", type=int, default=None, help="Number of upcoming fixtures to score")
    parser.add_argument("--time-horizon", type=float, default=None, help="-1 favours form, +1 favours history")
    parser.add_argument("--risk-tolerance", type=float, default=None, help="-1 cautious, +1 aggressive")
    parser.add_argument("--force", type=int, nargs="*", default=[], help="Player IDs to force into the squad")
    parser.add_argument("--exclude", type=int, nargs="*", default=[], help="Player IDs to remove from consideration")
    parser.add_argument(
        "--no-reserve",
        action="store_true",
        help="Do not hold back budget for unfilled slots during the greedy fill",
    )
    parser.add_argument(
        "--squad",
        type=int,
        nargs="*",
        default=None,
        help="Existing squad player IDs; picks a lineup instead of building a squad",
    )
    parser.add_argument("--plan", type=int, default=0, help="Plan transfers for this many gameweeks (needs --squad)")
    parser.add_argument("--bank", type=int, default=0, help="Money in the bank, in tenths")
    parser.add_argument("--free-transfers", type=int, default=1, help="Free transfers available (1-2)")
    parser.add_argument("--budget-flex", type=int, default=0, help="Extra spend allowed per transfer, in tenths")
    parser.add_argument("--no-rolling", action="store_true", help="Never bank a free transfer")
    parser.add_argument("--load-profile", type=Path, help="Load strategy profile JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save strategy profile JSON", default=None)
    parser.add_argument("--output", type=Path, default=Path("squad.csv"), help="Output CSV path")
    parser.add_argument("--report", type=Path, default=None, help="Optional path to write a JSON report")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Unable to read {path}: {exc}") from exc


def _history_paths(args: argparse.Namespace) -> List[Path]:
    paths = list(args.history)
    directory = args.history_dir or history_dir()
    if directory is not None:
        paths.extend(discover_season_files(directory))
    return paths


def _resolve_profile(args: argparse.Namespace) -> StrategyProfile:
    profile = StrategyProfile.load(args.load_profile) if args.load_profile else StrategyProfile()
    if args.time_horizon is not None:
        profile.time_horizon = args.time_horizon
    if args.risk_tolerance is not None:
        profile.risk_tolerance = args.risk_tolerance
    if args.budget is not None:
        profile.budget = args.budget
    if args.horizon is not None:
        profile.horizon = args.horizon
    return profile


def _print_squad(squad) -> None:
    print(f"Formation {squad.formation}: {squad.total_expected_points:.2f} expected points, cost {squad.total_cost / 10:.1f}m")
    for sp in squad.starters:
        armband = " (C)" if sp is squad.captain else " (VC)" if sp is squad.vice_captain else ""
        print(f"  {sp.position.short_name} {sp.player.name}{armband}: {sp.projected_points:.2f}")
    print("Bench: " + ", ".join(sp.player.name for sp in squad.bench))
    for warning in squad.warnings:
        print(f"Warning: {warning}")


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    profile = _resolve_profile(args)
    try:
        strategy: Strategy = profile.strategy
    except ValueError as exc:
        raise SystemExit(f"Invalid strategy: {exc}") from exc
    if args.save_profile:
        profile.save(args.save_profile)
        print(f"Saved strategy profile to {args.save_profile}")

    bootstrap = _load_json(args.bootstrap)
    players, skipped = players_from_bootstrap(bootstrap)
    fixtures, _ = fixtures_from_payload(_load_json(args.fixtures))
    historical: List[HistoricalSeason] = load_historical_seasons(_history_paths(args))
    print(f"Loaded {len(players)} players ({skipped} skipped), {len(fixtures)} fixtures, {len(historical)} past seasons")

    try:
        if args.squad is not None:
            by_id = {player.player_id: player for player in players}
            missing = [player_id for player_id in args.squad if player_id not in by_id]
            if missing:
                raise SystemExit(f"Unknown squad player ids: {missing}")
            squad_players = [by_id[player_id] for player_id in args.squad]
            squad = pick_lineup(
                squad_players,
                fixtures,
                horizon=profile.horizon,
                historical=historical,
                strategy=strategy,
            )
        else:
            settings = SquadSettings(
                budget=profile.budget,
                horizon=profile.horizon,
                excluded_ids=frozenset(args.exclude),
                forced_ids=frozenset(args.force),
                historical=tuple(historical),
                strategy=strategy,
                reserve_budget=not args.no_reserve,
            )
            squad = optimize(players, fixtures, settings)
    except SquadOptimizationError as exc:
        raise SystemExit(str(exc)) from exc
    except ValueError as exc:
        raise SystemExit(f"Invalid settings: {exc}") from exc

    _print_squad(squad)
    args.output.write_text(squad_to_csv(squad), encoding="utf-8")
    print(f"Wrote squad to {args.output}")
    report = {"squad": squad_to_report(squad)}

    if args.plan > 0:
        if args.squad is None:
            raise SystemExit("--plan needs --squad")
        gameweeks = upcoming_events(bootstrap, args.plan)
        if not gameweeks:
            raise SystemExit("No upcoming gameweeks in bootstrap data")
        try:
            transfer_settings = TransferSettings(
                bank=args.bank,
                free_transfers=args.free_transfers,
                budget_flex=args.budget_flex,
                consider_rolling=not args.no_rolling,
                historical=tuple(historical),
                strategy=strategy,
            )
        except ValueError as exc:
            raise SystemExit(f"Invalid transfer settings: {exc}") from exc
        plan = plan_transfers(squad_players, players, fixtures, gameweeks, transfer_settings)
        counts = summarize(plan)
        print(f"Transfer plan: {counts['transfers']} transfer(s), {counts['holds']} hold(s), bank {plan.bank / 10:.1f}m")
        for step in plan.steps:
            if step.transfer is not None:
                print(
                    f"  GW{step.gameweek}: {step.transfer.player_out.player.name} -> "
                    f"{step.transfer.player_in.player.name} (+{step.transfer.improvement:.2f}, {step.transfer.priority})"
                )
            else:
                print(f"  GW{step.gameweek}: hold")
        report["plan"] = plan_to_report(plan)

    if args.report:
        args.report.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Wrote report to {args.report}")


if __name__ == "__main__":
    main()
