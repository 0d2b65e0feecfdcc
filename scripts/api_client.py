"""Lightweight REST client for the fplsquad API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx

from fplsquad.ingest import fixtures_from_payload, players_from_bootstrap


def build_settings(raw: str) -> dict:
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid settings JSON: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the fplsquad REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("bootstrap", type=Path, nargs="?", help="bootstrap-static JSON")
    parser.add_argument("fixtures", type=Path, nargs="?", help="fixtures JSON")
    parser.add_argument("--settings", default="", help='JSON squad settings, e.g. {"budget": 995}')
    parser.add_argument("--history-preview", type=Path, nargs="*", default=None, help="Season CSVs to summarise and exit")
    parser.add_argument("--export-path", type=Path, help="Download the squad as CSV to this path")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=60.0) as client:
        if args.history_preview:
            files = [("files", (path.name, path.read_bytes(), "text/csv")) for path in args.history_preview]
            resp = client.post("/history/preview", files=files)
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.bootstrap is None or args.fixtures is None:
            raise SystemExit("bootstrap and fixtures files are required unless using --history-preview")

        players, _ = players_from_bootstrap(json.loads(args.bootstrap.read_text(encoding="utf-8")))
        fixtures, _ = fixtures_from_payload(json.loads(args.fixtures.read_text(encoding="utf-8")))
        body = {
            "players": [player.model_dump(mode="json") for player in players],
            "fixtures": [fixture.model_dump(mode="json") for fixture in fixtures],
            "settings": build_settings(args.settings),
        }

        if args.export_path:
            resp = client.post("/optimize/export.csv", json=body)
            resp.raise_for_status()
            args.export_path.write_text(resp.text, encoding="utf-8")
            print(f"CSV export saved to {args.export_path}")
            return

        resp = client.post("/optimize", json=body)
        if resp.status_code == 400:
            raise SystemExit(f"optimization failed: {resp.json().get('detail')}")
        resp.raise_for_status()
        payload = resp.json()
        print(f"Formation {payload['formation']}, {payload['total_expected_points']:.2f} expected points")
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
