"""Normalize upstream game-data payloads into canonical records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError

from fplsquad.config import base_url as configured_base_url
from fplsquad.config import http_timeout
from fplsquad.ingest._retry import default_http_retry
from fplsquad.models import Fixture, Player


logger = logging.getLogger(__name__)

# Carried through to ``Player.metadata`` when present.
_METADATA_FIELDS = (
    "code",
    "total_points",
    "goals_scored",
    "assists",
    "clean_sheets",
    "selected_by_percent",
    "news",
    "status",
)


class UpstreamDataError(RuntimeError):
    """Raised when the game-data source cannot be read."""


@dataclass(frozen=True)
class GameData:
    players: List[Player]
    fixtures: List[Fixture]
    current_event: Optional[int]
    skipped_players: int = 0
    skipped_fixtures: int = 0


def _player_from_element(element: Mapping[str, Any]) -> Player:
    metadata = {key: element[key] for key in _METADATA_FIELDS if key in element}
    return Player(
        player_id=element["id"],
        name=element.get("web_name") or f"{element.get('first_name', '')} {element.get('second_name', '')}".strip(),
        team=element["team"],
        position=element["element_type"],
        price=element["now_cost"],
        points_per_game=element.get("points_per_game") or 0.0,
        form=element.get("form") or 0.0,
        minutes=element.get("minutes") or 0,
        chance_of_playing=element.get("chance_of_playing_next_round"),
        first_name=element.get("first_name") or "",
        second_name=element.get("second_name") or "",
        metadata=metadata,
    )


def players_from_bootstrap(payload: Mapping[str, Any]) -> Tuple[List[Player], int]:
    """Return players from a bootstrap payload plus the count of skipped elements."""

    players: List[Player] = []
    skipped = 0
    for element in payload.get("elements", []):
        try:
            players.append(_player_from_element(element))
        except (KeyError, ValidationError) as exc:
            skipped += 1
            logger.debug("Skipping element %s: %s", element.get("id"), exc)
    if skipped:
        logger.warning("Skipped %s malformed player elements", skipped)
    return players, skipped


def fixtures_from_payload(payload: Sequence[Mapping[str, Any]]) -> Tuple[List[Fixture], int]:
    fixtures: List[Fixture] = []
    skipped = 0
    for raw in payload:
        try:
            fixtures.append(
                Fixture(
                    fixture_id=raw.get("id"),
                    event=raw.get("event"),
                    team_h=raw["team_h"],
                    team_a=raw["team_a"],
                    team_h_difficulty=raw.get("team_h_difficulty", 3),
                    team_a_difficulty=raw.get("team_a_difficulty", 3),
                    finished=bool(raw.get("finished", False)),
                )
            )
        except (KeyError, ValidationError) as exc:
            skipped += 1
            logger.debug("Skipping fixture %s: %s", raw.get("id"), exc)
    if skipped:
        logger.warning("Skipped %s malformed fixtures", skipped)
    return fixtures, skipped


def current_event(payload: Mapping[str, Any]) -> Optional[int]:
    events = payload.get("events") or []
    for event in events:
        if event.get("is_current"):
            return event.get("id")
    return None


def upcoming_events(payload: Mapping[str, Any], count: int) -> List[int]:
    """Ids of the next ``count`` unfinished events, in order."""

    ids = [event["id"] for event in payload.get("events") or [] if not event.get("finished") and "id" in event]
    return sorted(ids)[: max(0, count)]


def _get_json(client: httpx.Client, path: str) -> Any:
    response = client.get(path)
    response.raise_for_status()
    return response.json()


def fetch_game_data(
    *,
    base_url: str | None = None,
    client: httpx.Client | None = None,
    retries: int | None = None,
    retry_policy: Callable[[Callable[..., Any]], Callable[..., Any]] | None = None,
) -> GameData:
    """Fetch players and fixtures once; callers cache the result for the session."""

    policy = retry_policy or default_http_retry("FPL game data", retries)
    get_json = policy(_get_json)
    owns_client = client is None
    if client is None:
        client = httpx.Client(base_url=base_url or configured_base_url(), timeout=http_timeout())
    try:
        try:
            bootstrap = get_json(client, "/bootstrap-static/")
            fixtures_payload = get_json(client, "/fixtures/")
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamDataError(f"Unable to fetch game data: {exc}") from exc
    finally:
        if owns_client:
            client.close()

    players, skipped_players = players_from_bootstrap(bootstrap)
    fixtures, skipped_fixtures = fixtures_from_payload(fixtures_payload)
    logger.info("Fetched %s players and %s fixtures", len(players), len(fixtures))
    return GameData(
        players=players,
        fixtures=fixtures,
        current_event=current_event(bootstrap),
        skipped_players=skipped_players,
        skipped_fixtures=skipped_fixtures,
    )
