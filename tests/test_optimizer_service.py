from collections import Counter

import pytest
from pydantic import ValidationError

from fplsquad.config import FPL_RULES
from fplsquad.estimator import score_players
from fplsquad.models import Fixture, Player, Position
from fplsquad.optimizer import (
    SquadOptimizationError,
    SquadSettings,
    optimize,
    pick_lineup,
    split_lineup,
    validate_squad,
)
from fplsquad.optimizer.service import _SelectionState, _by_position, _rank, _reconcile_budget


def _player(player_id: int, position: Position, team: int, price: int, value: float, **extra) -> Player:
    return Player(
        player_id=player_id,
        name=f"Player {player_id}",
        team=team,
        position=position,
        price=price,
        points_per_game=value,
        form=value,
        minutes=extra.pop("minutes", 1200),
        **extra,
    )


def _home_fixtures(players) -> list[Fixture]:
    # One neutral home fixture per team, so every projection is value * 1.05.
    teams = sorted({p.team for p in players})
    return [Fixture(event=1, team_h=team, team_a=1000 + team) for team in teams]


def _sample_pool() -> list[Player]:
    players = []
    specs = [
        (Position.GOALKEEPER, 5, 40),
        (Position.DEFENDER, 12, 40),
        (Position.MIDFIELDER, 13, 50),
        (Position.FORWARD, 10, 55),
    ]
    player_id = 1
    for position, count, base_price in specs:
        for i in range(count):
            value = 2.0 + (i * 7 % count) * 0.5 + 0.01 * i
            price = base_price + 5 * (i % 6)
            players.append(_player(player_id, position, player_id % 8 + 1, price, value))
            player_id += 1
    return players


def _optimize(players, **settings):
    return optimize(players, _home_fixtures(players), SquadSettings(**settings))


def test_optimize_builds_complete_valid_squad():
    squad = _optimize(_sample_pool())

    assert len(squad.players) == 15
    assert len(squad.starters) == 11
    assert len(squad.bench) == 4
    assert Counter(sp.position for sp in squad.players) == {
        Position.GOALKEEPER: 2,
        Position.DEFENDER: 5,
        Position.MIDFIELDER: 5,
        Position.FORWARD: 3,
    }
    assert max(Counter(sp.team for sp in squad.players).values()) <= 3
    assert squad.total_cost <= 1000
    assert squad.total_cost == sum(sp.price for sp in squad.players)
    assert squad.starters[0].position is Position.GOALKEEPER
    assert squad.bench[0].position is Position.GOALKEEPER
    assert sum(1 for sp in squad.starters if sp.position is Position.GOALKEEPER) == 1
    assert squad.warnings == ()


def test_total_counts_captain_twice():
    squad = _optimize(_sample_pool())

    starters_total = sum(sp.projected_points for sp in squad.starters)
    assert squad.total_expected_points == pytest.approx(starters_total + squad.captain.projected_points)


def test_captain_and_vice_are_top_starters():
    squad = _optimize(_sample_pool())

    ranked = sorted(squad.starters, key=lambda sp: sp.projected_points, reverse=True)
    assert squad.captain.player_id == ranked[0].player_id
    assert squad.vice_captain.player_id == ranked[1].player_id
    assert squad.captain.player_id != squad.vice_captain.player_id


def test_formation_meets_minimums():
    squad = _optimize(_sample_pool())

    defenders, midfielders, forwards = (int(part) for part in squad.formation.split("-"))
    assert defenders >= 3
    assert forwards >= 1
    assert defenders + midfielders + forwards == 10


def test_optimize_is_deterministic():
    first = _optimize(_sample_pool())
    second = _optimize(_sample_pool())

    assert first.player_ids == second.player_ids
    assert first.captain.player_id == second.captain.player_id


def test_excluded_players_never_selected():
    pool = _sample_pool()
    baseline = _optimize(pool)
    excluded = baseline.captain.player_id

    squad = _optimize(pool, excluded_ids={excluded})

    assert excluded not in squad.player_ids


def test_forced_player_selected_even_without_projection():
    pool = _sample_pool() + [
        _player(99, Position.DEFENDER, 20, 40, 5.0, chance_of_playing=0),
    ]

    squad = _optimize(pool, forced_ids={99})

    assert 99 in squad.player_ids
    assert squad.warnings == ()


def test_team_cap_limits_stacked_club():
    pool = _sample_pool() + [
        _player(200 + i, Position.MIDFIELDER, 42, 50, 20.0 - i) for i in range(5)
    ]

    squad = _optimize(pool)

    assert sum(1 for sp in squad.players if sp.team == 42) == 3


def test_settings_validation():
    with pytest.raises(ValidationError):
        SquadSettings(budget=-1)
    with pytest.raises(ValidationError):
        SquadSettings(horizon=0)


def test_empty_pool_raises():
    with pytest.raises(SquadOptimizationError):
        optimize([], [], SquadSettings())


def test_infeasible_pool_returns_best_effort_with_warnings():
    pool = [
        _player(1, Position.GOALKEEPER, 1, 40, 4.0),
        _player(2, Position.GOALKEEPER, 2, 40, 3.0),
        _player(3, Position.DEFENDER, 3, 40, 5.0),
        _player(4, Position.DEFENDER, 4, 40, 4.5),
    ]

    squad = _optimize(pool)

    assert len(squad.players) == 4
    assert any("4 players" in warning for warning in squad.warnings)
    assert any("DEF" in warning for warning in squad.warnings)
    assert squad.captain.player_id == 3


def _repair_pool() -> list[Player]:
    players = [
        _player(1, Position.GOALKEEPER, 1, 50, 5.0),
        _player(2, Position.GOALKEEPER, 2, 45, 4.0),
    ]
    players += [_player(10 + i, Position.DEFENDER, 10 + i, 45, 4.0) for i in range(5)]
    players.append(_player(20, Position.MIDFIELDER, 20, 100, 9.0))
    players += [_player(21 + i, Position.MIDFIELDER, 21 + i, 60, 6.0) for i in range(4)]
    players.append(_player(25, Position.MIDFIELDER, 25, 70, 5.0))
    players += [
        _player(30, Position.FORWARD, 30, 90, 8.0),
        _player(31, Position.FORWARD, 31, 80, 7.0),
        _player(32, Position.FORWARD, 32, 50, 3.0),
        _player(33, Position.FORWARD, 33, 45, 2.0),
    ]
    return players


def test_repair_frees_budget_for_unfilled_slot():
    squad = _optimize(_repair_pool(), budget=870, reserve_budget=False)

    ids = set(squad.player_ids)
    assert len(ids) == 15
    assert 20 not in ids
    assert {25, 32}.issubset(ids)
    assert squad.total_cost == 850
    assert squad.formation == "3-5-2"
    assert squad.captain.player_id == 30
    assert squad.vice_captain.player_id == 31
    assert squad.warnings == ()


def test_reserved_budget_avoids_repair():
    squad = _optimize(_repair_pool(), budget=870)

    assert len(squad.players) == 15
    assert squad.total_cost <= 870
    assert squad.warnings == ()


def _scored(players):
    return score_players(players, _home_fixtures(players), 1)


def test_reconcile_swaps_expensive_low_value_player():
    players = [
        _player(1, Position.MIDFIELDER, 1, 60, 10.0),
        _player(2, Position.MIDFIELDER, 2, 50, 2.0),
        _player(3, Position.MIDFIELDER, 3, 30, 1.0),
        _player(4, Position.MIDFIELDER, 4, 40, 1.5),
    ]
    scored = _scored(players)
    by_position = _by_position(_rank(scored))
    state = _SelectionState(FPL_RULES, 100)
    state.add(scored[0])
    state.add(scored[1])

    _reconcile_budget(state, by_position, frozenset())

    assert sorted(state.selected_ids) == [2, 3]
    assert state.cost == 80


def test_reconcile_leaves_forced_players():
    players = [
        _player(1, Position.MIDFIELDER, 1, 60, 10.0),
        _player(2, Position.MIDFIELDER, 2, 50, 2.0),
        _player(3, Position.MIDFIELDER, 3, 30, 1.0),
    ]
    scored = _scored(players)
    by_position = _by_position(_rank(scored))
    state = _SelectionState(FPL_RULES, 100)
    state.add(scored[0])
    state.add(scored[1])

    _reconcile_budget(state, by_position, frozenset({1}))

    assert sorted(state.selected_ids) == [1, 3]
    assert state.cost == 90


def _lineup_players(def_values, mid_values, fwd_values) -> list[Player]:
    players = [
        _player(1, Position.GOALKEEPER, 1, 45, 4.0),
        _player(2, Position.GOALKEEPER, 2, 40, 5.0),
    ]
    player_id = 10
    for position, values in (
        (Position.DEFENDER, def_values),
        (Position.MIDFIELDER, mid_values),
        (Position.FORWARD, fwd_values),
    ):
        for value in values:
            players.append(_player(player_id, position, player_id, 50, value))
            player_id += 1
    return players


def test_split_lineup_promotes_third_defender():
    players = _lineup_players([3.0, 2.5, 2.0, 1.5, 1.0], [8.0, 7.0, 6.0, 5.0, 4.5], [9.0, 8.5, 4.0])

    starters, bench = split_lineup(_scored(players))

    positions = Counter(sp.position for sp in starters)
    assert positions[Position.DEFENDER] == 3
    assert positions[Position.FORWARD] == 2
    assert starters[0].player_id == 2
    assert bench[0].player_id == 1
    # The weakest forward drops to the bench.
    assert 22 in {sp.player_id for sp in bench}


def test_split_lineup_promotes_forward():
    players = _lineup_players([5.0] * 5, [6.0] * 5, [1.0, 0.9, 0.8])

    starters, _ = split_lineup(_scored(players))

    positions = Counter(sp.position for sp in starters)
    assert positions[Position.FORWARD] == 1
    assert positions[Position.DEFENDER] == 4
    assert positions[Position.MIDFIELDER] == 5


def test_pick_lineup_for_existing_squad():
    players = _lineup_players([3.0, 2.5, 2.0, 1.5, 1.0], [8.0, 7.0, 6.0, 5.0, 4.5], [9.0, 8.5, 4.0])

    squad = pick_lineup(players, _home_fixtures(players))

    assert len(squad.starters) == 11
    assert squad.formation == "3-5-2"
    assert squad.captain.player.form == 9.0
    assert squad.vice_captain.player.form == 8.5
    assert squad.warnings == ()


def test_pick_lineup_needs_two_players():
    players = [_player(1, Position.GOALKEEPER, 1, 45, 4.0)]

    with pytest.raises(SquadOptimizationError):
        pick_lineup(players, _home_fixtures(players))


def test_validate_squad_reports_violations():
    players = _lineup_players([3.0, 2.5, 2.0, 1.5], [8.0, 7.0, 6.0, 5.0, 4.5], [9.0, 8.5, 4.0])
    squad = pick_lineup(players, _home_fixtures(players))

    problems = validate_squad(squad, SquadSettings(budget=100, forced_ids={500}, excluded_ids={10}))

    assert any("14 players" in problem for problem in problems)
    assert any("exceeds budget" in problem for problem in problems)
    assert "forced player 500 not selected" in problems
    assert "excluded player 10 selected" in problems
