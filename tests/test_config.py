from pathlib import Path

import pytest

from fplsquad.config import (
    FPL_RULES,
    base_url,
    env_float,
    env_int,
    get_rules,
    history_dir,
    http_retries,
    http_timeout,
    iter_rules,
)
from fplsquad.config_loader import StrategyProfile
from fplsquad.models import Position


def test_get_rules_handles_lowercase_key():
    rules = get_rules("fpl")
    assert rules is FPL_RULES
    assert rules.squad_size == 15
    assert rules.bench_size == 4
    assert rules.outfield_starters == 10
    assert sum(rules.quotas.values()) == rules.squad_size
    assert rules.quotas[Position.GOALKEEPER] == 2


def test_get_rules_missing_raises():
    with pytest.raises(KeyError):
        get_rules("DRAFT")


def test_iter_rules_lists_fpl():
    assert [rules.game for rules in iter_rules()] == ["FPL"]


def test_starter_minimums_checked_defenders_first():
    assert list(FPL_RULES.starter_minimums.items()) == [(Position.DEFENDER, 3), (Position.FORWARD, 1)]


def test_env_helpers_fall_back_on_invalid_values(monkeypatch):
    monkeypatch.setenv("FPLSQUAD_TEST_INT", "many")
    monkeypatch.setenv("FPLSQUAD_TEST_FLOAT", "0.1")

    assert env_int("FPLSQUAD_TEST_INT", 4) == 4
    assert env_float("FPLSQUAD_TEST_FLOAT", 1.0, clamp_min=0.5) == 0.5
    assert env_int("FPLSQUAD_TEST_UNSET", 9) == 9


def test_http_settings_read_environment(monkeypatch):
    monkeypatch.setenv("FPLSQUAD_BASE_URL", "http://mirror.local/api/")
    monkeypatch.setenv("FPLSQUAD_HTTP_RETRIES", "-3")
    monkeypatch.setenv("FPLSQUAD_HTTP_TIMEOUT", "5")

    assert base_url() == "http://mirror.local/api"
    assert http_retries() == 0
    assert http_timeout() == 5.0


def test_http_settings_defaults(monkeypatch):
    for name in ("FPLSQUAD_BASE_URL", "FPLSQUAD_HTTP_RETRIES", "FPLSQUAD_HTTP_TIMEOUT", "FPLSQUAD_HISTORY_DIR"):
        monkeypatch.delenv(name, raising=False)

    assert base_url() == "https://fantasy.premierleague.com/api"
    assert http_retries() == 2
    assert http_timeout() == 20.0
    assert history_dir() is None


def test_history_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("FPLSQUAD_HISTORY_DIR", str(tmp_path))
    assert history_dir() == Path(tmp_path)


def test_strategy_profile_round_trip(tmp_path):
    path = tmp_path / "profile.json"
    StrategyProfile(time_horizon=0.5, risk_tolerance=-0.25, budget=995, horizon=3).save(path)

    loaded = StrategyProfile.load(path)

    assert loaded.budget == 995
    assert loaded.horizon == 3
    assert loaded.strategy.time_horizon == pytest.approx(0.5)
    assert loaded.strategy.risk_tolerance == pytest.approx(-0.25)


def test_strategy_profile_rejects_out_of_range_dials(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text('{"time_horizon": 3}', encoding="utf-8")

    with pytest.raises(ValueError):
        StrategyProfile.load(path)
