from pathlib import Path

import pytest
from pydantic import ValidationError

from fplsquad.ingest import (
    discover_season_files,
    load_historical_csv,
    load_historical_seasons,
    parse_historical_csv,
    season_from_filename,
)
from fplsquad.models import (
    HistoricalMatch,
    HistoricalSeason,
    HistoryIndex,
    find_historical_matches,
    normalize_player_name,
)


def _season_csv() -> str:
    return """name,element,opponent_team,total_points,goals_scored,assists,clean_sheets,was_home,GW,minutes
Bukayo Saka,7,3,8,1,0,0,True,1,90
"Son, Heung-Min",11,4,2,0,0,0,False,1,75
Bukayo Saka,7,5,0,0,0,0,False,2,0
Bukayo Saka,7,6,not-a-number,0,0,0,True,3,90
Bukayo Saka,7,8,5,0,1,1,1,4,88
"""


def _season(label, rows) -> HistoricalSeason:
    header = "name,element,opponent_team,total_points,goals_scored,assists,clean_sheets,was_home,GW,minutes\n"
    return HistoricalSeason(season=label, matches=tuple(parse_historical_csv(header + rows, label)))


def test_parse_historical_csv_keeps_played_rows():
    matches = parse_historical_csv(_season_csv(), "2022/23")

    assert [m.player_name for m in matches] == ["Bukayo Saka", "Son, Heung-Min", "Bukayo Saka"]
    first = matches[0]
    assert first.season == "2022/23"
    assert first.total_points == pytest.approx(8.0)
    assert first.was_home is True
    assert first.gameweek == 1
    assert matches[2].was_home is True
    assert matches[2].clean_sheets == pytest.approx(1.0)


def test_parse_historical_csv_matches_headers_case_insensitively():
    text = "NAME,Total_Points,Minutes,gw\nDeclan Rice,6,90,2\n"
    matches = parse_historical_csv(text, "2021/22")

    assert len(matches) == 1
    assert matches[0].total_points == pytest.approx(6.0)
    assert matches[0].gameweek == 2


@pytest.mark.parametrize(
    "row",
    [
        "Declan Rice,41,3,6,0,0,0,True,inf,90",
        "Declan Rice,41,3,6,0,0,0,True,-inf,90",
        "Declan Rice,41,3,nan,0,0,0,True,2,90",
        "Declan Rice,41,3,inf,0,0,0,True,2,90",
        "Declan Rice,41,3,6,0,0,0,True,2,NaN",
    ],
)
def test_parse_historical_csv_skips_non_finite_rows(row):
    header = "name,element,opponent_team,total_points,goals_scored,assists,clean_sheets,was_home,GW,minutes\n"
    text = header + "Declan Rice,41,3,6,0,0,0,True,1,90\n" + row + "\n"

    matches = parse_historical_csv(text, "2022/23")

    assert len(matches) == 1
    assert matches[0].gameweek == 1


def test_historical_match_rejects_non_finite_points():
    with pytest.raises(ValidationError):
        HistoricalMatch(season="2022/23", player_name="X", total_points=float("nan"), minutes=90)


def test_parse_historical_csv_without_name_column_returns_nothing():
    assert parse_historical_csv("player,total_points,minutes\nX,3,90\n", "2021/22") == []
    assert parse_historical_csv("", "2021/22") == []


def test_season_from_filename():
    assert season_from_filename(Path("2021-22_gw.csv")) == "2021/22"
    assert season_from_filename(Path("data/2019_20_merged_gw.csv")) == "2019/20"
    assert season_from_filename(Path("custom.csv")) == "custom"


def test_load_historical_seasons_skips_missing_files(tmp_path):
    good = tmp_path / "2022-23_gw.csv"
    good.write_text(_season_csv(), encoding="utf-8")

    seasons = load_historical_seasons([good, tmp_path / "2020-21_gw.csv"])

    assert len(seasons) == 1
    assert seasons[0].season == "2022/23"
    assert len(seasons[0].matches) == 3


def test_load_historical_csv_accepts_explicit_season(tmp_path):
    path = tmp_path / "history.csv"
    path.write_text(_season_csv(), encoding="utf-8")

    season = load_historical_csv(path, season="2018/19")

    assert season.season == "2018/19"
    assert all(match.season == "2018/19" for match in season.matches)


def test_discover_season_files_sorted(tmp_path):
    for name in ("2022-23_gw.csv", "2020-21_gw.csv", "notes.csv"):
        (tmp_path / name).write_text("name\n", encoding="utf-8")

    assert [p.name for p in discover_season_files(tmp_path)] == ["2020-21_gw.csv", "2022-23_gw.csv"]


def test_normalize_player_name():
    assert normalize_player_name("  Heung-Min   SON ") == "heungmin son"
    assert normalize_player_name("Bruno B.Fernandes") == "bruno bfernandes"


def test_normalization_is_lossy_for_accented_names():
    # Accented letters are dropped, not transliterated.
    assert normalize_player_name("Ødegaard") == "degaard"
    assert normalize_player_name("Odegaard") != normalize_player_name("Ødegaard")


def test_history_index_joins_across_seasons():
    first = _season("2021/22", "Bukayo Saka,7,3,4,0,0,0,True,1,90\n")
    second = _season("2022/23", "bukayo  SAKA,7,3,6,0,0,0,True,1,90\n")

    index = HistoryIndex.from_seasons([first, second])

    assert len(index) == 1
    assert [m.total_points for m in index.matches_for("Bukayo Saka")] == [4.0, 6.0]
    assert index.matches_for("Gabriel Jesus") == ()
    assert len(find_historical_matches("BUKAYO SAKA", [first, second])) == 2
