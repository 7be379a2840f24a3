from __future__ import annotations

from datetime import UTC, datetime

import pytest

from gridiron_ingest.ingestion.errors import UnknownTeamError
from gridiron_ingest.ingestion.mapper import (
    map_game,
    map_player,
    map_player_stats,
    map_team,
    normalize_height,
    parse_count,
    parse_optional_int,
    parse_score,
)
from gridiron_ingest.ingestion.providers.base.errors import ProviderMappingError
from gridiron_ingest.ingestion.providers.base.types import (
    GameRecord,
    PlayerRecord,
    PlayerStatRecord,
    TeamRecord,
)


def _game(**overrides) -> GameRecord:
    fields = dict(
        provider="espn",
        provider_game_id="401671789",
        season=2024,
        week=1,
        date="2024-09-06T00:20Z",
        home_team_abbreviation="KC",
        away_team_abbreviation="BAL",
        home_score="27",
        away_score="20",
        completed=True,
    )
    fields.update(overrides)
    return GameRecord(**fields)


def _stat_line(team: str | None = "KC", **stats) -> PlayerStatRecord:
    return PlayerStatRecord(
        provider="espn",
        provider_game_id="401671789",
        provider_player_id="3139477",
        player_name="Patrick  Mahomes",
        team_abbreviation=team,
        stats=stats,
    )


def test_map_team_takes_conference_and_division_from_reference_table() -> None:
    team = map_team(
        TeamRecord(
            provider="espn",
            provider_team_id="28",
            abbreviation="WSH",
            name="Washington Commanders",
        )
    )

    assert team.abbreviation == "WAS"
    assert (team.conference, team.division) == ("NFC", "East")
    assert team.city == "Washington"


def test_map_team_rejects_unknown_abbreviation() -> None:
    with pytest.raises(UnknownTeamError):
        map_team(TeamRecord(provider="x", provider_team_id="1", abbreviation="XYZ", name="X"))


def test_map_player_normalizes_roster_attributes() -> None:
    player = map_player(
        PlayerRecord(
            provider="espn",
            provider_player_id="3139477",
            name=" Patrick   Mahomes ",
            team_abbreviation="kc",
            position="qb",
            jersey="15",
            height=74,
            weight="225 lbs",
            college="Texas Tech",
        )
    )

    assert player.name == "Patrick Mahomes"
    assert player.team_abbreviation == "KC"
    assert player.position == "QB"
    assert player.jersey_number == 15
    assert player.height == "6-2"
    assert player.weight == 225
    assert (player.provider, player.external_id) == ("espn", "3139477")


def test_map_player_without_team_is_a_free_agent() -> None:
    player = map_player(
        PlayerRecord(
            provider="espn",
            provider_player_id=None,
            name="Free Agent",
            team_abbreviation="",
        )
    )

    assert player.team_abbreviation is None
    assert player.provider is None
    assert player.external_id is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (74, "6-2"),
        ("72", "6-0"),
        ("6'2\"", "6-2"),
        ("6' 11\"", "6-11"),
        ("6-3", "6-3"),
        ("", None),
    ],
)
def test_normalize_height(raw, expected) -> None:
    assert normalize_height(raw) == expected


def test_map_game_parses_scores_and_utc_kickoff() -> None:
    game = map_game(_game())

    assert game.home_team_abbreviation == "KC"
    assert game.away_team_abbreviation == "BAL"
    assert (game.home_score, game.away_score) == (27, 20)
    assert game.game_date == datetime(2024, 9, 6, 0, 20, tzinfo=UTC)
    assert game.completed is True


def test_map_game_blank_scores_mean_not_played() -> None:
    game = map_game(_game(home_score="", away_score=None, completed=None))

    assert game.home_score is None
    assert game.away_score is None
    assert game.completed is False


def test_map_game_drops_running_scores_of_unfinished_games() -> None:
    game = map_game(_game(home_score="7", away_score="3", completed=False))

    assert (game.home_score, game.away_score) == (None, None)


def test_map_game_unknown_team_and_bad_date() -> None:
    with pytest.raises(UnknownTeamError):
        map_game(_game(away_team_abbreviation="XYZ"))

    with pytest.raises(ProviderMappingError):
        map_game(_game(date="next sunday"))


def test_map_game_leaves_same_team_check_to_reconciliation() -> None:
    game = map_game(_game(away_team_abbreviation="KC"))

    assert game.home_team_abbreviation == game.away_team_abbreviation == "KC"


def test_map_player_stats_counts_default_to_zero() -> None:
    entity = map_player_stats(
        _stat_line(pass_completions="20", pass_attempts="28", pass_yards="291", rush_yards="--")
    )

    assert entity.player.name == "Patrick Mahomes"
    assert entity.player.team_abbreviation == "KC"
    assert entity.counters["pass_completions"] == 20
    assert entity.counters["pass_attempts"] == 28
    assert entity.counters["pass_yards"] == 291
    assert entity.counters["rush_yards"] == 0
    assert entity.counters["receptions"] == 0
    assert len(entity.counters) == 11


def test_map_player_stats_allows_negative_yards_only() -> None:
    entity = map_player_stats(_stat_line(rush_attempts="3", rush_yards="-4"))
    assert entity.counters["rush_yards"] == -4

    with pytest.raises(ProviderMappingError):
        map_player_stats(_stat_line(rush_attempts="-1"))


def test_map_player_stats_requires_known_team() -> None:
    with pytest.raises(UnknownTeamError):
        map_player_stats(_stat_line(team="XYZ"))
    with pytest.raises(UnknownTeamError):
        map_player_stats(_stat_line(team=None))


def test_mapping_is_deterministic() -> None:
    record = _stat_line(pass_yards="100")

    assert map_player_stats(record) == map_player_stats(record)
    assert map_game(_game()) == map_game(_game())


def test_parse_count_accepts_float_strings() -> None:
    assert parse_count("12.0", counter="receptions") == 12
    assert parse_count(None, counter="receptions") == 0
    assert parse_count("  ", counter="receptions") == 0


def test_non_finite_numbers_do_not_escape_as_overflow() -> None:
    assert parse_count("inf", counter="receptions") == 0
    assert parse_count(float("-inf"), counter="rush_yards") == 0
    assert parse_optional_int(float("inf")) is None
    assert parse_optional_int(float("nan")) is None

    with pytest.raises(ProviderMappingError):
        parse_score("inf")
    with pytest.raises(ProviderMappingError):
        parse_score("nan")


def test_map_game_rejects_unusable_record() -> None:
    record = GameRecord.unusable(
        "espn", "2", season=2024, week=1, reason="ESPN event 2 without competitions"
    )

    with pytest.raises(ProviderMappingError) as excinfo:
        map_game(record)

    assert excinfo.value.message == "ESPN event 2 without competitions"
    assert excinfo.value.context == {"id": "2"}
