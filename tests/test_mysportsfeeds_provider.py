from __future__ import annotations

import base64

import httpx
import pytest

from gridiron_ingest.core.config import ApiProviderSettings, Settings
from gridiron_ingest.ingestion.mapper import map_game, map_team
from gridiron_ingest.ingestion.providers.base.errors import (
    MalformedPayloadError,
    ProviderCapabilityError,
)
from gridiron_ingest.ingestion.providers.base.rate_limiter import RateLimiter
from gridiron_ingest.ingestion.providers.factory import default_registry
from gridiron_ingest.ingestion.providers.mysportsfeeds import parser
from gridiron_ingest.ingestion.providers.mysportsfeeds.provider import MySportsFeedsProvider

TEAMS = {
    "lastUpdatedOn": "2024-09-09T12:00:00.000Z",
    "teams": [
        {"team": {"id": 56, "abbreviation": "KC", "name": "Chiefs", "city": "Kansas City"}},
        {"team": {"id": 51, "abbreviation": "BAL", "name": "Ravens", "city": "Baltimore"}},
        {"team": {"id": 99, "abbreviation": "", "name": "Nobody"}},
    ],
}

PLAYERS = {
    "players": [
        {
            "player": {
                "id": 7549,
                "firstName": "Patrick",
                "lastName": "Mahomes",
                "primaryPosition": "QB",
                "jerseyNumber": 15,
                "height": "6'2\"",
                "weight": 225,
                "college": "Texas Tech",
                "currentTeam": {"id": 56, "abbreviation": "KC"},
            }
        },
        {
            # Unsigned: no current team.
            "player": {"id": 9001, "firstName": "Free", "lastName": "Agent", "currentTeam": None}
        },
        {"player": {"id": 9002, "firstName": " ", "lastName": ""}},
    ]
}

GAMES = {
    "games": [
        {
            "schedule": {
                "id": 131200,
                "week": 1,
                "startTime": "2024-09-06T00:20:00.000Z",
                "homeTeam": {"id": 56, "abbreviation": "KC"},
                "awayTeam": {"id": 51, "abbreviation": "BAL"},
                "playedStatus": "COMPLETED",
            },
            "score": {"homeScoreTotal": 27, "awayScoreTotal": 20},
        },
        {
            "schedule": {
                "id": 131201,
                "week": 1,
                "startTime": "2024-09-08T17:00:00.000Z",
                "homeTeam": {"abbreviation": "PHI"},
                "awayTeam": {"abbreviation": "GB"},
                "playedStatus": "UNPLAYED",
            },
            "score": {"homeScoreTotal": None, "awayScoreTotal": None},
        },
        {"schedule": {"id": 131202, "week": 1, "homeTeam": {"abbreviation": "SF"}}},
    ]
}

GAMELOGS = {
    "gamelogs": [
        {
            "game": {"id": 131200, "homeTeamAbbreviation": "KC", "awayTeamAbbreviation": "BAL"},
            "player": {"id": 7549, "firstName": "Patrick", "lastName": "Mahomes", "position": "QB"},
            "team": {"id": 56, "abbreviation": "KC"},
            "stats": {
                "passing": {
                    "passCompletions": 20,
                    "passAttempts": 28,
                    "passYards": 291,
                    "passTD": 1,
                    "passInt": 1,
                },
                "rushing": {"rushAttempts": 2, "rushYards": 3, "rushTD": 0},
            },
        },
        {
            # Active but no touches.
            "game": {"id": 131200},
            "player": {"id": 8000, "firstName": "Backup", "lastName": "Lineman"},
            "team": {"abbreviation": "KC"},
            "stats": {"passing": {"passAttempts": 0}, "receiving": {"receptions": 0}},
        },
        {
            "game": {"id": 131201},
            "player": {"id": 8001, "firstName": "Jalen", "lastName": "Hurts"},
            "team": {"abbreviation": "PHI"},
            "stats": {"rushing": {"rushAttempts": 13, "rushYards": 33, "rushTD": 2}},
        },
    ]
}


def _provider(requests: list[httpx.Request]) -> MySportsFeedsProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path.endswith("/current/teams.json"):
            return httpx.Response(200, json=TEAMS)
        if path.endswith("/players.json"):
            return httpx.Response(200, json=PLAYERS)
        if path.endswith("/2024-regular/games.json"):
            return httpx.Response(200, json=GAMES)
        if path.endswith("/2024-regular/week/1/player_gamelogs.json"):
            return httpx.Response(200, json=GAMELOGS)
        return httpx.Response(404)

    settings = Settings(
        _env_file=None,
        providers={"mysportsfeeds": ApiProviderSettings(api_key="token")},
    )
    registry = default_registry(
        settings, RateLimiter(default_delay_ms=0), transport=httpx.MockTransport(handler)
    )
    provider = registry.get("MySportsFeeds")
    assert isinstance(provider, MySportsFeedsProvider)
    return provider


def test_requests_use_basic_auth_with_fixed_password() -> None:
    requests: list[httpx.Request] = []
    _provider(requests).fetch_teams()

    request = requests[0]
    assert str(request.url) == "https://api.mysportsfeeds.com/v2.1/pull/nfl/current/teams.json"
    token = base64.b64encode(b"token:MYSPORTSFEEDS").decode()
    assert request.headers["Authorization"] == f"Basic {token}"


def test_fetch_teams_joins_city_and_nickname() -> None:
    teams = _provider([]).fetch_teams()

    assert [(t.abbreviation, t.name, t.city, t.provider_team_id) for t in teams] == [
        ("KC", "Kansas City Chiefs", "Kansas City", "56"),
        ("BAL", "Baltimore Ravens", "Baltimore", "51"),
    ]
    assert map_team(teams[0]).conference == "AFC"


def test_fetch_players_filters_by_team_and_joins_names() -> None:
    requests: list[httpx.Request] = []
    players = _provider(requests).fetch_players("KC")

    params = requests[0].url.params
    assert (params["team"], params["season"]) == ("kc", "current")
    assert [(p.name, p.team_abbreviation) for p in players] == [
        ("Patrick Mahomes", "KC"),
        ("Free Agent", "KC"),
    ]
    mahomes = players[0]
    assert mahomes.provider_player_id == "7549"
    assert mahomes.position == "QB"
    assert mahomes.jersey == 15
    assert mahomes.college == "Texas Tech"


def test_fetch_schedule_reads_scores_and_played_status() -> None:
    requests: list[httpx.Request] = []
    games = _provider(requests).fetch_schedule(2024, 1)

    assert requests[0].url.params["week"] == "1"
    assert [g.provider_game_id for g in games] == ["131200", "131201", "131202"]

    final, scheduled, broken = games
    assert (final.home_team_abbreviation, final.away_team_abbreviation) == ("KC", "BAL")
    assert (final.home_score, final.away_score) == (27, 20)
    assert final.completed is True
    assert map_game(final).home_score == 27

    assert scheduled.completed is False
    assert map_game(scheduled).home_score is None

    assert broken.invalid_reason == "MySportsFeeds game 131202 missing home/away team"


def test_fetch_box_score_filters_by_game_and_skips_empty_lines() -> None:
    lines = _provider([]).fetch_box_score("131200", season=2024, week=1)

    assert [(line.player_name, line.team_abbreviation) for line in lines] == [
        ("Patrick Mahomes", "KC")
    ]
    stats = lines[0].stats
    assert stats["pass_completions"] == 20
    assert stats["pass_attempts"] == 28
    assert stats["interceptions"] == 1
    assert stats["rush_yards"] == 3
    assert stats["receptions"] is None


def test_fetch_box_score_requires_season_and_week() -> None:
    with pytest.raises(ProviderCapabilityError):
        _provider([]).fetch_box_score("131200")


def test_payload_without_games_list_is_malformed() -> None:
    with pytest.raises(MalformedPayloadError, match="'games'"):
        parser.parse_games({"lastUpdatedOn": None}, season=2024, week=1)
