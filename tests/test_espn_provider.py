from __future__ import annotations

import httpx
import pytest

from gridiron_ingest.ingestion.providers.base.client import BaseHttpClient
from gridiron_ingest.ingestion.providers.base.errors import (
    MalformedPayloadError,
    ProviderCapabilityError,
)
from gridiron_ingest.ingestion.providers.base.rate_limiter import RateLimiter
from gridiron_ingest.ingestion.providers.espn import parser
from gridiron_ingest.ingestion.providers.espn.mappings import to_espn_id, to_nfl_abbreviation
from gridiron_ingest.ingestion.providers.espn.provider import EspnProvider

BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

TEAMS = {
    "sports": [
        {
            "leagues": [
                {
                    "teams": [
                        {
                            "team": {
                                "id": "12",
                                "abbreviation": "KC",
                                "displayName": "Kansas City Chiefs",
                                "location": "Kansas City",
                            }
                        },
                        {
                            "team": {
                                "id": "28",
                                "abbreviation": "WSH",
                                "displayName": "Washington Commanders",
                                "location": "Washington",
                            }
                        },
                    ]
                }
            ]
        }
    ]
}

ROSTER = {
    "athletes": [
        {
            "position": "offense",
            "items": [
                {
                    "id": "3139477",
                    "displayName": "Patrick Mahomes",
                    "jersey": "15",
                    "position": {"abbreviation": "QB"},
                    "height": 74,
                    "weight": 225,
                    "college": {"name": "Texas Tech"},
                }
            ],
        }
    ]
}

SCOREBOARD = {
    "events": [
        {
            "id": "401671789",
            "date": "2024-09-06T00:20Z",
            "season": {"year": 2024, "type": 2},
            "week": {"number": 1},
            "competitions": [
                {
                    "competitors": [
                        {
                            "homeAway": "home",
                            "team": {"id": "12", "abbreviation": "KC"},
                            "score": "27",
                        },
                        {
                            "homeAway": "away",
                            "team": {"id": "33", "abbreviation": "BAL"},
                            "score": "20",
                        },
                    ],
                    "status": {"type": {"completed": True}},
                }
            ],
        }
    ]
}

SUMMARY = {
    "boxscore": {
        "players": [
            {
                "team": {"id": "12", "abbreviation": "KC"},
                "statistics": [
                    {
                        "name": "passing",
                        "labels": ["C/ATT", "YDS", "AVG", "TD", "INT"],
                        "athletes": [
                            {
                                "athlete": {"id": "3139477", "displayName": "Patrick Mahomes"},
                                "stats": ["20/28", "291", "10.4", "1", "1"],
                            }
                        ],
                    },
                    {
                        "name": "rushing",
                        "labels": ["CAR", "YDS", "AVG", "TD", "LONG"],
                        "athletes": [
                            {
                                "athlete": {"id": "3139477", "displayName": "Patrick Mahomes"},
                                "stats": ["2", "3", "1.5", "0", "2"],
                            },
                            {
                                "athlete": {"id": "4242335", "displayName": "Isiah Pacheco"},
                                "stats": ["15", "45", "3.0", "1", "9"],
                            },
                        ],
                    },
                    {
                        "name": "receiving",
                        "labels": ["REC", "YDS", "AVG", "TD", "LONG", "TGTS"],
                        "athletes": [
                            {
                                "athlete": {"id": "15847", "displayName": "Travis Kelce"},
                                "stats": ["3", "34", "11.3", "0", "16", "5"],
                            }
                        ],
                    },
                    {
                        "name": "kicking",
                        "labels": ["FG", "PCT"],
                        "athletes": [
                            {
                                "athlete": {"id": "15683", "displayName": "Harrison Butker"},
                                "stats": ["2/2", "100.0"],
                            }
                        ],
                    },
                ],
            },
            {
                "team": {"id": "33", "abbreviation": "BAL"},
                "statistics": [
                    {
                        "name": "passing",
                        "keys": [
                            "completions/passingAttempts",
                            "passingYards",
                            "passingTouchdowns",
                            "interceptions",
                        ],
                        "athletes": [
                            {
                                "athlete": {"id": "3916387", "displayName": "Lamar Jackson"},
                                "stats": ["26/41", "273", "1", "0"],
                            }
                        ],
                    }
                ],
            },
        ]
    }
}


def _provider(requests: list[httpx.Request]) -> EspnProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path.endswith("/teams"):
            return httpx.Response(200, json=TEAMS)
        if path.endswith("/teams/12/roster"):
            return httpx.Response(200, json=ROSTER)
        if path.endswith("/scoreboard"):
            return httpx.Response(200, json=SCOREBOARD)
        if path.endswith("/summary"):
            return httpx.Response(200, json=SUMMARY)
        return httpx.Response(404)

    http = BaseHttpClient(
        base_url=BASE_URL,
        provider_key="espn",
        rate_limiter=RateLimiter(default_delay_ms=0),
        transport=httpx.MockTransport(handler),
    )
    return EspnProvider(http=http)


def test_espn_team_ids_map_to_nfl_abbreviations() -> None:
    assert to_nfl_abbreviation("12") == "KC"
    assert to_nfl_abbreviation(28, "WSH") == "WAS"
    assert to_nfl_abbreviation("99", "xyz") == "XYZ"
    assert to_espn_id("bal") == "33"
    assert to_espn_id("XYZ") is None


def test_fetch_teams_resolves_espn_ids() -> None:
    requests: list[httpx.Request] = []
    teams = _provider(requests).fetch_teams()

    assert [(t.abbreviation, t.name, t.city) for t in teams] == [
        ("KC", "Kansas City Chiefs", "Kansas City"),
        ("WAS", "Washington Commanders", "Washington"),
    ]
    assert teams[0].provider == "espn"
    assert teams[0].provider_team_id == "12"


def test_fetch_players_uses_espn_team_id() -> None:
    requests: list[httpx.Request] = []
    players = _provider(requests).fetch_players("kc")

    assert requests[0].url.path.endswith("/teams/12/roster")
    assert len(players) == 1
    mahomes = players[0]
    assert mahomes.provider_player_id == "3139477"
    assert mahomes.team_abbreviation == "KC"
    assert mahomes.position == "QB"
    assert mahomes.jersey == "15"
    assert mahomes.height == 74
    assert mahomes.college == "Texas Tech"


def test_fetch_players_rejects_unknown_team() -> None:
    with pytest.raises(ProviderCapabilityError):
        _provider([]).fetch_players("XYZ")


def test_fetch_schedule_requests_regular_season_week() -> None:
    requests: list[httpx.Request] = []
    games = _provider(requests).fetch_schedule(2024, 1)

    params = requests[0].url.params
    assert (params["dates"], params["week"], params["seasontype"]) == ("2024", "1", "2")

    assert len(games) == 1
    game = games[0]
    assert game.provider_game_id == "401671789"
    assert (game.season, game.week) == (2024, 1)
    assert (game.home_team_abbreviation, game.away_team_abbreviation) == ("KC", "BAL")
    assert (game.home_score, game.away_score) == ("27", "20")
    assert game.completed is True
    assert game.date == "2024-09-06T00:20Z"


def test_fetch_box_score_merges_categories_per_athlete() -> None:
    requests: list[httpx.Request] = []
    lines = _provider(requests).fetch_box_score("401671789")

    assert requests[0].url.params["event"] == "401671789"
    assert [(r.player_name, r.team_abbreviation) for r in lines] == [
        ("Patrick Mahomes", "KC"),
        ("Isiah Pacheco", "KC"),
        ("Travis Kelce", "KC"),
        ("Lamar Jackson", "BAL"),
    ]

    mahomes = lines[0].stats
    assert mahomes["pass_completions"] == "20"
    assert mahomes["pass_attempts"] == "28"
    assert mahomes["pass_yards"] == "291"
    assert mahomes["pass_touchdowns"] == "1"
    assert mahomes["interceptions"] == "1"
    assert mahomes["rush_attempts"] == "2"
    assert mahomes["rush_yards"] == "3"

    assert lines[2].stats == {
        "receptions": "3",
        "receiving_yards": "34",
        "receiving_touchdowns": "0",
    }

    jackson = lines[3].stats
    assert (jackson["pass_completions"], jackson["pass_attempts"]) == ("26", "41")
    assert jackson["pass_yards"] == "273"
    assert all(r.provider_game_id == "401671789" for r in lines)


def test_scoreboard_event_that_cannot_be_read_becomes_unusable_record() -> None:
    payload = {
        "events": [
            {"competitions": []},
            {"id": "2", "competitions": []},
            {"id": "3", "competitions": [{"competitors": [{"homeAway": "home"}]}]},
        ]
    }

    games = parser.parse_scoreboard(payload, season=2024, week=1)

    assert [(g.provider_game_id, g.invalid_reason) for g in games] == [
        ("", "ESPN event without id"),
        ("2", "ESPN event 2 without competitions"),
        ("3", "ESPN event 3 missing home/away competitor"),
    ]
    assert all((g.season, g.week) == (2024, 1) for g in games)


@pytest.mark.parametrize(
    "call",
    [
        lambda: parser.parse_scoreboard({"leagues": []}, season=2024, week=1),
        lambda: parser.parse_teams({"sports": {}}),
        lambda: parser.parse_roster({}, team_abbreviation="KC"),
        lambda: parser.parse_box_score({"header": {}}, provider_game_id="1"),
    ],
)
def test_payload_of_the_wrong_shape_is_a_permanent_fetch_error(call) -> None:
    with pytest.raises(MalformedPayloadError) as excinfo:
        call()

    assert excinfo.value.transient is False
    assert excinfo.value.responded is True
