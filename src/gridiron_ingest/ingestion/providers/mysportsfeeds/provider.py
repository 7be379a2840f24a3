from __future__ import annotations

from dataclasses import dataclass

from gridiron_ingest.db.enums import ProviderEnum
from gridiron_ingest.ingestion.providers.base.client import BaseHttpClient
from gridiron_ingest.ingestion.providers.base.errors import ProviderCapabilityError
from gridiron_ingest.ingestion.providers.base.types import (
    GameRecord,
    PlayerRecord,
    PlayerStatRecord,
    TeamRecord,
)
from gridiron_ingest.ingestion.providers.mysportsfeeds import parser

CURRENT_SEASON = "current"


def season_slug(season: int) -> str:
    return f"{season}-regular"


@dataclass
class MySportsFeedsProvider:
    """MySportsFeeds v2.1 pull API; Basic auth is attached by the http client."""

    http: BaseHttpClient
    provider_key: str = ProviderEnum.MYSPORTSFEEDS.value

    def fetch_teams(self) -> list[TeamRecord]:
        return parser.parse_teams(self.http.get_json(f"{CURRENT_SEASON}/teams.json"))

    def fetch_players(self, team_abbreviation: str) -> list[PlayerRecord]:
        team = team_abbreviation.strip().upper()
        payload = self.http.get_json(
            "players.json", params={"team": team.lower(), "season": CURRENT_SEASON}
        )
        return parser.parse_players(payload, team_abbreviation=team)

    def fetch_schedule(self, season: int, week: int) -> list[GameRecord]:
        payload = self.http.get_json(f"{season_slug(season)}/games.json", params={"week": week})
        return parser.parse_games(payload, season=season, week=week)

    def fetch_box_score(
        self,
        provider_game_id: str,
        *,
        season: int | None = None,
        week: int | None = None,
    ) -> list[PlayerStatRecord]:
        if season is None or week is None:
            raise ProviderCapabilityError(
                "MySportsFeeds gamelogs are fetched by week; season and week are required"
            )
        payload = self.http.get_json(f"{season_slug(season)}/week/{week}/player_gamelogs.json")
        return parser.parse_gamelogs(payload, provider_game_id=provider_game_id)

    def close(self) -> None:
        self.http.close()
