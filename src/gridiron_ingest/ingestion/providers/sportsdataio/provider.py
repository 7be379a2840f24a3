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
from gridiron_ingest.ingestion.providers.sportsdataio import parser


@dataclass
class SportsDataIoProvider:
    """SportsData.io NFL v3 feeds; auth header is attached by the http client."""

    http: BaseHttpClient
    provider_key: str = ProviderEnum.SPORTSDATAIO.value

    def fetch_teams(self) -> list[TeamRecord]:
        return parser.parse_teams(self.http.get_json_list("scores/json/Teams"))

    def fetch_players(self, team_abbreviation: str) -> list[PlayerRecord]:
        team = team_abbreviation.strip().upper()
        items = self.http.get_json_list(f"scores/json/Players/{team}")
        return parser.parse_players(items, team_abbreviation=team)

    def fetch_schedule(self, season: int, week: int) -> list[GameRecord]:
        items = self.http.get_json_list(f"scores/json/ScoresByWeek/{season}/{week}")
        return parser.parse_scores(items, season=season, week=week)

    def fetch_box_score(
        self,
        provider_game_id: str,
        *,
        season: int | None = None,
        week: int | None = None,
    ) -> list[PlayerStatRecord]:
        if season is None or week is None:
            raise ProviderCapabilityError(
                "SportsData.io box scores are fetched by week; season and week are required"
            )
        items = self.http.get_json_list(f"stats/json/PlayerGameStatsByWeek/{season}/{week}")
        return parser.parse_player_game_stats(items, provider_game_id=provider_game_id)

    def close(self) -> None:
        self.http.close()
