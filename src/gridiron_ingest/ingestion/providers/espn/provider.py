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
from gridiron_ingest.ingestion.providers.espn import parser
from gridiron_ingest.ingestion.providers.espn.mappings import to_espn_id

REGULAR_SEASON_TYPE = 2


@dataclass
class EspnProvider:
    """ESPN's public site API (no key required)."""

    http: BaseHttpClient
    provider_key: str = ProviderEnum.ESPN.value

    def fetch_teams(self) -> list[TeamRecord]:
        return parser.parse_teams(self.http.get_json("teams"))

    def fetch_players(self, team_abbreviation: str) -> list[PlayerRecord]:
        espn_id = to_espn_id(team_abbreviation)
        if espn_id is None:
            raise ProviderCapabilityError(f"ESPN has no team id for {team_abbreviation!r}")
        payload = self.http.get_json(f"teams/{espn_id}/roster")
        return parser.parse_roster(payload, team_abbreviation=team_abbreviation.upper())

    def fetch_schedule(self, season: int, week: int) -> list[GameRecord]:
        payload = self.http.get_json(
            "scoreboard",
            params={"dates": season, "week": week, "seasontype": REGULAR_SEASON_TYPE},
        )
        return parser.parse_scoreboard(payload, season=season, week=week)

    def fetch_box_score(
        self,
        provider_game_id: str,
        *,
        season: int | None = None,
        week: int | None = None,
    ) -> list[PlayerStatRecord]:
        payload = self.http.get_json("summary", params={"event": provider_game_id})
        return parser.parse_box_score(payload, provider_game_id=provider_game_id)

    def close(self) -> None:
        self.http.close()
