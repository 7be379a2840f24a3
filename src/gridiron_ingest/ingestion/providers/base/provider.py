from __future__ import annotations

from typing import Protocol

from .types import GameRecord, PlayerRecord, PlayerStatRecord, TeamRecord


class StatsProvider(Protocol):
    """
    Orchestration depends on this, not on any HTTP client.

    Every fetch issues one or more rate-limited requests and raises FetchError
    on failure. Records come back provider-neutral: raw values plus the
    provider's own identifiers, not yet resolved against canonical entities.
    """

    provider_key: str

    def fetch_teams(self) -> list[TeamRecord]: ...

    def fetch_players(self, team_abbreviation: str) -> list[PlayerRecord]:
        """Current roster for one team (canonical abbreviation)."""
        ...

    def fetch_schedule(self, season: int, week: int) -> list[GameRecord]: ...

    def fetch_box_score(
        self,
        provider_game_id: str,
        *,
        season: int | None = None,
        week: int | None = None,
    ) -> list[PlayerStatRecord]:
        """Player stat lines for one game.

        Some providers can only address box scores by week; they require
        `season` and `week` and filter to the game themselves.
        """
        ...

    def close(self) -> None: ...
