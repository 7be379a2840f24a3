from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

RawValue = str | int | float | None


@dataclass(frozen=True)
class TeamRecord:
    """A team as the provider describes it; abbreviation not yet validated."""

    provider: str
    provider_team_id: str
    abbreviation: str
    name: str
    city: str = ""


@dataclass(frozen=True)
class PlayerRecord:
    provider: str
    provider_player_id: str | None
    name: str
    team_abbreviation: str | None
    position: str = ""
    jersey: RawValue = None
    height: RawValue = None
    weight: RawValue = None
    college: str | None = None


@dataclass(frozen=True)
class GameRecord:
    provider: str
    provider_game_id: str
    season: int
    week: int
    date: str | None
    home_team_abbreviation: str
    away_team_abbreviation: str
    home_score: RawValue = None
    away_score: RawValue = None
    # None when the provider does not report a status.
    completed: bool | None = None
    # Set when the provider's entry could not be read; the rest of the
    # schedule is still usable and the mapper reports this one as failed.
    invalid_reason: str | None = None

    @classmethod
    def unusable(
        cls, provider: str, provider_game_id: str, *, season: int, week: int, reason: str
    ) -> GameRecord:
        return cls(
            provider=provider,
            provider_game_id=provider_game_id,
            season=season,
            week=week,
            date=None,
            home_team_abbreviation="",
            away_team_abbreviation="",
            invalid_reason=reason,
        )


@dataclass(frozen=True)
class PlayerStatRecord:
    """One player's line in one game's box score.

    `stats` maps canonical counter names (see PlayerGameStats) to the raw
    provider values; absent counters are treated as zero by the mapper.
    """

    provider: str
    provider_game_id: str
    provider_player_id: str | None
    player_name: str
    team_abbreviation: str | None
    position: str = ""
    stats: Mapping[str, RawValue] = field(default_factory=dict)
