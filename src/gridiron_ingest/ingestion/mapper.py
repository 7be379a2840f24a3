"""Provider-neutral records -> canonical entities.

Pure functions with no I/O: the result depends only on the record and the
static reference table, never on what is already stored. Team references are
resolved here; an unknown abbreviation raises UnknownTeamError so the caller
can record the failure against that one record.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from gridiron_ingest.core.text import normalize_player_name
from gridiron_ingest.db.models.stats.player_game_stats import NON_NEGATIVE_COUNTERS, STAT_COUNTERS
from gridiron_ingest.ingestion.dates import parse_game_datetime
from gridiron_ingest.ingestion.errors import UnknownTeamError
from gridiron_ingest.ingestion.football import nfl_teams
from gridiron_ingest.ingestion.providers.base.errors import ProviderMappingError
from gridiron_ingest.ingestion.providers.base.types import (
    GameRecord,
    PlayerRecord,
    PlayerStatRecord,
    RawValue,
    TeamRecord,
)

_feet_inches_re = re.compile(r"^\s*(\d+)\s*(?:'|-|ft)\s*(\d+)\s*(?:\"|''|in)?\s*$")
_leading_int_re = re.compile(r"^\s*(-?\d+)")


@dataclass(frozen=True)
class TeamEntity:
    abbreviation: str
    name: str
    city: str
    conference: str
    division: str


@dataclass(frozen=True)
class PlayerEntity:
    name: str
    team_abbreviation: str | None
    provider: str | None = None
    external_id: str | None = None
    position: str = ""
    jersey_number: int | None = None
    height: str | None = None
    weight: int | None = None
    college: str | None = None


@dataclass(frozen=True)
class GameEntity:
    season: int
    week: int
    game_date: datetime | None
    home_team_abbreviation: str
    away_team_abbreviation: str
    home_score: int | None
    away_score: int | None
    provider: str | None = None
    provider_game_id: str | None = None
    completed: bool = False


@dataclass(frozen=True)
class PlayerGameStatsEntity:
    player: PlayerEntity
    provider_game_id: str
    counters: dict[str, int] = field(default_factory=dict)


# -----------------------------
# Scalar normalization
# -----------------------------


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_count(value: RawValue, *, counter: str) -> int:
    """Counting stat: absent, blank or non-numeric -> 0."""

    if _blank(value) or isinstance(value, bool):
        return 0
    try:
        number = int(float(value))  # "12", "12.0", 12.0
    except (TypeError, ValueError, OverflowError):
        return 0
    if number < 0 and counter in NON_NEGATIVE_COUNTERS:
        raise ProviderMappingError(
            f"Negative value for {counter}", context={"counter": counter, "value": value}
        )
    return number


def parse_score(value: RawValue) -> int | None:
    """Final score: absent or blank -> None (not yet played)."""

    if _blank(value):
        return None
    try:
        score = int(float(value))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError) as e:
        raise ProviderMappingError("Unparseable score", context={"value": value}) from e
    if score < 0:
        raise ProviderMappingError("Negative score", context={"value": value})
    return score


def parse_optional_int(value: RawValue) -> int | None:
    if _blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    m = _leading_int_re.match(str(value))
    return int(m.group(1)) if m else None


def normalize_height(value: RawValue) -> str | None:
    """Heights become "F-I". Bare numbers are total inches."""

    if _blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        inches = int(value)
        return f"{inches // 12}-{inches % 12}" if inches > 0 else None

    text = str(value).strip()
    if text.isdigit():
        return normalize_height(int(text))
    m = _feet_inches_re.match(text)
    if m:
        return f"{int(m.group(1))}-{int(m.group(2))}"
    return None


def resolve_team(abbreviation: str | None, *, context: str) -> str:
    canonical = nfl_teams.resolve_abbreviation(abbreviation)
    if canonical is None:
        raise UnknownTeamError(abbreviation, context=context)
    return canonical


# -----------------------------
# Record mappers
# -----------------------------


def map_team(record: TeamRecord) -> TeamEntity:
    abbreviation = resolve_team(record.abbreviation, context=f"team {record.name!r}")
    info = nfl_teams.lookup(abbreviation)
    assert info is not None
    return TeamEntity(
        abbreviation=abbreviation,
        name=record.name.strip() or info.name,
        city=record.city.strip() or info.city,
        conference=info.conference,
        division=info.division,
    )


def map_player(record: PlayerRecord) -> PlayerEntity:
    name = normalize_player_name(record.name)
    if not name:
        raise ProviderMappingError("Player without name", context={"id": record.provider_player_id})

    team: str | None = None
    if not _blank(record.team_abbreviation):
        team = resolve_team(record.team_abbreviation, context=f"player {name!r}")

    return PlayerEntity(
        name=name,
        team_abbreviation=team,
        provider=record.provider if record.provider_player_id else None,
        external_id=record.provider_player_id or None,
        position=record.position.strip().upper(),
        jersey_number=parse_optional_int(record.jersey),
        height=normalize_height(record.height),
        weight=parse_optional_int(record.weight),
        college=(record.college or "").strip() or None,
    )


def map_game(record: GameRecord) -> GameEntity:
    if record.invalid_reason:
        raise ProviderMappingError(record.invalid_reason, context={"id": record.provider_game_id})
    context = f"game {record.provider_game_id}"
    home = resolve_team(record.home_team_abbreviation, context=context)
    away = resolve_team(record.away_team_abbreviation, context=context)

    try:
        game_date = parse_game_datetime(record.date, provider_game_id=record.provider_game_id)
    except ValueError as e:
        raise ProviderMappingError(str(e), context={"id": record.provider_game_id}) from e

    home_score = parse_score(record.home_score)
    away_score = parse_score(record.away_score)

    if record.completed is False:
        # Scheduled / in-progress games report running or zero scores.
        home_score = away_score = None
    completed = home_score is not None and away_score is not None

    return GameEntity(
        season=int(record.season),
        week=int(record.week),
        game_date=game_date,
        home_team_abbreviation=home,
        away_team_abbreviation=away,
        home_score=home_score,
        away_score=away_score,
        provider=record.provider,
        provider_game_id=record.provider_game_id,
        completed=completed,
    )


def map_player_stats(record: PlayerStatRecord) -> PlayerGameStatsEntity:
    name = normalize_player_name(record.player_name)
    if not name:
        raise ProviderMappingError(
            "Stat line without player name", context={"game": record.provider_game_id}
        )
    team = resolve_team(record.team_abbreviation, context=f"player {name!r}")

    counters = {c: parse_count(record.stats.get(c), counter=c) for c in STAT_COUNTERS}

    player = PlayerEntity(
        name=name,
        team_abbreviation=team,
        provider=record.provider if record.provider_player_id else None,
        external_id=record.provider_player_id or None,
        position=record.position.strip().upper(),
    )
    return PlayerGameStatsEntity(
        player=player,
        provider_game_id=record.provider_game_id,
        counters=counters,
    )
