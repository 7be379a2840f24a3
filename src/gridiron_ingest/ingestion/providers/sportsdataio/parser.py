from __future__ import annotations

from typing import Any

from gridiron_ingest.db.enums import ProviderEnum
from gridiron_ingest.ingestion.providers.base.types import (
    GameRecord,
    PlayerRecord,
    PlayerStatRecord,
    RawValue,
    TeamRecord,
)

ApiItem = dict[str, Any]

PROVIDER = ProviderEnum.SPORTSDATAIO.value

# PlayerGame field -> canonical counter
STAT_FIELDS: dict[str, str] = {
    "PassingCompletions": "pass_completions",
    "PassingAttempts": "pass_attempts",
    "PassingYards": "pass_yards",
    "PassingTouchdowns": "pass_touchdowns",
    "PassingInterceptions": "interceptions",
    "RushingAttempts": "rush_attempts",
    "RushingYards": "rush_yards",
    "RushingTouchdowns": "rush_touchdowns",
    "Receptions": "receptions",
    "ReceivingYards": "receiving_yards",
    "ReceivingTouchdowns": "receiving_touchdowns",
}

# A line with none of these is a roster entry without snaps.
_PARTICIPATION_FIELDS = ("PassingAttempts", "RushingAttempts", "Receptions")


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _positive(value: Any) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def parse_teams(items: list[ApiItem]) -> list[TeamRecord]:
    records: list[TeamRecord] = []
    for item in items:
        key = _str(item.get("Key"))
        name = _str(item.get("FullName")) or _str(item.get("Name"))
        if not key or not name:
            continue
        records.append(
            TeamRecord(
                provider=PROVIDER,
                provider_team_id=_str(item.get("TeamID")) or key,
                abbreviation=key.upper(),
                name=name,
                city=_str(item.get("City")),
            )
        )
    return records


def parse_players(items: list[ApiItem], *, team_abbreviation: str) -> list[PlayerRecord]:
    records: list[PlayerRecord] = []
    for item in items:
        name = _str(item.get("Name"))
        if not name:
            continue
        records.append(
            PlayerRecord(
                provider=PROVIDER,
                provider_player_id=_str(item.get("PlayerID")) or None,
                name=name,
                team_abbreviation=_str(item.get("Team")).upper() or team_abbreviation,
                position=_str(item.get("Position")),
                jersey=item.get("Number"),
                height=item.get("Height"),
                weight=item.get("Weight"),
                college=_str(item.get("College")) or None,
            )
        )
    return records


def _completed(item: ApiItem) -> bool | None:
    is_over = item.get("IsOver")
    if isinstance(is_over, bool):
        return is_over
    status = _str(item.get("Status")).lower()
    if not status:
        return None
    return status.startswith("final")


def parse_scores(items: list[ApiItem], *, season: int, week: int) -> list[GameRecord]:
    records: list[GameRecord] = []
    for item in items:
        game_key = _str(item.get("GameKey"))
        if not game_key:
            records.append(
                GameRecord.unusable(
                    PROVIDER,
                    _str(item.get("GlobalGameID")),
                    season=season,
                    week=week,
                    reason="SportsData.io score without GameKey",
                )
            )
            continue

        home = _str(item.get("HomeTeam"))
        away = _str(item.get("AwayTeam"))
        # Bye-week placeholders carry "BYE" as the opponent.
        if "BYE" in (home.upper(), away.upper()):
            continue

        item_season = item.get("Season")
        item_week = item.get("Week")
        records.append(
            GameRecord(
                provider=PROVIDER,
                provider_game_id=game_key,
                season=item_season if isinstance(item_season, int) else season,
                week=item_week if isinstance(item_week, int) else week,
                date=_str(item.get("DateTimeUTC")) or _str(item.get("Date")) or None,
                home_team_abbreviation=home.upper(),
                away_team_abbreviation=away.upper(),
                home_score=item.get("HomeScore"),
                away_score=item.get("AwayScore"),
                completed=_completed(item),
            )
        )
    return records


def parse_player_game_stats(
    items: list[ApiItem], *, provider_game_id: str | None = None
) -> list[PlayerStatRecord]:
    """PlayerGameStatsByWeek -> stat lines, optionally filtered to one GameKey."""

    records: list[PlayerStatRecord] = []
    for item in items:
        game_key = _str(item.get("GameKey"))
        if provider_game_id is not None and game_key != provider_game_id:
            continue
        if not any(_positive(item.get(f)) for f in _PARTICIPATION_FIELDS):
            continue
        name = _str(item.get("Name"))
        if not name:
            continue

        stats: dict[str, RawValue] = {
            counter: item.get(source) for source, counter in STAT_FIELDS.items()
        }
        records.append(
            PlayerStatRecord(
                provider=PROVIDER,
                provider_game_id=game_key,
                provider_player_id=_str(item.get("PlayerID")) or None,
                player_name=name,
                team_abbreviation=_str(item.get("Team")).upper() or None,
                position=_str(item.get("Position")),
                stats=stats,
            )
        )
    return records
