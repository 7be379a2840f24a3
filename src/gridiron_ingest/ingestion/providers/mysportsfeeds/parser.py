from __future__ import annotations

from typing import Any

from gridiron_ingest.db.enums import ProviderEnum
from gridiron_ingest.ingestion.providers.base.errors import MalformedPayloadError
from gridiron_ingest.ingestion.providers.base.types import (
    GameRecord,
    PlayerRecord,
    PlayerStatRecord,
    RawValue,
    TeamRecord,
)

ApiItem = dict[str, Any]

PROVIDER = ProviderEnum.MYSPORTSFEEDS.value

# stats.<category>.<field> -> canonical counter
STAT_FIELDS: dict[str, dict[str, str]] = {
    "passing": {
        "passCompletions": "pass_completions",
        "passAttempts": "pass_attempts",
        "passYards": "pass_yards",
        "passTD": "pass_touchdowns",
        "passInt": "interceptions",
    },
    "rushing": {
        "rushAttempts": "rush_attempts",
        "rushYards": "rush_yards",
        "rushTD": "rush_touchdowns",
    },
    "receiving": {
        "receptions": "receptions",
        "recYards": "receiving_yards",
        "recTD": "receiving_touchdowns",
    },
}

_PARTICIPATION_FIELDS = (
    ("passing", "passAttempts"),
    ("rushing", "rushAttempts"),
    ("receiving", "receptions"),
)


def _dicts(value: Any) -> list[ApiItem]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _dict(value: Any) -> ApiItem:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _positive(value: Any) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def _entries(payload: ApiItem, key: str, *, endpoint: str) -> list[ApiItem]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise MalformedPayloadError(f"MySportsFeeds {endpoint} payload has no {key!r} list")
    return _dicts(value)


def _full_name(person: ApiItem) -> str:
    return f"{_str(person.get('firstName'))} {_str(person.get('lastName'))}".strip()


def parse_teams(payload: ApiItem) -> list[TeamRecord]:
    """`teams.json` -> teams[].team"""

    records: list[TeamRecord] = []
    for wrapper in _entries(payload, "teams", endpoint="teams"):
        team = _dict(wrapper.get("team"))
        abbreviation = _str(team.get("abbreviation"))
        name = _str(team.get("name"))
        if not abbreviation or not name:
            continue
        city = _str(team.get("city"))
        records.append(
            TeamRecord(
                provider=PROVIDER,
                provider_team_id=_str(team.get("id")) or abbreviation,
                abbreviation=abbreviation.upper(),
                # MySportsFeeds splits "Kansas City" / "Chiefs".
                name=f"{city} {name}".strip() if city and not name.startswith(city) else name,
                city=city,
            )
        )
    return records


def parse_players(payload: ApiItem, *, team_abbreviation: str) -> list[PlayerRecord]:
    """`players.json` -> players[].player"""

    records: list[PlayerRecord] = []
    for wrapper in _entries(payload, "players", endpoint="players"):
        player = _dict(wrapper.get("player"))
        name = _full_name(player)
        if not name:
            continue
        current_team = _str(_dict(player.get("currentTeam")).get("abbreviation"))
        records.append(
            PlayerRecord(
                provider=PROVIDER,
                provider_player_id=_str(player.get("id")) or None,
                name=name,
                team_abbreviation=current_team.upper() or team_abbreviation,
                position=_str(player.get("primaryPosition") or player.get("position")),
                jersey=player.get("jerseyNumber"),
                height=player.get("height"),
                weight=player.get("weight"),
                college=_str(player.get("college")) or None,
            )
        )
    return records


def _completed(schedule: ApiItem) -> bool | None:
    status = _str(schedule.get("playedStatus")).upper()
    if not status:
        return None
    # COMPLETED and COMPLETED_PENDING_REVIEW
    return status.startswith("COMPLETED")


def _game(wrapper: ApiItem, *, season: int, week: int) -> GameRecord:
    schedule = _dict(wrapper.get("schedule"))
    game_id = _str(schedule.get("id"))
    if not game_id:
        return GameRecord.unusable(
            PROVIDER, "", season=season, week=week, reason="MySportsFeeds game without id"
        )

    home = _str(_dict(schedule.get("homeTeam")).get("abbreviation"))
    away = _str(_dict(schedule.get("awayTeam")).get("abbreviation"))
    if not home or not away:
        return GameRecord.unusable(
            PROVIDER,
            game_id,
            season=season,
            week=week,
            reason=f"MySportsFeeds game {game_id} missing home/away team",
        )

    # v2 puts the score beside the schedule; older feeds nested it inside.
    score = _dict(wrapper.get("score")) or _dict(schedule.get("score"))
    game_week = schedule.get("week")
    return GameRecord(
        provider=PROVIDER,
        provider_game_id=game_id,
        season=season,
        week=game_week if isinstance(game_week, int) else week,
        date=_str(schedule.get("startTime")) or None,
        home_team_abbreviation=home.upper(),
        away_team_abbreviation=away.upper(),
        home_score=score.get("homeScoreTotal"),
        away_score=score.get("awayScoreTotal"),
        completed=_completed(schedule),
    )


def parse_games(payload: ApiItem, *, season: int, week: int) -> list[GameRecord]:
    """`games.json` -> games[] of schedule + score."""

    return [
        _game(wrapper, season=season, week=week)
        for wrapper in _entries(payload, "games", endpoint="games")
    ]


def parse_gamelogs(payload: ApiItem, *, provider_game_id: str) -> list[PlayerStatRecord]:
    """`player_gamelogs.json` for a week -> stat lines of one game."""

    records: list[PlayerStatRecord] = []
    for gamelog in _entries(payload, "gamelogs", endpoint="player_gamelogs"):
        if _str(_dict(gamelog.get("game")).get("id")) != provider_game_id:
            continue
        stats_block = _dict(gamelog.get("stats"))
        if not any(
            _positive(_dict(stats_block.get(category)).get(source))
            for category, source in _PARTICIPATION_FIELDS
        ):
            continue
        player = _dict(gamelog.get("player"))
        name = _full_name(player)
        if not name:
            continue

        stats: dict[str, RawValue] = {}
        for category, fields in STAT_FIELDS.items():
            values = _dict(stats_block.get(category))
            for source, counter in fields.items():
                stats[counter] = values.get(source)

        team = _str(_dict(gamelog.get("team")).get("abbreviation"))
        records.append(
            PlayerStatRecord(
                provider=PROVIDER,
                provider_game_id=provider_game_id,
                provider_player_id=_str(player.get("id")) or None,
                player_name=name,
                team_abbreviation=team.upper() or None,
                position=_str(player.get("position")),
                stats=stats,
            )
        )
    return records
