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
from gridiron_ingest.ingestion.providers.espn.mappings import to_nfl_abbreviation

ApiItem = dict[str, Any]

PROVIDER = ProviderEnum.ESPN.value

# ESPN labels columns ("C/ATT") and keys them ("completions/passingAttempts");
# payloads have carried either, so both spellings map to the same counter.
_PASSING_COLUMNS: dict[str, str | tuple[str, str]] = {
    "C/ATT": ("pass_completions", "pass_attempts"),
    "COMPLETIONS/PASSINGATTEMPTS": ("pass_completions", "pass_attempts"),
    "YDS": "pass_yards",
    "PASSINGYARDS": "pass_yards",
    "TD": "pass_touchdowns",
    "PASSINGTOUCHDOWNS": "pass_touchdowns",
    "INT": "interceptions",
    "INTERCEPTIONS": "interceptions",
}
_RUSHING_COLUMNS: dict[str, str | tuple[str, str]] = {
    "CAR": "rush_attempts",
    "RUSHINGATTEMPTS": "rush_attempts",
    "YDS": "rush_yards",
    "RUSHINGYARDS": "rush_yards",
    "TD": "rush_touchdowns",
    "RUSHINGTOUCHDOWNS": "rush_touchdowns",
}
_RECEIVING_COLUMNS: dict[str, str | tuple[str, str]] = {
    "REC": "receptions",
    "RECEPTIONS": "receptions",
    "YDS": "receiving_yards",
    "RECEIVINGYARDS": "receiving_yards",
    "TD": "receiving_touchdowns",
    "RECEIVINGTOUCHDOWNS": "receiving_touchdowns",
}
_CATEGORY_COLUMNS = {
    "passing": _PASSING_COLUMNS,
    "rushing": _RUSHING_COLUMNS,
    "receiving": _RECEIVING_COLUMNS,
}


def _dicts(value: Any) -> list[ApiItem]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _dict(value: Any) -> ApiItem:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _require(payload: ApiItem, key: str, kind: type, *, endpoint: str) -> Any:
    """Top-level member every response of `endpoint` carries; missing means wrong schema."""

    value = payload.get(key)
    if not isinstance(value, kind):
        raise MalformedPayloadError(f"ESPN {endpoint} payload has no {key!r} {kind.__name__}")
    return value


def parse_teams(payload: ApiItem) -> list[TeamRecord]:
    """`/teams` -> sports[].leagues[].teams[].team"""

    records: list[TeamRecord] = []
    for sport in _dicts(_require(payload, "sports", list, endpoint="teams")):
        for league in _dicts(sport.get("leagues")):
            for wrapper in _dicts(league.get("teams")):
                team = _dict(wrapper.get("team"))
                espn_id = _str(team.get("id")) or str(team.get("id") or "")
                name = _str(team.get("displayName"))
                if not espn_id or not name:
                    continue
                records.append(
                    TeamRecord(
                        provider=PROVIDER,
                        provider_team_id=espn_id,
                        abbreviation=to_nfl_abbreviation(espn_id, _str(team.get("abbreviation"))),
                        name=name,
                        city=_str(team.get("location")),
                    )
                )
    return records


def parse_roster(payload: ApiItem, *, team_abbreviation: str) -> list[PlayerRecord]:
    """`/teams/{id}/roster` -> athletes[] position groups -> items[]"""

    records: list[PlayerRecord] = []
    for group in _dicts(_require(payload, "athletes", list, endpoint="roster")):
        for athlete in _dicts(group.get("items")):
            name = _str(athlete.get("displayName"))
            if not name:
                continue
            athlete_id = athlete.get("id")
            records.append(
                PlayerRecord(
                    provider=PROVIDER,
                    provider_player_id=str(athlete_id) if athlete_id not in (None, "") else None,
                    name=name,
                    team_abbreviation=team_abbreviation,
                    position=_str(_dict(athlete.get("position")).get("abbreviation")),
                    jersey=athlete.get("jersey"),
                    height=athlete.get("height"),
                    weight=athlete.get("weight"),
                    college=_str(_dict(athlete.get("college")).get("name")) or None,
                )
            )
    return records


def _competitor(competitors: list[ApiItem], side: str) -> ApiItem | None:
    for c in competitors:
        if _str(c.get("homeAway")).lower() == side:
            return c
    return None


def _completed(event: ApiItem, competition: ApiItem) -> bool | None:
    for holder in (competition, event):
        status_type = _dict(_dict(holder.get("status")).get("type"))
        completed = status_type.get("completed")
        if isinstance(completed, bool):
            return completed
    return None


def _event_game(event: ApiItem, *, season: int, week: int) -> GameRecord:
    event_id = _str(event.get("id")) or str(event.get("id") or "")

    def unusable(reason: str) -> GameRecord:
        return GameRecord.unusable(PROVIDER, event_id, season=season, week=week, reason=reason)

    if not event_id:
        return unusable("ESPN event without id")

    competitions = _dicts(event.get("competitions"))
    if not competitions:
        return unusable(f"ESPN event {event_id} without competitions")
    competition = competitions[0]

    competitors = _dicts(competition.get("competitors"))
    home = _competitor(competitors, "home")
    away = _competitor(competitors, "away")
    if home is None or away is None:
        return unusable(f"ESPN event {event_id} missing home/away competitor")

    home_team = _dict(home.get("team"))
    away_team = _dict(away.get("team"))

    event_season = _dict(event.get("season")).get("year")
    event_week = _dict(event.get("week")).get("number")

    return GameRecord(
        provider=PROVIDER,
        provider_game_id=event_id,
        season=event_season if isinstance(event_season, int) else season,
        week=event_week if isinstance(event_week, int) else week,
        date=_str(event.get("date")) or _str(competition.get("date")) or None,
        home_team_abbreviation=to_nfl_abbreviation(
            home_team.get("id"), _str(home_team.get("abbreviation"))
        ),
        away_team_abbreviation=to_nfl_abbreviation(
            away_team.get("id"), _str(away_team.get("abbreviation"))
        ),
        home_score=home.get("score"),
        away_score=away.get("score"),
        completed=_completed(event, competition),
    )


def parse_scoreboard(payload: ApiItem, *, season: int, week: int) -> list[GameRecord]:
    """`/scoreboard` -> events[] with one competition of two competitors.

    An event that cannot be read comes back as an unusable record so the
    other games of the week still go through.
    """

    events = _require(payload, "events", list, endpoint="scoreboard")
    return [
        _event_game(event, season=season, week=week)
        for event in events
        if isinstance(event, dict)
    ]


def _apply_columns(
    stats: dict[str, RawValue],
    columns: list[str],
    values: list[Any],
    mapping: dict[str, str | tuple[str, str]],
) -> None:
    for column, value in zip(columns, values):
        target = mapping.get(column.strip().upper())
        if target is None:
            continue
        if isinstance(target, tuple):
            # "completions/attempts"
            parts = str(value).split("/")
            if len(parts) == 2:
                stats[target[0]] = parts[0]
                stats[target[1]] = parts[1]
            continue
        stats[target] = value


def parse_box_score(payload: ApiItem, *, provider_game_id: str) -> list[PlayerStatRecord]:
    """`/summary` -> boxscore.players[] per team -> statistics[] categories.

    Passing, rushing and receiving lines are merged per athlete so each player
    yields one record per game.
    """

    boxscore = _require(payload, "boxscore", dict, endpoint="summary")
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    order: list[tuple[str, str]] = []

    for team_block in _dicts(boxscore.get("players")):
        team = _dict(team_block.get("team"))
        team_abbr = to_nfl_abbreviation(team.get("id"), _str(team.get("abbreviation")))

        for category in _dicts(team_block.get("statistics")):
            mapping = _CATEGORY_COLUMNS.get(_str(category.get("name")).lower())
            if mapping is None:
                continue
            columns = category.get("labels") or category.get("keys") or []
            columns = [str(c) for c in columns]

            for entry in _dicts(category.get("athletes")):
                athlete = _dict(entry.get("athlete"))
                name = _str(athlete.get("displayName"))
                if not name:
                    continue
                athlete_id = str(athlete.get("id") or "") or None
                key = (team_abbr, athlete_id or name)
                if key not in merged:
                    merged[key] = {
                        "provider_player_id": athlete_id,
                        "name": name,
                        "team": team_abbr,
                        "position": _str(_dict(athlete.get("position")).get("abbreviation")),
                        "stats": {},
                    }
                    order.append(key)
                values = entry.get("stats")
                if isinstance(values, list):
                    _apply_columns(merged[key]["stats"], columns, values, mapping)

    return [
        PlayerStatRecord(
            provider=PROVIDER,
            provider_game_id=provider_game_id,
            provider_player_id=merged[key]["provider_player_id"],
            player_name=merged[key]["name"],
            team_abbreviation=merged[key]["team"],
            position=merged[key]["position"],
            stats=dict(merged[key]["stats"]),
        )
        for key in order
    ]
