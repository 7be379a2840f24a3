from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.repos.base import BaseRepository


def _kickoff_key(game: Game) -> tuple[bool, datetime]:
    # Unknown kickoffs sort last; SQLite returns naive values for aware columns.
    if game.game_date is None:
        return (True, datetime.min.replace(tzinfo=UTC))
    kickoff = game.game_date
    if kickoff.tzinfo is None:
        kickoff = kickoff.replace(tzinfo=UTC)
    return (False, kickoff)


class GameRepository(BaseRepository[Game]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Game)

    def find_by_natural_key(
        self,
        *,
        season: int,
        week: int,
        home_team_id: int,
        away_team_id: int,
    ) -> Game | None:
        return self.first_where(
            Game.season == season,
            Game.week == week,
            Game.home_team_id == home_team_id,
            Game.away_team_id == away_team_id,
        )

    def find_by_provider_game_id(self, provider: str, provider_game_id: str) -> Game | None:
        return self.first_where(
            Game.provider == provider,
            Game.provider_game_id == provider_game_id,
        )

    def list_for_season(self, season: int, *, team_id: int | None = None) -> list[Game]:
        predicates = [Game.season == season]
        if team_id is not None:
            predicates.append(or_(Game.home_team_id == team_id, Game.away_team_id == team_id))
        games = self.all_where(*predicates)
        return sorted(games, key=lambda g: (g.week, *_kickoff_key(g), g.id))

    def list_for_week(self, season: int, week: int, *, team_id: int | None = None) -> list[Game]:
        return [g for g in self.list_for_season(season, team_id=team_id) if g.week == week]
