from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from gridiron_ingest.core.text import normalize_abbreviation
from gridiron_ingest.db.errors import TeamInUseError
from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.models.core.team import Team
from gridiron_ingest.db.repos.base import BaseRepository, storage_errors


class TeamRepository(BaseRepository[Team]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Team)

    def find_by_abbreviation(self, abbreviation: str) -> Team | None:
        return self.first_where(Team.abbreviation == normalize_abbreviation(abbreviation))

    def list_by_conference(self, conference: str) -> list[Team]:
        return self.all_where(func.upper(Team.conference) == conference.strip().upper())

    def list_all(self) -> list[Team]:
        return self.all_where()

    def count_referencing_games(self, team_id: int) -> int:
        stmt = select(func.count(Game.id)).where(
            or_(Game.home_team_id == team_id, Game.away_team_id == team_id)
        )
        with storage_errors("count games for team"):
            return int(self.session.execute(stmt).scalar_one())

    def delete_team(self, team: Team, *, flush: bool = True) -> None:
        """Delete a team unless a game still references it as home or away.

        Games carry two foreign keys into `teams`, so deletion is restricted
        explicitly here instead of relying on a backend cascade. The team's
        players lose their team reference and are otherwise kept.
        """
        game_count = self.count_referencing_games(team.id)
        if game_count:
            raise TeamInUseError(team.abbreviation, game_count)

        with storage_errors(f"delete team {team.abbreviation}"):
            for player in list(team.players):
                player.team_id = None
            self.delete(team, flush=flush)
