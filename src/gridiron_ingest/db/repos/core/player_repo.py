from __future__ import annotations

from sqlalchemy.orm import Session

from gridiron_ingest.db.models.core.player import Player
from gridiron_ingest.db.repos.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Player)

    def find_by_external_id(self, provider: str, external_id: str) -> Player | None:
        return self.first_where(Player.provider == provider, Player.external_id == external_id)

    def find_by_name_and_team(self, name: str, team_id: int | None) -> Player | None:
        if team_id is None:
            return self.first_where(Player.name == name, Player.team_id.is_(None))
        return self.first_where(Player.name == name, Player.team_id == team_id)

    def find_by_natural_key(
        self,
        *,
        name: str,
        team_id: int | None,
        provider: str | None = None,
        external_id: str | None = None,
    ) -> Player | None:
        """Provider id first; fall back to name + team for rows ingested without one."""
        if provider and external_id:
            found = self.find_by_external_id(provider, external_id)
            if found is not None:
                return found
        found = self.find_by_name_and_team(name, team_id)
        if found is not None and provider and external_id and found.external_id is not None:
            if (found.provider, found.external_id) != (provider, external_id):
                # Same display name, different player at the provider.
                return None
        return found

    def list_by_team(self, team_id: int) -> list[Player]:
        return self.all_where(Player.team_id == team_id)
