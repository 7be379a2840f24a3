from __future__ import annotations

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridiron_ingest.db.base import Base, TimestampMixin


class Team(Base, TimestampMixin):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Stored uppercase; lookups normalize before comparing.
    abbreviation: Mapped[str] = mapped_column(String(8), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[str] = mapped_column(String, nullable=False, default="")
    conference: Mapped[str] = mapped_column(String(8), nullable=False)
    division: Mapped[str] = mapped_column(String(8), nullable=False)

    players: Mapped[list[Player]] = relationship(back_populates="team")

    # Deletion is guarded in TeamRepository.delete_team; never let the ORM
    # null out or cascade into games.
    home_games: Mapped[list[Game]] = relationship(
        back_populates="home_team",
        foreign_keys="Game.home_team_id",
        passive_deletes="all",
    )
    away_games: Mapped[list[Game]] = relationship(
        back_populates="away_team",
        foreign_keys="Game.away_team_id",
        passive_deletes="all",
    )

    __table_args__ = (Index("ix_teams_conference_division", "conference", "division"),)


from gridiron_ingest.db.models.core.game import Game  # noqa: E402
from gridiron_ingest.db.models.core.player import Player  # noqa: E402
