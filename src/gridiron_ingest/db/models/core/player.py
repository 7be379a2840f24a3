from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridiron_ingest.db.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Provider that first supplied the player and its id there; both null for
    # rows keyed by name + team only.
    provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    external_id: Mapped[str | None] = mapped_column(String, nullable=True)

    name: Mapped[str] = mapped_column(String, nullable=False)
    team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    position: Mapped[str] = mapped_column(String(8), nullable=False, default="")
    jersey_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[str | None] = mapped_column(String(8), nullable=True)
    weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    college: Mapped[str | None] = mapped_column(String, nullable=True)

    team: Mapped[Team | None] = relationship(back_populates="players")

    game_stats: Mapped[list[PlayerGameStats]] = relationship(
        back_populates="player",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("provider", "external_id", name="uq_players_provider_external_id"),
        Index("ix_players_name_team", "name", "team_id"),
    )


from gridiron_ingest.db.models.core.team import Team  # noqa: E402
from gridiron_ingest.db.models.stats.player_game_stats import PlayerGameStats  # noqa: E402
