from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridiron_ingest.db.base import Base, TimestampMixin


class Game(Base, TimestampMixin):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(primary_key=True)

    season: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    game_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    home_team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False
    )
    away_team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False
    )

    # Null until played.
    home_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Where the box score for this game can be fetched from.
    provider: Mapped[str | None] = mapped_column(String(32), nullable=True)
    provider_game_id: Mapped[str | None] = mapped_column(String, nullable=True)

    home_team: Mapped[Team] = relationship(back_populates="home_games", foreign_keys=[home_team_id])
    away_team: Mapped[Team] = relationship(back_populates="away_games", foreign_keys=[away_team_id])

    player_stats: Mapped[list[PlayerGameStats]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "season",
            "week",
            "home_team_id",
            "away_team_id",
            name="uq_games_season_week_home_away",
        ),
        CheckConstraint("home_team_id <> away_team_id", name="distinct_teams"),
        CheckConstraint("home_score IS NULL OR home_score >= 0", name="home_score_non_negative"),
        CheckConstraint("away_score IS NULL OR away_score >= 0", name="away_score_non_negative"),
        Index("ix_games_season_week", "season", "week"),
        Index("ix_games_home_team", "home_team_id"),
        Index("ix_games_away_team", "away_team_id"),
        Index("ix_games_provider_game_id", "provider", "provider_game_id"),
    )

    @property
    def is_final(self) -> bool:
        return self.home_score is not None and self.away_score is not None


from gridiron_ingest.db.models.core.team import Team  # noqa: E402
from gridiron_ingest.db.models.stats.player_game_stats import PlayerGameStats  # noqa: E402
