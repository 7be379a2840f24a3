from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridiron_ingest.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from gridiron_ingest.db.models.core.game import Game
    from gridiron_ingest.db.models.core.player import Player

# Counters that can never go below zero. Yardage is allowed to (sacks, lost rushes).
NON_NEGATIVE_COUNTERS = (
    "pass_attempts",
    "pass_completions",
    "pass_touchdowns",
    "interceptions",
    "rush_attempts",
    "rush_touchdowns",
    "receptions",
    "receiving_touchdowns",
)

STAT_COUNTERS = (
    "pass_attempts",
    "pass_completions",
    "pass_yards",
    "pass_touchdowns",
    "interceptions",
    "rush_attempts",
    "rush_yards",
    "rush_touchdowns",
    "receptions",
    "receiving_yards",
    "receiving_touchdowns",
)


class PlayerGameStats(Base, TimestampMixin):
    __tablename__ = "player_game_stats"

    id: Mapped[int] = mapped_column(primary_key=True)

    player_id: Mapped[int] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id", ondelete="CASCADE"), nullable=False)

    # Passing
    pass_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pass_completions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pass_yards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pass_touchdowns: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    interceptions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Rushing
    rush_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rush_yards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rush_touchdowns: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Receiving
    receptions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    receiving_yards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    receiving_touchdowns: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    player: Mapped[Player] = relationship(back_populates="game_stats")
    game: Mapped[Game] = relationship(back_populates="player_stats")

    __table_args__ = (
        UniqueConstraint("player_id", "game_id", name="uq_player_game_stats_player_game"),
        Index("ix_pgs_game_id", "game_id"),
        Index("ix_pgs_player_id", "player_id"),
        *(
            CheckConstraint(f"{col} >= 0", name=f"{col}_non_negative")
            for col in NON_NEGATIVE_COUNTERS
        ),
    )
