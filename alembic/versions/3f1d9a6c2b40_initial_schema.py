"""Initial schema: teams, players, games, player_game_stats

Revision ID: 3f1d9a6c2b40
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3f1d9a6c2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

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


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), server_default=sa.text("0"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("abbreviation", sa.String(length=8), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=False),
        sa.Column("conference", sa.String(length=8), nullable=False),
        sa.Column("division", sa.String(length=8), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_teams")),
        sa.UniqueConstraint("abbreviation", name=op.f("uq_teams_abbreviation")),
    )
    op.create_index(
        "ix_teams_conference_division", "teams", ["conference", "division"], unique=False
    )

    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider", sa.String(length=32), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.Column("position", sa.String(length=8), nullable=False),
        sa.Column("jersey_number", sa.Integer(), nullable=True),
        sa.Column("height", sa.String(length=8), nullable=True),
        sa.Column("weight", sa.Integer(), nullable=True),
        sa.Column("college", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["team_id"],
            ["teams.id"],
            name=op.f("fk_players_team_id_teams"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_players")),
        sa.UniqueConstraint("provider", "external_id", name="uq_players_provider_external_id"),
    )
    op.create_index("ix_players_name_team", "players", ["name", "team_id"], unique=False)

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("season", sa.Integer(), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False),
        sa.Column("game_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("home_team_id", sa.Integer(), nullable=False),
        sa.Column("away_team_id", sa.Integer(), nullable=False),
        sa.Column("home_score", sa.Integer(), nullable=True),
        sa.Column("away_score", sa.Integer(), nullable=True),
        sa.Column("provider", sa.String(length=32), nullable=True),
        sa.Column("provider_game_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "home_team_id <> away_team_id", name=op.f("ck_games_distinct_teams")
        ),
        sa.CheckConstraint(
            "home_score IS NULL OR home_score >= 0",
            name=op.f("ck_games_home_score_non_negative"),
        ),
        sa.CheckConstraint(
            "away_score IS NULL OR away_score >= 0",
            name=op.f("ck_games_away_score_non_negative"),
        ),
        sa.ForeignKeyConstraint(
            ["home_team_id"],
            ["teams.id"],
            name=op.f("fk_games_home_team_id_teams"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["away_team_id"],
            ["teams.id"],
            name=op.f("fk_games_away_team_id_teams"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_games")),
        sa.UniqueConstraint(
            "season",
            "week",
            "home_team_id",
            "away_team_id",
            name="uq_games_season_week_home_away",
        ),
    )
    op.create_index("ix_games_season_week", "games", ["season", "week"], unique=False)
    op.create_index("ix_games_home_team", "games", ["home_team_id"], unique=False)
    op.create_index("ix_games_away_team", "games", ["away_team_id"], unique=False)
    op.create_index(
        "ix_games_provider_game_id", "games", ["provider", "provider_game_id"], unique=False
    )

    op.create_table(
        "player_game_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("game_id", sa.Integer(), nullable=False),
        _counter("pass_attempts"),
        _counter("pass_completions"),
        _counter("pass_yards"),
        _counter("pass_touchdowns"),
        _counter("interceptions"),
        _counter("rush_attempts"),
        _counter("rush_yards"),
        _counter("rush_touchdowns"),
        _counter("receptions"),
        _counter("receiving_yards"),
        _counter("receiving_touchdowns"),
        *_timestamps(),
        *(
            sa.CheckConstraint(
                f"{col} >= 0", name=op.f(f"ck_player_game_stats_{col}_non_negative")
            )
            for col in NON_NEGATIVE_COUNTERS
        ),
        sa.ForeignKeyConstraint(
            ["player_id"],
            ["players.id"],
            name=op.f("fk_player_game_stats_player_id_players"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["game_id"],
            ["games.id"],
            name=op.f("fk_player_game_stats_game_id_games"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_player_game_stats")),
        sa.UniqueConstraint("player_id", "game_id", name="uq_player_game_stats_player_game"),
    )
    op.create_index("ix_pgs_game_id", "player_game_stats", ["game_id"], unique=False)
    op.create_index("ix_pgs_player_id", "player_game_stats", ["player_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_pgs_player_id", table_name="player_game_stats")
    op.drop_index("ix_pgs_game_id", table_name="player_game_stats")
    op.drop_table("player_game_stats")
    op.drop_index("ix_games_provider_game_id", table_name="games")
    op.drop_index("ix_games_away_team", table_name="games")
    op.drop_index("ix_games_home_team", table_name="games")
    op.drop_index("ix_games_season_week", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_players_name_team", table_name="players")
    op.drop_table("players")
    op.drop_index("ix_teams_conference_division", table_name="teams")
    op.drop_table("teams")
