from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import gridiron_ingest.db.models  # noqa: F401
from gridiron_ingest.core.locks import KeyedLock
from gridiron_ingest.db import Base, DatabaseConfig, create_db_engine, create_session_factory
from gridiron_ingest.db.errors import TeamInUseError
from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.models.core.player import Player
from gridiron_ingest.db.models.core.team import Team
from gridiron_ingest.db.models.stats.player_game_stats import PlayerGameStats
from gridiron_ingest.db.repos.core.game_repo import GameRepository
from gridiron_ingest.db.repos.core.player_repo import PlayerRepository
from gridiron_ingest.db.repos.core.team_repo import TeamRepository
from gridiron_ingest.db.repos.stats.player_game_stats_repo import PlayerGameStatsRepository
from gridiron_ingest.ingestion.reconcile import Reconciler


def _make_session() -> Session:
    # Foreign keys are enforced through the engine's connect hook.
    engine = create_db_engine(DatabaseConfig(database_url="sqlite+pysqlite:///:memory:"))
    Base.metadata.create_all(engine)
    return create_session_factory(engine)()


def _count(session: Session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def _seed(session: Session) -> dict[str, Team]:
    Reconciler(session, locks=KeyedLock()).seed_reference_teams()
    return {t.abbreviation: t for t in TeamRepository(session).list_all()}


def _add_game(session: Session, home: Team, away: Team, *, week: int = 1, **kwargs) -> Game:
    return GameRepository(session).add(
        Game(season=2024, week=week, home_team_id=home.id, away_team_id=away.id, **kwargs)
    )


def test_find_by_abbreviation_is_case_insensitive() -> None:
    session = _make_session()
    _seed(session)
    repo = TeamRepository(session)

    team = repo.find_by_abbreviation(" kc ")
    assert team is not None
    assert team.name == "Kansas City Chiefs"
    assert repo.find_by_abbreviation("XYZ") is None
    assert len(repo.list_by_conference("nfc")) == 16


def test_delete_team_referenced_by_a_game_is_rejected() -> None:
    session = _make_session()
    teams = _seed(session)
    _add_game(session, teams["KC"], teams["BAL"])
    session.commit()

    repo = TeamRepository(session)
    with pytest.raises(TeamInUseError) as excinfo:
        repo.delete_team(teams["BAL"])

    assert excinfo.value.game_count == 1
    assert repo.find_by_abbreviation("BAL") is not None
    assert _count(session, Game) == 1


def test_delete_unreferenced_team_unlinks_players_and_keeps_other_games() -> None:
    session = _make_session()
    teams = _seed(session)
    _add_game(session, teams["KC"], teams["BAL"])
    player = PlayerRepository(session).add(
        Player(name="Brock Purdy", team_id=teams["SF"].id, position="QB")
    )
    session.commit()

    TeamRepository(session).delete_team(teams["SF"])
    session.commit()

    assert TeamRepository(session).find_by_abbreviation("SF") is None
    session.refresh(player)
    assert player.team_id is None
    assert _count(session, Player) == 1
    assert _count(session, Game) == 1


def test_deleting_a_game_cascades_to_its_stat_lines() -> None:
    session = _make_session()
    teams = _seed(session)
    game = _add_game(session, teams["KC"], teams["BAL"], home_score=27, away_score=20)
    player = PlayerRepository(session).add(Player(name="Patrick Mahomes", team_id=teams["KC"].id))
    stats_repo = PlayerGameStatsRepository(session)
    stats_repo.add(PlayerGameStats(player_id=player.id, game_id=game.id, pass_yards=291))
    session.commit()

    assert stats_repo.find_by_player_and_game(player.id, game.id) is not None
    assert len(stats_repo.list_for_game(game.id)) == 1

    GameRepository(session).delete(game)
    session.commit()

    assert _count(session, PlayerGameStats) == 0
    assert _count(session, Player) == 1


def test_game_listing_orders_by_week_then_kickoff() -> None:
    session = _make_session()
    teams = _seed(session)
    late = _add_game(
        session,
        teams["SF"],
        teams["NYJ"],
        game_date=datetime(2024, 9, 10, 0, 15, tzinfo=UTC),
    )
    early = _add_game(
        session,
        teams["KC"],
        teams["BAL"],
        game_date=datetime(2024, 9, 6, 0, 20, tzinfo=UTC),
    )
    week2 = _add_game(session, teams["KC"], teams["CIN"], week=2)
    session.commit()

    repo = GameRepository(session)
    assert [g.id for g in repo.list_for_season(2024)] == [early.id, late.id, week2.id]
    assert [g.id for g in repo.list_for_week(2024, 1)] == [early.id, late.id]
    assert [g.id for g in repo.list_for_season(2024, team_id=teams["KC"].id)] == [
        early.id,
        week2.id,
    ]
    assert (
        repo.find_by_natural_key(
            season=2024, week=1, home_team_id=teams["KC"].id, away_team_id=teams["BAL"].id
        )
        is early
    )


def test_storage_rejects_a_team_playing_itself() -> None:
    session = _make_session()
    teams = _seed(session)

    with pytest.raises(IntegrityError):
        _add_game(session, teams["KC"], teams["KC"])
    session.rollback()


def test_generic_repository_helpers() -> None:
    session = _make_session()
    teams = _seed(session)
    repo = TeamRepository(session)

    kc = repo.get(teams["KC"].id)
    assert kc is not None and kc.abbreviation == "KC"
    assert repo.get(10_000) is None
    assert repo.one_where(Team.abbreviation == "BUF").name == "Buffalo Bills"

    page = repo.list(offset=30, limit=10)
    assert len(page) == 2

    players = PlayerRepository(session)
    players.add(Player(name="Travis Kelce", team_id=kc.id, position="TE"))
    assert [p.name for p in players.list_by_team(kc.id)] == ["Travis Kelce"]
