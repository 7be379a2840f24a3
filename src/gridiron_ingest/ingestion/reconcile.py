"""Insert-or-update of canonical entities by natural key.

Every entity is reconciled in its own unit of work: lookup, insert or patch,
commit. The lookup-then-write section runs under a process-wide keyed lock so
two jobs in the same process never insert the same natural key twice; across
processes the unique constraints catch the race and the loser re-reads and
updates instead.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gridiron_ingest.core.locks import KeyedLock
from gridiron_ingest.db.base import Base
from gridiron_ingest.db.errors import StorageError
from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.models.core.player import Player
from gridiron_ingest.db.models.core.team import Team
from gridiron_ingest.db.models.stats.player_game_stats import PlayerGameStats
from gridiron_ingest.db.repos.base import BaseRepository
from gridiron_ingest.db.repos.core.game_repo import GameRepository
from gridiron_ingest.db.repos.core.player_repo import PlayerRepository
from gridiron_ingest.db.repos.core.team_repo import TeamRepository
from gridiron_ingest.db.repos.stats.player_game_stats_repo import PlayerGameStatsRepository
from gridiron_ingest.ingestion.errors import InvalidGameError, UnknownTeamError
from gridiron_ingest.ingestion.football import nfl_teams
from gridiron_ingest.ingestion.mapper import (
    GameEntity,
    PlayerEntity,
    PlayerGameStatsEntity,
    TeamEntity,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Shared by every Reconciler in the process unless a test injects its own.
RECONCILE_LOCKS = KeyedLock()


class ReconcileOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ReconcileResult:
    entity_id: int
    outcome: ReconcileOutcome

    @property
    def written(self) -> bool:
        return self.outcome is not ReconcileOutcome.UNCHANGED


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Reconciler:
    def __init__(self, session: Session, *, locks: KeyedLock | None = None) -> None:
        self.session = session
        self.locks = locks if locks is not None else RECONCILE_LOCKS

        self.teams = TeamRepository(session)
        self.players = PlayerRepository(session)
        self.games = GameRepository(session)
        self.stats = PlayerGameStatsRepository(session)

    # -----------------------------
    # Unit of work
    # -----------------------------

    def _unit(self, key: Hashable, action: Callable[[], ReconcileResult]) -> ReconcileResult:
        """Run `action` under the lock for `key` and commit before releasing it."""

        with self.locks.hold(key):
            try:
                result = action()
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                raise StorageError(f"reconcile {key!r} failed: {e.__class__.__name__}: {e}") from e
            except Exception:
                self.session.rollback()
                raise
        if result.written:
            logger.debug("reconciled", key=key, outcome=result.outcome.value, id=result.entity_id)
        return result

    def _upsert(
        self,
        repo: BaseRepository[ModelT],
        *,
        find: Callable[[], ModelT | None],
        build: Callable[[], ModelT],
        changes: Mapping[str, Any],
    ) -> ReconcileResult:
        existing = find()
        if existing is None:
            try:
                with self.session.begin_nested():
                    obj = repo.add(build())
                return ReconcileResult(obj.id, ReconcileOutcome.CREATED)
            except IntegrityError:
                # Another writer inserted the same natural key first.
                existing = find()
                if existing is None:
                    raise

        diff = repo.diff(existing, changes)
        if not diff:
            return ReconcileResult(existing.id, ReconcileOutcome.UNCHANGED)
        repo.patch(existing, diff)
        return ReconcileResult(existing.id, ReconcileOutcome.UPDATED)

    # -----------------------------
    # Teams
    # -----------------------------

    def ensure_team(self, abbreviation: str) -> int:
        """Id of a stored team, seeding it from the reference table if missing."""

        info = nfl_teams.lookup(abbreviation)
        if info is None:
            raise UnknownTeamError(abbreviation)

        existing = self.teams.find_by_abbreviation(info.abbreviation)
        if existing is not None:
            return existing.id

        def action() -> ReconcileResult:
            return self._upsert(
                self.teams,
                find=lambda: self.teams.find_by_abbreviation(info.abbreviation),
                build=lambda: Team(
                    abbreviation=info.abbreviation,
                    name=info.name,
                    city=info.city,
                    conference=info.conference,
                    division=info.division,
                ),
                changes={},
            )

        return self._unit(("team", info.abbreviation), action).entity_id

    def reconcile_team(self, entity: TeamEntity) -> ReconcileResult:
        changes = {
            "name": entity.name,
            "city": entity.city,
            "conference": entity.conference,
            "division": entity.division,
        }
        return self._unit(
            ("team", entity.abbreviation),
            lambda: self._upsert(
                self.teams,
                find=lambda: self.teams.find_by_abbreviation(entity.abbreviation),
                build=lambda: Team(abbreviation=entity.abbreviation, **changes),
                changes=changes,
            ),
        )

    def seed_reference_teams(self) -> list[ReconcileResult]:
        return [
            self.reconcile_team(
                TeamEntity(
                    abbreviation=info.abbreviation,
                    name=info.name,
                    city=info.city,
                    conference=info.conference,
                    division=info.division,
                )
            )
            for info in nfl_teams.ALL_TEAMS
        ]

    # -----------------------------
    # Players
    # -----------------------------

    def reconcile_player(self, entity: PlayerEntity) -> ReconcileResult:
        team_id = (
            self.ensure_team(entity.team_abbreviation)
            if entity.team_abbreviation is not None
            else None
        )

        if entity.provider and entity.external_id:
            key: tuple[Any, ...] = ("player", entity.provider, entity.external_id)
        else:
            key = ("player", entity.name, team_id)

        # Attributes a source did not send are left alone, so a stat line
        # never wipes what the roster feed filled in.
        changes: dict[str, Any] = {"name": entity.name, "team_id": team_id}
        optional = {
            "position": entity.position or None,
            "jersey_number": entity.jersey_number,
            "height": entity.height,
            "weight": entity.weight,
            "college": entity.college,
        }
        changes.update({k: v for k, v in optional.items() if v is not None})

        def find() -> Player | None:
            return self.players.find_by_natural_key(
                name=entity.name,
                team_id=team_id,
                provider=entity.provider,
                external_id=entity.external_id,
            )

        def action() -> ReconcileResult:
            existing = find()
            update = dict(changes)
            if existing is not None and existing.external_id is None and entity.external_id:
                update["provider"] = entity.provider
                update["external_id"] = entity.external_id
            return self._upsert(
                self.players,
                find=find,
                build=lambda: Player(
                    provider=entity.provider,
                    external_id=entity.external_id,
                    **changes,
                ),
                changes=update,
            )

        return self._unit(key, action)

    # -----------------------------
    # Games
    # -----------------------------

    def reconcile_game(self, entity: GameEntity) -> ReconcileResult:
        if entity.home_team_abbreviation == entity.away_team_abbreviation:
            label = f"Game {entity.provider_game_id}" if entity.provider_game_id else "Game"
            raise InvalidGameError(
                f"{label} has {entity.home_team_abbreviation} as both home and away team"
            )

        home_id = self.ensure_team(entity.home_team_abbreviation)
        away_id = self.ensure_team(entity.away_team_abbreviation)
        if home_id == away_id:
            raise InvalidGameError(f"Game resolves to team id {home_id} on both sides")

        def find() -> Game | None:
            return self.games.find_by_natural_key(
                season=entity.season,
                week=entity.week,
                home_team_id=home_id,
                away_team_id=away_id,
            )

        def action() -> ReconcileResult:
            existing = find()
            changes: dict[str, Any] = {
                "home_score": entity.home_score,
                "away_score": entity.away_score,
            }
            if entity.game_date is not None and (
                existing is None or _as_utc(existing.game_date) != _as_utc(entity.game_date)
            ):
                changes["game_date"] = entity.game_date
            # A game keeps the box-score source it was first ingested from.
            if entity.provider_game_id and (
                existing is None or existing.provider in (None, entity.provider)
            ):
                changes["provider"] = entity.provider
                changes["provider_game_id"] = entity.provider_game_id

            return self._upsert(
                self.games,
                find=find,
                build=lambda: Game(
                    season=entity.season,
                    week=entity.week,
                    home_team_id=home_id,
                    away_team_id=away_id,
                    game_date=entity.game_date,
                    home_score=entity.home_score,
                    away_score=entity.away_score,
                    provider=entity.provider,
                    provider_game_id=entity.provider_game_id,
                ),
                changes=changes,
            )

        return self._unit(("game", entity.season, entity.week, home_id, away_id), action)

    # -----------------------------
    # Player game stats
    # -----------------------------

    def reconcile_player_game_stats(
        self, entity: PlayerGameStatsEntity, game_id: int
    ) -> ReconcileResult:
        """Upsert the player, then their line for `game_id`.

        Corrections arriving after a game is final are applied like any other
        update.
        """

        player_id = self.reconcile_player(entity.player).entity_id
        counters = dict(entity.counters)

        return self._unit(
            ("player_game_stats", player_id, game_id),
            lambda: self._upsert(
                self.stats,
                find=lambda: self.stats.find_by_player_and_game(player_id, game_id),
                build=lambda: PlayerGameStats(player_id=player_id, game_id=game_id, **counters),
                changes=counters,
            ),
        )
