"""One scrape job end to end: rate-limited fetch -> map -> reconcile -> ScrapeResult.

Jobs run sequentially within themselves. Several orchestrators may run at once
(one per thread, each with its own Session) sharing the provider rate limiter
and the reconciliation locks.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeVar

import structlog
from sqlalchemy.orm import Session

from gridiron_ingest.core.config import Settings
from gridiron_ingest.db.models.core.game import Game
from gridiron_ingest.db.repos.core.game_repo import GameRepository
from gridiron_ingest.db.repos.core.team_repo import TeamRepository
from gridiron_ingest.ingestion.errors import InvalidGameError
from gridiron_ingest.ingestion.football import nfl_teams
from gridiron_ingest.ingestion.mapper import map_game, map_player, map_player_stats, map_team
from gridiron_ingest.ingestion.providers.base.errors import FetchError, ProviderMappingError
from gridiron_ingest.ingestion.providers.base.provider import StatsProvider
from gridiron_ingest.ingestion.reconcile import ReconcileOutcome, ReconcileResult, Reconciler

logger = structlog.get_logger(__name__)

T = TypeVar("T")

REGULAR_SEASON_WEEKS = 18


class JobKind(StrEnum):
    TEAMS = "teams"
    PLAYERS = "players"
    GAMES = "games"
    STATS = "stats"
    SEASON = "season"


@dataclass(frozen=True)
class ScrapeJob:
    kind: JobKind = JobKind.SEASON
    season: int | None = None
    week: int | None = None
    team: str | None = None

    def weeks(self) -> list[int]:
        if self.week is not None:
            return [self.week]
        return list(range(1, REGULAR_SEASON_WEEKS + 1))


@dataclass(frozen=True)
class ScrapeResult:
    success: bool
    records_processed: int
    records_failed: int
    message: str
    errors: list[str] = field(default_factory=list)
    records_created: int = 0
    records_updated: int = 0

    def summary(self) -> str:
        return " ".join(
            [
                f"{self.message}:",
                f"processed={self.records_processed}",
                f"failed={self.records_failed}",
                f"created={self.records_created}",
                f"updated={self.records_updated}",
            ]
        )


class CancellationToken:
    """Set from any thread; honored by the job at its next fetch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class JobCancelled(Exception):
    pass


def _format_failure_reason(exc: BaseException, *, max_len: int = 300) -> str:
    msg = str(exc).strip() or exc.__class__.__name__
    reason = f"{exc.__class__.__name__}: {msg}"
    if len(reason) > max_len:
        return f"{reason[: max_len - 3]}..."
    return reason


@dataclass
class _Tally:
    processed: int = 0
    failed: int = 0
    created: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)
    fetch_calls: int = 0
    reached_provider: bool = False
    invariant_violated: bool = False


class ScrapeOrchestrator:
    def __init__(
        self,
        provider: StatsProvider,
        session: Session,
        *,
        max_retries: int = 3,
        retry_delay_s: float = 1.5,
        reconciler: Reconciler | None = None,
        cancel_token: CancellationToken | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.provider = provider
        self.session = session
        self.max_retries = max_retries
        self.retry_delay_s = retry_delay_s
        self.reconciler = reconciler if reconciler is not None else Reconciler(session)
        self.cancel_token = cancel_token if cancel_token is not None else CancellationToken()
        self._sleep = sleep

        self.teams = TeamRepository(session)
        self.games = GameRepository(session)
        self._tally = _Tally()

    @classmethod
    def from_settings(
        cls,
        provider: StatsProvider,
        session: Session,
        settings: Settings,
        **kwargs: Any,
    ) -> ScrapeOrchestrator:
        return cls(
            provider,
            session,
            max_retries=settings.scraper.max_retries,
            retry_delay_s=settings.request_delay_ms_for(provider.provider_key) / 1000.0,
            **kwargs,
        )

    # -----------------------------
    # Entry point
    # -----------------------------

    def run(self, job: ScrapeJob) -> ScrapeResult:
        self._tally = _Tally()
        log = logger.bind(
            provider=self.provider.provider_key,
            kind=job.kind.value,
            season=job.season,
            week=job.week,
            team=job.team,
        )
        log.info("scrape job started")

        flows: dict[JobKind, Callable[[ScrapeJob], None]] = {
            JobKind.TEAMS: self._run_teams,
            JobKind.PLAYERS: self._run_players,
            JobKind.GAMES: self._run_games,
            JobKind.STATS: self._run_stats,
            JobKind.SEASON: self._run_season,
        }

        cancelled = False
        try:
            if job.kind in (JobKind.GAMES, JobKind.STATS, JobKind.SEASON) and job.season is None:
                raise ValueError(f"{job.kind.value} job requires a season")
            flows[job.kind](job)
        except JobCancelled:
            cancelled = True
            log.warning("scrape job cancelled", processed=self._tally.processed)

        result = self._result(job, cancelled=cancelled)
        log.info(
            "scrape job finished",
            success=result.success,
            processed=result.records_processed,
            failed=result.records_failed,
        )
        return result

    def _result(self, job: ScrapeJob, *, cancelled: bool) -> ScrapeResult:
        t = self._tally
        what = f"{self.provider.provider_key} {job.kind.value}"
        if job.season is not None:
            what += f" {job.season}"
        if job.week is not None:
            what += f" week {job.week}"

        if cancelled:
            success, message = False, f"Cancelled {what}"
        elif t.fetch_calls > 0 and not t.reached_provider:
            success, message = False, f"Provider unreachable for {what}"
        elif t.processed == 0 and t.failed > 0:
            success, message = False, f"All records failed for {what}"
        elif t.invariant_violated:
            success, message = False, f"Invariant violation during {what}"
        elif t.processed == 0:
            success, message = True, f"Nothing to ingest for {what}"
        else:
            success, message = True, f"Ingested {what}"
            if t.failed:
                message += " with failures"

        return ScrapeResult(
            success=success,
            records_processed=t.processed,
            records_failed=t.failed,
            message=message,
            errors=list(t.errors),
            records_created=t.created,
            records_updated=t.updated,
        )

    # -----------------------------
    # Fetch with retry
    # -----------------------------

    def _check_cancelled(self) -> None:
        if self.cancel_token.cancelled:
            raise JobCancelled()

    def _fetch(self, what: str, fn: Callable[[], T]) -> T:
        """Call `fn`, retrying transient failures up to `max_retries` attempts in total.

        Each attempt goes through the provider's rate limiter; retries add a
        linear backoff of `retry_delay_s * attempt` on top.
        """

        for attempt in range(1, self.max_retries + 1):
            self._check_cancelled()
            self._tally.fetch_calls += 1
            try:
                result = fn()
            except FetchError as e:
                if e.responded:
                    # The provider answered, so it is up.
                    self._tally.reached_provider = True
                if not e.transient or attempt >= self.max_retries:
                    raise
                logger.warning(
                    "transient fetch failure; retrying",
                    provider=self.provider.provider_key,
                    what=what,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    error=str(e),
                )
                self._sleep(self.retry_delay_s * attempt)
                continue
            except ProviderMappingError:
                # The payload arrived but could not be read.
                self._tally.reached_provider = True
                raise
            self._tally.reached_provider = True
            return result
        raise AssertionError("unreachable")

    def _fetch_or_record(self, what: str, fn: Callable[[], list[T]]) -> list[T] | None:
        try:
            return self._fetch(what, fn)
        except JobCancelled:
            raise
        except Exception as exc:
            self._record_failure(what, exc)
            return None

    # -----------------------------
    # Per-record bookkeeping
    # -----------------------------

    def _record_failure(self, what: str, exc: BaseException) -> None:
        if isinstance(exc, InvalidGameError):
            self._tally.invariant_violated = True
        reason = _format_failure_reason(exc)
        self._tally.failed += 1
        self._tally.errors.append(f"{what}: {reason}")
        logger.warning(
            "record failed", provider=self.provider.provider_key, what=what, error=reason
        )

    def _count(self, result: ReconcileResult) -> None:
        self._tally.processed += 1
        if result.outcome is ReconcileOutcome.CREATED:
            self._tally.created += 1
        elif result.outcome is ReconcileOutcome.UPDATED:
            self._tally.updated += 1

    def _process(self, what: str, fn: Callable[[], ReconcileResult]) -> ReconcileResult | None:
        try:
            result = fn()
        except Exception as exc:
            # Reconciler units roll back on their own; make sure nothing is left pending.
            if self.session.in_transaction():
                self.session.rollback()
            self._record_failure(what, exc)
            return None
        self._count(result)
        return result

    # -----------------------------
    # Filters
    # -----------------------------

    def _team_filter(self, job: ScrapeJob) -> str | None:
        if job.team is None:
            return None
        canonical = nfl_teams.resolve_abbreviation(job.team)
        if canonical is None:
            raise ValueError(f"Unknown team filter: {job.team!r}")
        return canonical

    # -----------------------------
    # Flows
    # -----------------------------

    def _run_teams(self, job: ScrapeJob) -> None:
        team = self._team_filter(job)
        records = self._fetch_or_record("teams", self.provider.fetch_teams)
        for record in records or []:
            if team is not None and nfl_teams.resolve_abbreviation(record.abbreviation) != team:
                continue
            self._process(
                f"team {record.abbreviation}",
                lambda r=record: self.reconciler.reconcile_team(map_team(r)),
            )

    def _roster_teams(self, job: ScrapeJob) -> list[str]:
        team = self._team_filter(job)
        if team is not None:
            return [team]
        stored = [t.abbreviation for t in self.teams.list_all()]
        return stored or [info.abbreviation for info in nfl_teams.ALL_TEAMS]

    def _run_players(self, job: ScrapeJob) -> None:
        for abbreviation in self._roster_teams(job):
            records = self._fetch_or_record(
                f"roster {abbreviation}",
                lambda a=abbreviation: self.provider.fetch_players(a),
            )
            for record in records or []:
                self._process(
                    f"player {record.name} ({abbreviation})",
                    lambda r=record: self.reconciler.reconcile_player(map_player(r)),
                )

    def _ingest_week_games(
        self, season: int, week: int, team: str | None
    ) -> list[tuple[int, str, int, int]]:
        """Reconcile one week of games; returns the completed ones for box-score fetches."""

        completed: list[tuple[int, str, int, int]] = []
        records = self._fetch_or_record(
            f"schedule {season} week {week}",
            lambda: self.provider.fetch_schedule(season, week),
        )
        for record in records or []:
            what = f"game {record.provider_game_id or '?'}"
            try:
                entity = map_game(record)
            except Exception as exc:
                self._record_failure(what, exc)
                continue
            if team is not None and team not in (
                entity.home_team_abbreviation,
                entity.away_team_abbreviation,
            ):
                continue
            result = self._process(what, lambda e=entity: self.reconciler.reconcile_game(e))
            if result is not None and entity.completed:
                completed.append(
                    (result.entity_id, record.provider_game_id, entity.season, entity.week)
                )
        return completed

    def _run_games(self, job: ScrapeJob) -> None:
        assert job.season is not None
        team = self._team_filter(job)
        for week in job.weeks():
            self._ingest_week_games(job.season, week, team)

    def _ingest_box_score(
        self, game_id: int, provider_game_id: str, season: int, week: int
    ) -> None:
        records = self._fetch_or_record(
            f"box score {provider_game_id}",
            lambda: self.provider.fetch_box_score(provider_game_id, season=season, week=week),
        )
        for record in records or []:
            self._process(
                f"stats {record.player_name} ({record.team_abbreviation}) game {provider_game_id}",
                lambda r=record: self.reconciler.reconcile_player_game_stats(
                    map_player_stats(r), game_id
                ),
            )

    def _stored_games(self, job: ScrapeJob, team: str | None) -> Iterable[Game]:
        assert job.season is not None
        team_id: int | None = None
        if team is not None:
            stored = self.teams.find_by_abbreviation(team)
            if stored is None:
                return []
            team_id = stored.id
        if job.week is not None:
            games = self.games.list_for_week(job.season, job.week, team_id=team_id)
        else:
            games = self.games.list_for_season(job.season, team_id=team_id)
        return [
            g
            for g in games
            if g.is_final
            and g.provider_game_id
            and g.provider == self.provider.provider_key
        ]

    def _run_stats(self, job: ScrapeJob) -> None:
        team = self._team_filter(job)
        targets = [
            (g.id, g.provider_game_id, g.season, g.week) for g in self._stored_games(job, team)
        ]
        for game_id, provider_game_id, season, week in targets:
            assert provider_game_id is not None
            self._ingest_box_score(game_id, provider_game_id, season, week)

    def _run_season(self, job: ScrapeJob) -> None:
        assert job.season is not None
        team = self._team_filter(job)
        for week in job.weeks():
            for game_id, provider_game_id, season, week_ in self._ingest_week_games(
                job.season, week, team
            ):
                self._ingest_box_score(game_id, provider_game_id, season, week_)
