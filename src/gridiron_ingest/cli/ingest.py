from __future__ import annotations

import typer

from gridiron_ingest.cli.common import session_scope, validate_season, validate_week
from gridiron_ingest.core.config import settings
from gridiron_ingest.ingestion.orchestrator import (
    JobKind,
    ScrapeJob,
    ScrapeOrchestrator,
    ScrapeResult,
)
from gridiron_ingest.ingestion.providers.base.errors import UnsupportedProviderError
from gridiron_ingest.ingestion.providers.base.provider import StatsProvider
from gridiron_ingest.ingestion.providers.factory import build_rate_limiter, default_registry

app = typer.Typer(help="Fetch provider data and reconcile it into the local DB.")

ProviderOption = typer.Option(
    None, "--provider", help="Data provider (defaults to DATA_PROVIDER, e.g. espn)."
)
TeamOption = typer.Option(None, "--team", help="Restrict to one team abbreviation (e.g. KC).")
WeekOption = typer.Option(None, "--week", callback=validate_week, help="Week number (1-22).")


def _build_provider(name: str | None) -> StatsProvider:
    provider_name = name or settings.data_provider
    registry = default_registry(settings, build_rate_limiter(settings))
    try:
        return registry.get(provider_name)
    except UnsupportedProviderError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2) from e
    except RuntimeError as e:
        # Missing credentials for a provider that needs them.
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2) from e


def _echo_result(result: ScrapeResult) -> None:
    typer.echo(result.summary())
    for error in result.errors:
        typer.echo(f"  - {error}", err=True)


def _run(
    kind: JobKind,
    *,
    provider: str | None,
    season: int | None,
    week: int | None,
    team: str | None,
) -> None:
    stats_provider = _build_provider(provider)
    try:
        with session_scope() as session:
            orchestrator = ScrapeOrchestrator.from_settings(stats_provider, session, settings)
            try:
                result = orchestrator.run(
                    ScrapeJob(kind=kind, season=season, week=week, team=team)
                )
            except ValueError as e:
                raise typer.BadParameter(str(e)) from e
    finally:
        stats_provider.close()

    _echo_result(result)
    if not result.success:
        raise typer.Exit(code=1)


@app.command("teams")
def ingest_teams_cmd(
    provider: str | None = ProviderOption,
    team: str | None = TeamOption,
) -> None:
    """Fetch the provider's team list and upsert teams."""

    _run(JobKind.TEAMS, provider=provider, season=None, week=None, team=team)


@app.command("players")
def ingest_players_cmd(
    provider: str | None = ProviderOption,
    team: str | None = TeamOption,
) -> None:
    """Fetch rosters for every stored team (or one team) and upsert players."""

    _run(JobKind.PLAYERS, provider=provider, season=None, week=None, team=team)


@app.command("games")
def ingest_games_cmd(
    season: int = typer.Option(..., "--season", callback=validate_season, help="Season year."),
    week: int | None = WeekOption,
    provider: str | None = ProviderOption,
    team: str | None = TeamOption,
) -> None:
    """Fetch the schedule for a week (or weeks 1-18) and upsert games and scores."""

    _run(JobKind.GAMES, provider=provider, season=season, week=week, team=team)


@app.command("stats")
def ingest_stats_cmd(
    season: int = typer.Option(..., "--season", callback=validate_season, help="Season year."),
    week: int | None = WeekOption,
    provider: str | None = ProviderOption,
    team: str | None = TeamOption,
) -> None:
    """Fetch box scores for stored, completed games and upsert player stat lines."""

    _run(JobKind.STATS, provider=provider, season=season, week=week, team=team)


@app.command("season")
def ingest_season_cmd(
    season: int = typer.Option(..., "--season", callback=validate_season, help="Season year."),
    week: int | None = WeekOption,
    provider: str | None = ProviderOption,
    team: str | None = TeamOption,
) -> None:
    """Schedule, then box scores of completed games, week by week."""

    _run(JobKind.SEASON, provider=provider, season=season, week=week, team=team)
