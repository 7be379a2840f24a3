from __future__ import annotations

import typer

from gridiron_ingest.cli.common import session_scope
from gridiron_ingest.db.errors import TeamInUseError
from gridiron_ingest.db.repos.core.team_repo import TeamRepository
from gridiron_ingest.ingestion.football import nfl_teams

app = typer.Typer(help="Inspect and manage teams.")


@app.command("divisions")
def divisions_cmd() -> None:
    """List teams grouped by conference and division."""

    with session_scope() as session:
        stored = {t.abbreviation for t in TeamRepository(session).list_all()}

    for division, teams in nfl_teams.by_division().items():
        typer.echo(division)
        for team in teams:
            marker = "" if team.abbreviation in stored else "  (not stored)"
            typer.echo(f"  {team.abbreviation:<4} {team.name}{marker}")


@app.command("delete")
def delete_team_cmd(
    abbreviation: str = typer.Option(..., "--abbreviation", help="Team abbreviation (e.g. KC)."),
) -> None:
    """Delete a team with no games; its players keep their rows without a team."""

    try:
        with session_scope() as session:
            repo = TeamRepository(session)
            team = repo.find_by_abbreviation(abbreviation)
            if team is None:
                typer.echo(f"No stored team {abbreviation.upper()}", err=True)
                raise typer.Exit(code=1)
            repo.delete_team(team)
    except TeamInUseError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Deleted team {abbreviation.upper()}")
