from __future__ import annotations

import typer

from gridiron_ingest.cli.ingest import app as ingest_app
from gridiron_ingest.cli.seed import app as seed_app
from gridiron_ingest.cli.teams import app as teams_app
from gridiron_ingest.core.config import settings
from gridiron_ingest.core.logging import configure_logging

app = typer.Typer(no_args_is_help=True)
app.add_typer(seed_app, name="seed")
app.add_typer(ingest_app, name="ingest")
app.add_typer(teams_app, name="teams")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """NFL statistics ingestion and reconciliation."""

    configure_logging("DEBUG" if verbose else settings.log_level, json=settings.log_json)
