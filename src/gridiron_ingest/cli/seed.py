from __future__ import annotations

import typer

import gridiron_ingest.db.models  # noqa: F401
from gridiron_ingest.cli.common import get_engine, session_scope
from gridiron_ingest.db.base import Base
from gridiron_ingest.ingestion.football.nfl_teams import REFERENCE_VERSION
from gridiron_ingest.ingestion.reconcile import ReconcileOutcome, Reconciler

app = typer.Typer(help="Seed reference data.")


@app.command("teams")
def seed_teams_cmd(
    create_schema: bool = typer.Option(
        False, "--create-schema", help="Create missing tables first (local SQLite setups)."
    ),
) -> None:
    """Upsert the 32 NFL teams from the built-in reference table."""

    if create_schema:
        Base.metadata.create_all(get_engine())

    with session_scope() as session:
        results = Reconciler(session).seed_reference_teams()

    created = sum(1 for r in results if r.outcome is ReconcileOutcome.CREATED)
    updated = sum(1 for r in results if r.outcome is ReconcileOutcome.UPDATED)
    typer.echo(
        " ".join(
            [
                f"Seeded teams (reference {REFERENCE_VERSION}):",
                f"teams_seen={len(results)}",
                f"teams_created={created}",
                f"teams_updated={updated}",
            ]
        )
    )
