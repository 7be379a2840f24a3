from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

import typer
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from gridiron_ingest.core.config import settings
from gridiron_ingest.db import DatabaseConfig, create_db_engine, create_session_factory

FIRST_NFL_SEASON = 1920
MAX_WEEK = 22


def get_engine() -> Engine:
    return create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context-managed DB session for CLI commands.
    Ensures proper close and rolls back on exception.
    """
    SessionLocal = create_session_factory(get_engine())
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def validate_season(value: int | None) -> int | None:
    if value is None:
        return None
    latest = datetime.now().year + 1
    if not FIRST_NFL_SEASON <= value <= latest:
        raise typer.BadParameter(f"season must be between {FIRST_NFL_SEASON} and {latest}")
    return value


def validate_week(value: int | None) -> int | None:
    if value is None:
        return None
    if not 1 <= value <= MAX_WEEK:
        raise typer.BadParameter(f"week must be between 1 and {MAX_WEEK}")
    return value
