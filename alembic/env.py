from __future__ import annotations

import os
from logging.config import fileConfig
from pathlib import Path
from typing import Any

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

import gridiron_ingest.db.models  # noqa: F401
from gridiron_ingest.db.base import Base

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./gridiron.db"

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def get_database_url() -> str:
    """`alembic -x db_url=...` wins over DATABASE_URL (env or .env)."""

    override = context.get_x_argument(as_dictionary=True).get("db_url")
    if override:
        return override

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


def _configure(url: str, **kwargs: Any) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place; batch mode recreates the table.
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    url = get_database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_database_url()
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url

    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(url, connection=connection)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
