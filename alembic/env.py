"""
alembic.env

Alembic migration environment for the record-store schema
(profiles, credentials, vehicles).

Notes:
- Executed by Alembic only; the FastAPI runtime creates tables itself in dev/test.
- Migrations run with a sync driver; async URLs are mapped to their sync form.
"""

from __future__ import annotations

import os
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import engine_from_config, pool

from fleet_console.db import models  # noqa: F401  # register tables on Base.metadata
from fleet_console.db.base import Base
from fleet_console.settings import Settings

_SYNC_DRIVERS = {"+aiosqlite": "", "+asyncpg": "+psycopg"}

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _sync_url() -> str:
    url = os.environ.get("FLEET_DATABASE_URL") or Settings().database_url
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        url = url.replace(async_driver, sync_driver)
    return url


def _options(dialect: str) -> dict[str, Any]:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        # ALTER TABLE on SQLite goes through copy-and-move batches.
        "render_as_batch": dialect == "sqlite",
    }


def migrate_offline() -> None:
    url = _sync_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_options(url.split(":", 1)[0].split("+", 1)[0]),
    )
    with context.begin_transaction():
        context.run_migrations()


def migrate_online() -> None:
    section = context.config.get_section(context.config.config_ini_section) or {}
    section["sqlalchemy.url"] = _sync_url()
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(connection=connection, **_options(connection.dialect.name))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    migrate_offline()
else:
    migrate_online()
