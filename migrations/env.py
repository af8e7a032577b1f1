# migrations/env.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Alembic Environment (migrations/env.py)

Purpose:
    Configure Alembic for the blog's SQLAlchemy models across offline and
    online (async) migration runs.

Design:
    - Loads env vars from .env + .env.<ENVIRONMENT> (without overriding exported vars).
    - Resolves the database URL and schema through the application Settings, so
      migrations validate the URL exactly like the runtime does.
    - Refuses to run if ENVIRONMENT is missing (prevents "wrong DB" footguns).
    - Uses the project Declarative Base for autogenerate (`target_metadata`).
    - Stores the Alembic version table next to the blog tables (DB_SCHEMA when set).
    - Emits masked connection information to the log (no credentials).

Environment variables:
    ENVIRONMENT        Required. One of the Settings environments.
    DATABASE_URL       Async database URL.
    DB_SCHEMA          Optional PostgreSQL schema for blog tables.
    ALEMBIC_SHOW_URL   If "1", log masked URL during runs.

Usage:
    # Offline (SQL script):
    ENVIRONMENT=development alembic upgrade head --sql

    # Online (apply to DB):
    ENVIRONMENT=development alembic -x show_url=1 upgrade head
"""

from __future__ import annotations

import asyncio
import logging
import logging.config
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from personal_blog.config.settings import Settings, get_settings
from personal_blog.infrastructure.database.models import blog as _blog_models  # noqa: F401
from personal_blog.infrastructure.database.models.base import metadata as BaseMetadata

# -----------------------------------------------------------------------------
# Logging configuration
# -----------------------------------------------------------------------------
config = context.config

if config.config_file_name is not None:
    logging.config.fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

_VERSION_TABLE = "alembic_version"


# -----------------------------------------------------------------------------
# Env loading
# -----------------------------------------------------------------------------
def _load_env_files() -> None:
    """Load .env and .env.<ENVIRONMENT> from repo root (no override).

    Precedence:
      1) already-exported env vars (never overwritten)
      2) .env.<ENVIRONMENT>
      3) .env
    """
    root = Path(__file__).resolve().parents[1]

    base = root / ".env"
    if base.exists():
        load_dotenv(base, override=False)

    env = (os.getenv("ENVIRONMENT") or "").strip().lower()
    if env:
        env_file = root / f".env.{env}"
        if env_file.exists():
            load_dotenv(env_file, override=False)


_load_env_files()


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _xargs() -> Mapping[str, str]:
    """Return Alembic -x key=value arguments as a mapping."""
    return dict(getattr(config, "x", {}) or {})


def _mask_url(url: str) -> str:
    """Return a masked representation of a database URL for safe logging."""
    return make_url(url).render_as_string(hide_password=True)


def _require_environment() -> str:
    """Require ENVIRONMENT to be set to prevent accidental migrations."""
    env = (os.getenv("ENVIRONMENT") or "").strip().lower()
    if not env:
        raise RuntimeError(
            "ENVIRONMENT is required for migrations (e.g., ENVIRONMENT=development). "
            "Refusing to run without an explicit environment."
        )
    return env


def _settings() -> Settings:
    _require_environment()
    settings = get_settings()
    x = _xargs()
    if x.get("show_url") == "1" or os.getenv("ALEMBIC_SHOW_URL") == "1":
        logger.info("Using DATABASE_URL (masked): %s", _mask_url(settings.database_url))
    return settings


# Alembic's target metadata used for autogenerate.
target_metadata = BaseMetadata


# -----------------------------------------------------------------------------
# Offline migrations
# -----------------------------------------------------------------------------
def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (SQL script output)."""
    settings = _settings()

    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
        version_table=_VERSION_TABLE,
        version_table_schema=settings.db_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


# -----------------------------------------------------------------------------
# Online migrations (async engine)
# -----------------------------------------------------------------------------
def _configure_and_run(connection: Connection, settings: Settings) -> None:
    """Configure Alembic context with a live connection and run migrations."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=connection.dialect.name == "sqlite",
        version_table=_VERSION_TABLE,
        version_table_schema=settings.db_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


async def _run_migrations_async() -> None:
    """Run migrations in 'online' mode using an async engine."""
    settings = _settings()
    engine_kwargs: dict[str, Any] = {"echo": settings.db_echo, "poolclass": pool.NullPool}

    connectable: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

    async with connectable.connect() as connection:
        await connection.run_sync(_configure_and_run, settings)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Entry point used by Alembic for online migrations (async safe)."""
    asyncio.run(_run_migrations_async())


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
