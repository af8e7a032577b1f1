# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Async SQLAlchemy engine/session factory.

This module owns the process-global async SQLAlchemy engine and
`async_sessionmaker` used by the unit of work and the CLI.

Lifecycle:
    * Call `init_engine_and_sessionmaker(settings)` once at startup.
    * Hand `get_sessionmaker()` to `SqlAlchemyUnitOfWork` factories.
    * Call `dispose_engine()` during shutdown.

Notes:
    * No business logic here; repositories consume the session.
    * sqlite connections get `PRAGMA foreign_keys=ON` so `parent_id` is enforced.
    * A configured `db_schema` is applied through `schema_translate_map`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from personal_blog.config.settings import Settings
from personal_blog.infrastructure.database.models.base import Base

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine for ``settings`` without touching module state.

    Args:
        settings: Settings providing `database_url`, `db_echo` and `db_schema`.

    Returns:
        AsyncEngine: A configured engine.

    Raises:
        ValueError: If `database_url` is empty.
    """
    if not settings.database_url:
        raise ValueError("database_url must be configured")

    options: dict[str, Any] = {}
    if settings.db_schema:
        options["schema_translate_map"] = {None: settings.db_schema}

    engine = create_async_engine(
        url=settings.database_url,
        pool_pre_ping=True,
        echo=settings.db_echo,
        execution_options=options,
    )
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a non-expiring session factory bound to ``engine``."""
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


def init_engine_and_sessionmaker(settings: Settings) -> None:
    """Initialize the global async engine and sessionmaker.

    Args:
        settings: Application settings providing `database_url`.

    Raises:
        ValueError: If `database_url` is empty.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        # Already initialized (idempotent).
        return

    _engine = build_engine(settings)
    _sessionmaker = make_sessionmaker(_engine)


async def dispose_engine() -> None:
    """Dispose the global engine at shutdown."""
    global _engine, _sessionmaker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None


def get_engine() -> AsyncEngine:
    """Return the initialized global engine.

    Raises:
        RuntimeError: If the engine is not yet initialized.
    """
    if _engine is None:
        raise RuntimeError("DB engine not initialized (call init_engine_and_sessionmaker)")
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the initialized async sessionmaker.

    Returns:
        async_sessionmaker[AsyncSession]: The global session factory.

    Raises:
        RuntimeError: If the sessionmaker is not yet initialized.
    """
    if _sessionmaker is None:
        raise RuntimeError("DB sessionmaker not initialized (call init_engine_and_sessionmaker)")
    return _sessionmaker


async def create_schema(engine: AsyncEngine) -> None:
    """Create all mapped tables that do not exist yet.

    Intended for local development, tests and the ``init-db`` command;
    managed databases are migrated with Alembic instead.

    Args:
        engine: Target engine.
    """
    # Registers CategoryModel on Base.metadata.
    from personal_blog.infrastructure.database.models import blog  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
