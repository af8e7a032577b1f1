# tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from personal_blog.adapters.uow.sqlalchemy_uow import sqlalchemy_uow_factory
from personal_blog.application.uow import UnitOfWorkFactory
from personal_blog.config.settings import Environment, Settings, get_settings
from personal_blog.infrastructure.database.session import (
    build_engine,
    create_schema,
    make_sessionmaker,
)


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio only (aiosqlite is asyncio-bound)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Make every test see the environment it sets up."""
    get_settings.cache_clear()


@pytest.fixture
def db_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway sqlite file."""
    return Settings(
        environment=Environment.TEST,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'blog.db'}",
    )


@pytest.fixture
async def engine(db_settings: Settings) -> AsyncIterator[AsyncEngine]:
    """Engine with the schema created."""
    eng = build_engine(db_settings)
    await create_schema(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_sessionmaker(engine)


@pytest.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session whose work is rolled back after the test."""
    async with session_factory() as s:
        try:
            yield s
        finally:
            await s.rollback()


@pytest.fixture
def uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWorkFactory:
    return sqlalchemy_uow_factory(session_factory)
