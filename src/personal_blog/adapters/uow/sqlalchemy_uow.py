# src/personal_blog/adapters/uow/sqlalchemy_uow.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""SQLAlchemy-backed Unit of Work implementation.

Purpose:
    Concrete implementation of the application-layer UnitOfWork protocol
    using SQLAlchemy's AsyncSession. One unit of work owns one session (and
    so one transaction) and the category repository bound to it.

Layer:
    adapters/uow
"""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from personal_blog.adapters.repositories.category_repository import (
    SqlAlchemyCategoryRepository,
)
from personal_blog.application.uow import UnitOfWork, UnitOfWorkFactory


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy-based UnitOfWork implementation.

    Intended to be used via:

        async with SqlAlchemyUnitOfWork(session_factory=factory) as uow:
            category = await uow.categories.get(7)
            ...
            await uow.commit()

    Leaving the block without :meth:`commit` discards the transaction.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        category_repo_factory: Callable[[AsyncSession], SqlAlchemyCategoryRepository] | None = None,
    ) -> None:
        """Initialize the UnitOfWork.

        Args:
            session_factory:
                Factory for creating new AsyncSession instances.
            category_repo_factory:
                Optional factory building the category repository from the
                active session. Defaults to :class:`SqlAlchemyCategoryRepository`.
        """
        self._session_factory = session_factory
        self._category_repo_factory = category_repo_factory or (
            lambda s: SqlAlchemyCategoryRepository(session=s)
        )
        self._session: AsyncSession | None = None
        self._categories: SqlAlchemyCategoryRepository | None = None
        self._committed = False
        self._rolled_back = False

    # ------------------------------------------------------------------
    # Async context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Enter the UnitOfWork context and open a new AsyncSession.

        Raises:
            RuntimeError: If a session is already active (nested usage).
        """
        if self._session is not None:
            raise RuntimeError("UnitOfWork is already active; nested usage is not supported.")

        self._session = self._session_factory()
        self._committed = False
        self._rolled_back = False
        self._categories = None
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Exit the UnitOfWork context.

        Behavior:
            * Rolls back unless the transaction was already committed or
              rolled back (this covers both errors and a missing commit).
            * Closes the AsyncSession and drops the cached repository.

        Returns:
            Always returns None; exceptions are propagated.
        """
        try:
            if not self._committed and not self._rolled_back:
                await self.rollback()
        finally:
            if self._session is not None:
                await self._session.close()
                self._session = None
            self._categories = None
        return None

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    async def commit(self) -> None:
        """Commit the current transaction if active.

        No-op if the UnitOfWork was already committed or rolled back.

        Raises:
            RuntimeError: If called without an active session.
        """
        if self._session is None:
            raise RuntimeError("Cannot commit: UnitOfWork has no active session.")

        if self._committed or self._rolled_back:
            return

        await self._session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Roll back the current transaction if active.

        No-op if already rolled back or committed, or if no session exists.
        """
        if self._session is None:
            return

        if self._rolled_back or self._committed:
            return

        await self._session.rollback()
        self._rolled_back = True

    # ------------------------------------------------------------------
    # Repository resolution
    # ------------------------------------------------------------------

    @property
    def categories(self) -> SqlAlchemyCategoryRepository:
        """Return the category repository bound to the active session.

        Raises:
            RuntimeError: If accessed outside of an active UnitOfWork context.
        """
        if self._session is None:
            raise RuntimeError(
                "categories accessed outside of an active UnitOfWork scope. "
                "Use 'async with uow:' before requesting repositories.",
            )
        if self._categories is None:
            self._categories = self._category_repo_factory(self._session)
        return self._categories


def sqlalchemy_uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> UnitOfWorkFactory:
    """Return a factory producing fresh units of work over ``session_factory``."""
    return lambda: SqlAlchemyUnitOfWork(session_factory=session_factory)
