# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Unit of Work (Application Layer).

Purpose:
    Transaction boundary used by application services. A unit of work owns
    one database transaction and hands out the repositories bound to it.

    Infrastructure-agnostic: only Protocols and a helper live here. The
    SQLAlchemy implementation lives in ``personal_blog.adapters.uow``.

Layer:
    application
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Protocol, TypeVar, runtime_checkable

from personal_blog.domain.interfaces.repositories.category_repository import CategoryRepository

TResult = TypeVar("TResult")


@runtime_checkable
class UnitOfWork(Protocol):
    """Transactional scope exposing the category repository."""

    @property
    def categories(self) -> CategoryRepository:
        """Category repository bound to the active transaction."""
        raise NotImplementedError

    async def __aenter__(self) -> UnitOfWork:
        """Open the transactional scope."""
        raise NotImplementedError

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        """Close the transactional scope, rolling back on error."""
        raise NotImplementedError

    async def commit(self) -> None:
        """Commit pending changes."""
        raise NotImplementedError

    async def rollback(self) -> None:
        """Discard pending changes."""
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], UnitOfWork]


async def run_in_uow(  # noqa: UP047
    uow: UnitOfWork,
    fn: Callable[[UnitOfWork], Awaitable[TResult]],
) -> TResult:
    """Run ``fn`` inside ``uow``; commit on success, roll back on error.

    Args:
        uow: Unit of work providing the transaction.
        fn: Coroutine function receiving the active unit of work.

    Returns:
        TResult: Whatever ``fn`` returned.

    Raises:
        Exception: Anything raised by ``fn``, after rollback.
    """
    async with uow as tx:
        try:
            result = await fn(tx)
        except Exception:
            await tx.rollback()
            raise
        await tx.commit()
        return result
