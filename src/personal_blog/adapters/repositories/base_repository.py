# src/personal_blog/adapters/repositories/base_repository.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""
BaseRepository: soft-delete aware repository foundation.

Purpose:
    Shared mechanics for repositories over audited tables (``id``,
    ``version``, ``updated_at``, ``deleted`` columns):
      * Active/deleted filtered reads and counts.
      * Bulk soft delete and restore by id.
      * Fetch helpers (optional, all).
      * Deterministic ordering helper (PK tie-breaker).

Layer: adapters / repositories

Notes:
    * No business logic, no domain decisions.
    * Repositories never commit; the unit of work owns transactions.
    * Bulk soft delete/restore bypass entity hooks; they stamp
      ``updated_at`` and bump ``version`` in SQL so concurrent writers
      holding the old version still conflict.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

TModel = TypeVar("TModel")


class BaseRepository(Generic[TModel]):  # noqa: UP046
    """Base class for repositories over soft-deletable models.

    Subclasses set :attr:`model` to the mapped ORM class.
    """

    model: ClassVar[type[Any]]

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: Async SQLAlchemy session bound to the target database.
        """
        self._session: AsyncSession = session

    # ------------------------------------------------------------------
    # Timestamp / audit utilities
    # ------------------------------------------------------------------

    @staticmethod
    def utc_now() -> datetime:
        """Return current UTC time with timezone info."""
        return datetime.now(UTC)

    # ------------------------------------------------------------------
    # Deterministic ordering utilities
    # ------------------------------------------------------------------

    @staticmethod
    def order_by_rank(stmt: Select[Any], rank_col: Any, pk_col: Any) -> Select[Any]:
        """Apply ``rank ASC, pk ASC`` ordering."""
        return stmt.order_by(rank_col.asc(), pk_col.asc())

    # ------------------------------------------------------------------
    # Fetch helpers
    # ------------------------------------------------------------------

    async def fetch_optional(self, stmt: Select[Any]) -> TModel | None:
        """Execute a statement and return zero or one row."""
        res = await self._session.execute(stmt)
        return res.scalars().first()

    async def fetch_all(self, stmt: Select[Any]) -> list[TModel]:
        """Execute a statement and return all rows as a list."""
        res = await self._session.execute(stmt)
        return list(res.scalars().all())

    # ------------------------------------------------------------------
    # Soft-delete aware reads
    # ------------------------------------------------------------------

    async def find_all_active(self) -> list[TModel]:
        """Return every row that is not soft-deleted, ordered by id."""
        stmt = select(self.model).where(self.model.deleted.is_(False))
        return await self.fetch_all(stmt.order_by(self.model.id.asc()))

    async def find_all_deleted(self) -> list[TModel]:
        """Return every soft-deleted row, ordered by id."""
        stmt = select(self.model).where(self.model.deleted.is_(True))
        return await self.fetch_all(stmt.order_by(self.model.id.asc()))

    async def find_active_by_id(self, entity_id: int) -> TModel | None:
        """Return the row with ``entity_id`` unless it is soft-deleted."""
        stmt = select(self.model).where(
            self.model.id == entity_id,
            self.model.deleted.is_(False),
        )
        return await self.fetch_optional(stmt)

    async def exists_active_by_id(self, entity_id: int) -> bool:
        """Return True if a non-deleted row with ``entity_id`` exists."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.id == entity_id, self.model.deleted.is_(False))
        )
        return bool(await self._session.scalar(stmt))

    async def count_active(self) -> int:
        """Return the number of rows that are not soft-deleted."""
        stmt = select(func.count()).select_from(self.model).where(self.model.deleted.is_(False))
        return int(await self._session.scalar(stmt) or 0)

    async def count_deleted(self) -> int:
        """Return the number of soft-deleted rows."""
        stmt = select(func.count()).select_from(self.model).where(self.model.deleted.is_(True))
        return int(await self._session.scalar(stmt) or 0)

    # ------------------------------------------------------------------
    # Bulk soft delete / restore
    # ------------------------------------------------------------------

    async def soft_delete_by_id(self, entity_id: int) -> bool:
        """Flag the row with ``entity_id`` as deleted.

        Returns:
            bool: True if an active row was flagged, False otherwise.
        """
        return await self._set_deleted(entity_id, deleted=True)

    async def restore_by_id(self, entity_id: int) -> bool:
        """Clear the deleted flag on the row with ``entity_id``.

        Returns:
            bool: True if a deleted row was restored, False otherwise.
        """
        return await self._set_deleted(entity_id, deleted=False)

    async def _set_deleted(self, entity_id: int, *, deleted: bool) -> bool:
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, self.model.deleted.is_(not deleted))
            .values(
                deleted=deleted,
                updated_at=self.utc_now(),
                version=self.model.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        # Loaded rows are stale now; the next query or get() reloads them.
        self._session.expire_all()
        return bool(result.rowcount)  # type: ignore[attr-defined]
