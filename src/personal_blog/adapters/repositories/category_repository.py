# src/personal_blog/adapters/repositories/category_repository.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""
Category Repository (SQLAlchemy).

Purpose:
    Concrete SQLAlchemy implementation of the domain ``CategoryRepository``
    contract. Reads return linked :class:`Category` graphs; writes run the
    entity's lifecycle hooks and rely on the mapper's ``version_id_col`` for
    optimistic locking.

Layer:
    adapters

Notes:
    * Every read of a node loads the whole ``categories`` table so parent and
      children links are complete. Category trees of a personal blog are
      small; revisit with a recursive CTE if that stops holding.
    * Repositories never commit; the unit of work owns the transaction.
    * ``StaleDataError`` becomes ``ConcurrencyConflictError``, a violation of
      the slug unique constraint becomes ``DuplicateSlugError``, and any other
      ``SQLAlchemyError`` becomes ``PersistenceError``.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from personal_blog.adapters.mappers.category_mapper import (
    CategoryForest,
    apply_to_row,
    link_forest,
    to_row,
)
from personal_blog.adapters.repositories.base_repository import BaseRepository
from personal_blog.domain.entities.category import Category
from personal_blog.domain.exceptions.persistence import (
    ConcurrencyConflictError,
    DuplicateSlugError,
    EntityNotFoundError,
    PersistenceError,
)
from personal_blog.domain.services.category_tree import sort_siblings, sorted_children
from personal_blog.infrastructure.database.models.blog import CategoryModel

#: Matches the constraint name (PostgreSQL) and the column path (sqlite).
_SLUG_CONSTRAINT_MARKERS: tuple[str, ...] = ("uq_categories_slug", "categories.slug")


def _is_slug_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _SLUG_CONSTRAINT_MARKERS)


class SqlAlchemyCategoryRepository(BaseRepository[CategoryModel]):
    """SQLAlchemy-backed category repository."""

    model = CategoryModel

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session)

    # ------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------

    async def get(self, category_id: int, *, include_deleted: bool = False) -> Category | None:
        """Return the category with ``category_id`` linked into its full tree."""
        forest = await self._load_forest(include_deleted=True)
        node = forest.by_id.get(category_id)
        if node is None or (node.is_deleted and not include_deleted):
            return None
        return node

    async def find_by_slug(self, slug: str) -> Category | None:
        """Return the active category with ``slug``, if any."""
        stmt = select(CategoryModel.id).where(
            CategoryModel.slug == slug,
            CategoryModel.deleted.is_(False),
        )
        category_id = await self._session.scalar(stmt)
        if category_id is None:
            return None
        return await self.get(category_id)

    async def exists_by_slug(self, slug: str, *, exclude_id: int | None = None) -> bool:
        """Return True if any category other than ``exclude_id`` uses ``slug``."""
        stmt = select(func.count()).select_from(CategoryModel).where(CategoryModel.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(CategoryModel.id != exclude_id)
        return bool(await self._session.scalar(stmt))

    async def find_roots(self) -> Sequence[Category]:
        """Return active root categories in display order."""
        forest = await self._load_forest(include_deleted=False)
        return sort_siblings(forest.roots)

    async def find_children(self, parent_id: int) -> Sequence[Category]:
        """Return active children of ``parent_id`` in display order."""
        forest = await self._load_forest(include_deleted=False)
        parent = forest.by_id.get(parent_id)
        if parent is None:
            return []
        return sorted_children(parent)

    async def load_forest(self, *, include_deleted: bool = False) -> Sequence[Category]:
        """Return every root with its subtree linked in memory.

        Without ``include_deleted`` a soft-deleted node hides its whole
        subtree.
        """
        forest = await self._load_forest(include_deleted=include_deleted)
        return sort_siblings(forest.roots)

    async def max_display_order(self, parent_id: int | None) -> int | None:
        """Return the highest display order among active siblings under ``parent_id``."""
        parent_clause = (
            CategoryModel.parent_id.is_(None)
            if parent_id is None
            else CategoryModel.parent_id == parent_id
        )
        stmt = select(func.max(CategoryModel.display_order)).where(
            parent_clause,
            CategoryModel.deleted.is_(False),
        )
        return await self._session.scalar(stmt)

    async def search(self, term: str, *, include_description: bool = True) -> Sequence[Category]:
        """Return active categories whose name (or description) contains ``term``.

        Matching is case-insensitive and ``%`` or ``_`` in ``term`` match
        literally.
        """
        match = CategoryModel.name.icontains(term, autoescape=True)
        if include_description:
            match = or_(match, CategoryModel.description.icontains(term, autoescape=True))
        return await self._find_active_where(match)

    async def find_needing_seo(self) -> Sequence[Category]:
        """Return active categories with a blank meta title or meta description."""
        return await self._find_active_where(
            or_(
                CategoryModel.meta_title.is_(None),
                CategoryModel.meta_title == "",
                CategoryModel.meta_description.is_(None),
                CategoryModel.meta_description == "",
            )
        )

    # ------------------------------------------------------------------
    # WRITES
    # ------------------------------------------------------------------

    async def save(self, category: Category) -> Category:
        """Insert or update ``category`` (and any unsaved ancestors).

        Raises:
            EntityNotFoundError: If a persisted category's row is gone.
            ConcurrencyConflictError: If the carried version is stale.
            DuplicateSlugError: If another row already holds the slug.
            PersistenceError: On unexpected database failures.
        """
        try:
            await self._save(category)
        except StaleDataError as exc:
            raise ConcurrencyConflictError(
                "Category was modified concurrently",
                details={"category_id": category.id, "version": category.version},
            ) from exc
        except IntegrityError as exc:
            if _is_slug_violation(exc):
                raise DuplicateSlugError(
                    "Category slug is already in use",
                    details={"slug": category.slug},
                ) from exc
            raise PersistenceError(
                "Failed to persist category",
                details={"category_id": category.id, "reason": type(exc).__name__},
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(
                "Failed to persist category",
                details={"category_id": category.id, "reason": type(exc).__name__},
            ) from exc
        return category

    async def save_all(self, categories: Sequence[Category]) -> None:
        """Persist ``categories`` in order (parents before children)."""
        for category in categories:
            await self.save(category)

    async def _save(self, category: Category) -> None:
        parent = category.parent
        if parent is not None and parent.is_new:
            await self._save(parent)

        if category.is_new:
            category.on_create()
            row = to_row(category)
            self._session.add(row)
        else:
            row = await self._get_row(category)
            category.on_update()
            apply_to_row(category, row)

        await self._session.flush()
        category.mark_persisted(row.id, row.version)

    async def _get_row(self, category: Category) -> CategoryModel:
        row = await self._session.get(CategoryModel, category.id)
        if row is None:
            raise EntityNotFoundError(
                "Category no longer exists",
                details={"category_id": category.id},
            )
        if category.version is not None and row.version != category.version:
            raise ConcurrencyConflictError(
                "Category version is stale",
                details={
                    "category_id": category.id,
                    "expected_version": category.version,
                    "stored_version": row.version,
                },
            )
        return row

    async def _load_forest(self, *, include_deleted: bool) -> CategoryForest:
        stmt = select(CategoryModel)
        if not include_deleted:
            stmt = stmt.where(CategoryModel.deleted.is_(False))
        stmt = self.order_by_rank(stmt, CategoryModel.display_order, CategoryModel.id)
        return link_forest(await self.fetch_all(stmt))

    async def _find_active_where(self, clause: ColumnElement[bool]) -> list[Category]:
        stmt = select(CategoryModel.id).where(clause, CategoryModel.deleted.is_(False))
        stmt = self.order_by_rank(stmt, CategoryModel.display_order, CategoryModel.id)
        ids = list(await self._session.scalars(stmt))
        if not ids:
            return []
        forest = await self._load_forest(include_deleted=True)
        return [forest.by_id[category_id] for category_id in ids if category_id in forest.by_id]
