# src/personal_blog/application/services/category_service.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Category application service.

Purpose:
    Use cases over the category hierarchy: create, move, soft delete,
    restore, breadcrumb and tree reads. Each call runs in its own unit of
    work; writes commit on success and roll back on any error.

Layer:
    application

Notes:
    - Tree rules (cycle rejection, cascade traversal) live in the domain
      (``Category`` and ``domain.services.category_tree``); this service only
      loads, delegates, persists and logs.
    - Concrete repositories are reached through the UnitOfWork to preserve
      layering.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from personal_blog.application.uow import UnitOfWork, UnitOfWorkFactory, run_in_uow
from personal_blog.domain.entities.category import Category
from personal_blog.domain.exceptions.category import DeletedParentError
from personal_blog.domain.exceptions.persistence import DuplicateSlugError, EntityNotFoundError
from personal_blog.domain.interfaces.repositories.category_repository import CategoryRepository
from personal_blog.domain.services import category_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateCategoryRequest:
    """Input for :meth:`CategoryService.create_category`.

    Attributes:
        name: Display name.
        slug: URL-friendly identifier; must be unused.
        parent_id: Optional id of an active parent category.
        description: Optional description.
        color_code: Optional UI color; the entity default applies when omitted.
        display_order: Optional rank; defaults to the end of the sibling list.
        meta_title: Optional SEO title.
        meta_description: Optional SEO description.
        meta_keywords: Optional SEO keywords.
    """

    name: str
    slug: str
    parent_id: int | None = None
    description: str | None = None
    color_code: str | None = None
    display_order: int | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None

    def __post_init__(self) -> None:
        """Reject blank names and slugs."""
        if not self.name or not self.name.strip():
            raise ValueError("name must not be blank")
        if not self.slug or not self.slug.strip():
            raise ValueError("slug must not be blank")


async def _require(
    repo: CategoryRepository,
    category_id: int,
    *,
    include_deleted: bool = False,
) -> Category:
    category = await repo.get(category_id, include_deleted=include_deleted)
    if category is None:
        raise EntityNotFoundError(
            "Category not found",
            details={"category_id": category_id},
        )
    return category


class CategoryService:
    """Application service for the category hierarchy.

    Args:
        uow_factory: Callable returning a fresh, unopened UnitOfWork.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def create_category(self, req: CreateCategoryRequest) -> Category:
        """Create a category, optionally under an existing parent.

        Raises:
            DuplicateSlugError: If the slug is already used.
            EntityNotFoundError: If ``parent_id`` is missing or deleted.
        """

        async def _create(uow: UnitOfWork) -> Category:
            repo = uow.categories
            if await repo.exists_by_slug(req.slug):
                raise DuplicateSlugError(
                    "Category slug already in use",
                    details={"slug": req.slug},
                )

            parent = None
            if req.parent_id is not None:
                parent = await _require(repo, req.parent_id)

            display_order = req.display_order
            if display_order is None:
                current = await repo.max_display_order(req.parent_id)
                display_order = 0 if current is None else current + 1

            category = Category(
                req.name,
                req.slug,
                req.description,
                color_code=req.color_code,
                display_order=display_order,
                meta_title=req.meta_title,
                meta_description=req.meta_description,
                meta_keywords=req.meta_keywords,
                parent=parent,
            )
            return await repo.save(category)

        category = await run_in_uow(self._uow_factory(), _create)
        logger.info(
            "category.created",
            extra={
                "extra": {
                    "category_id": category.id,
                    "slug": category.slug,
                    "parent_id": req.parent_id,
                }
            },
        )
        return category

    async def move_category(self, category_id: int, new_parent_id: int | None) -> Category:
        """Re-parent a category; ``None`` turns it into a root.

        The moved category is appended after its new siblings.

        Raises:
            EntityNotFoundError: If either category is missing or deleted.
            CategoryCycleError: If the new parent is the category itself or
                one of its descendants.
        """

        async def _move(uow: UnitOfWork) -> tuple[Category, int | None]:
            repo = uow.categories
            category = await _require(repo, category_id)
            previous_parent_id = category.parent.id if category.parent is not None else None

            new_parent = None
            if new_parent_id is not None:
                new_parent = await _require(repo, new_parent_id)

            if previous_parent_id == new_parent_id:
                return category, previous_parent_id

            siblings: Sequence[Category] = (
                list(new_parent.children) if new_parent is not None else await repo.find_roots()
            )
            category_tree.move_category(category, new_parent)
            category.display_order = category_tree.next_display_order(
                s for s in siblings if not s.is_deleted and s.id != category.id
            )
            return await repo.save(category), previous_parent_id

        category, previous_parent_id = await run_in_uow(self._uow_factory(), _move)
        logger.info(
            "category.moved",
            extra={
                "extra": {
                    "category_id": category.id,
                    "from_parent_id": previous_parent_id,
                    "to_parent_id": new_parent_id,
                }
            },
        )
        return category

    async def delete_category(self, category_id: int) -> list[Category]:
        """Soft-delete a category together with its whole subtree.

        Returns:
            list[Category]: Categories whose flag changed, parents first.

        Raises:
            EntityNotFoundError: If the category is missing or already deleted.
        """

        async def _delete(uow: UnitOfWork) -> list[Category]:
            repo = uow.categories
            category = await _require(repo, category_id)
            changed = category_tree.soft_delete_subtree(category)
            await repo.save_all(changed)
            return changed

        changed = await run_in_uow(self._uow_factory(), _delete)
        logger.info(
            "category.deleted",
            extra={"extra": {"category_id": category_id, "affected": len(changed)}},
        )
        return changed

    async def restore_category(self, category_id: int, *, cascade: bool = False) -> list[Category]:
        """Undo a soft delete.

        Args:
            category_id: Category to restore.
            cascade: Also restore every deleted descendant.

        Returns:
            list[Category]: Categories whose flag changed (empty when the
            category was not deleted).

        Raises:
            EntityNotFoundError: If the category does not exist.
            DeletedParentError: If the parent is still soft-deleted.
        """

        async def _restore(uow: UnitOfWork) -> list[Category]:
            repo = uow.categories
            category = await _require(repo, category_id, include_deleted=True)
            if category.parent is not None and category.parent.is_deleted:
                raise DeletedParentError(
                    "Restore the parent category first",
                    details={"category_id": category_id, "parent_id": category.parent.id},
                )

            if cascade:
                changed = category_tree.restore_subtree(category)
            elif category.is_deleted:
                category.restore()
                changed = [category]
            else:
                changed = []
            await repo.save_all(changed)
            return changed

        changed = await run_in_uow(self._uow_factory(), _restore)
        logger.info(
            "category.restored",
            extra={
                "extra": {
                    "category_id": category_id,
                    "cascade": cascade,
                    "affected": len(changed),
                }
            },
        )
        return changed

    async def get_breadcrumb(self, category_id: int) -> list[Category]:
        """Return the path from the root down to the category (inclusive).

        Raises:
            EntityNotFoundError: If the category is missing or deleted.
        """
        async with self._uow_factory() as uow:
            category = await _require(uow.categories, category_id)
            return category_tree.breadcrumb(category)

    async def get_tree(self) -> Sequence[Category]:
        """Return active root categories with their active subtrees linked."""
        async with self._uow_factory() as uow:
            return await uow.categories.load_forest(include_deleted=False)

    async def search_categories(
        self, term: str, *, include_description: bool = True
    ) -> Sequence[Category]:
        """Return active categories whose name (or description) contains ``term``.

        Args:
            term: Case-insensitive search text; surrounding whitespace is ignored.
            include_description: Also match against descriptions.

        Raises:
            ValueError: If ``term`` is blank.
        """
        needle = term.strip()
        if not needle:
            raise ValueError("search term must not be blank")
        async with self._uow_factory() as uow:
            return await uow.categories.search(needle, include_description=include_description)

    async def find_categories_needing_seo(self) -> Sequence[Category]:
        """Return active categories missing a meta title or meta description."""
        async with self._uow_factory() as uow:
            return await uow.categories.find_needing_seo()
