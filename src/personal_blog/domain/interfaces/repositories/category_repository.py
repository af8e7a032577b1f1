# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Domain-facing interface for category repositories.

This module defines the capabilities the application layer needs from a
category store. Implementations return fully linked :class:`Category`
graphs (``parent``/``children`` resolved) so tree invariants can be checked
in memory.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from personal_blog.domain.entities.category import Category


class CategoryRepository(Protocol):
    """Domain-level contract for category repositories."""

    async def get(self, category_id: int, *, include_deleted: bool = False) -> Category | None:
        """Return the category with ``category_id`` linked into its tree.

        Args:
            category_id: Primary key.
            include_deleted: Also return soft-deleted categories.

        Returns:
            The category, or ``None`` if missing (or deleted and not requested).
        """

        raise NotImplementedError

    async def find_by_slug(self, slug: str) -> Category | None:
        """Return the active category with ``slug``, if any."""

        raise NotImplementedError

    async def exists_by_slug(self, slug: str, *, exclude_id: int | None = None) -> bool:
        """Return True if any category other than ``exclude_id`` uses ``slug``.

        Soft-deleted categories count: slugs stay reserved until purged.
        """

        raise NotImplementedError

    async def find_roots(self) -> Sequence[Category]:
        """Return active root categories in display order."""

        raise NotImplementedError

    async def find_children(self, parent_id: int) -> Sequence[Category]:
        """Return active children of ``parent_id`` in display order."""

        raise NotImplementedError

    async def load_forest(self, *, include_deleted: bool = False) -> Sequence[Category]:
        """Return every root with its subtree linked in memory.

        Args:
            include_deleted: Keep soft-deleted nodes in the forest.
        """

        raise NotImplementedError

    async def max_display_order(self, parent_id: int | None) -> int | None:
        """Return the highest display order among active siblings under ``parent_id``."""

        raise NotImplementedError

    async def search(self, term: str, *, include_description: bool = True) -> Sequence[Category]:
        """Return active categories whose name (or description) contains ``term``.

        Args:
            term: Case-insensitive substring to look for.
            include_description: Also match against ``description``.
        """

        raise NotImplementedError

    async def find_needing_seo(self) -> Sequence[Category]:
        """Return active categories missing a meta title or meta description."""

        raise NotImplementedError

    async def save(self, category: Category) -> Category:
        """Insert or update ``category`` (and any unsaved ancestors).

        Raises:
            ConcurrencyConflictError: If the carried version is stale.
            DuplicateSlugError: If another category already holds the slug.
            PersistenceError: On unexpected database failures.
        """

        raise NotImplementedError

    async def save_all(self, categories: Sequence[Category]) -> None:
        """Persist ``categories`` in order (parents before children)."""

        raise NotImplementedError

    async def count_active(self) -> int:
        """Return the number of categories that are not soft-deleted."""

        raise NotImplementedError

    async def count_deleted(self) -> int:
        """Return the number of soft-deleted categories."""

        raise NotImplementedError
