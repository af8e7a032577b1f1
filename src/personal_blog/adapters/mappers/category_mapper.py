# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Category row <-> entity mapping.

Purpose:
    Convert :class:`CategoryModel` rows into linked :class:`Category` graphs
    and copy entity state back onto rows. The mapper owns no session and
    performs no I/O.

Layer:
    adapters/mappers

Notes:
    sqlite returns naive datetimes even for ``DateTime(timezone=True)``
    columns; the entity stores them as UTC on assignment.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from personal_blog.domain.entities.category import Category
from personal_blog.infrastructure.database.models.blog import CategoryModel

__all__ = ["CategoryForest", "apply_to_row", "link_forest", "to_entity", "to_row"]


def to_entity(row: CategoryModel) -> Category:
    """Build an unlinked :class:`Category` from ``row``.

    Args:
        row: Loaded ORM row.

    Returns:
        Category: Entity carrying the row's identity, version and audit state.
    """
    return Category(
        name=row.name,
        slug=row.slug,
        description=row.description,
        color_code=row.color_code,
        display_order=row.display_order,
        meta_title=row.meta_title,
        meta_description=row.meta_description,
        meta_keywords=row.meta_keywords,
        id=row.id,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted=row.deleted,
    )


def apply_to_row(category: Category, row: CategoryModel) -> None:
    """Copy mutable entity state onto ``row``.

    ``id`` and ``version`` are never copied; the database and the mapper's
    ``version_id_col`` own them.

    Args:
        category: Source entity. Its parent, if any, must already have an id.
        row: Target ORM row.
    """
    row.name = category.name  # type: ignore[assignment]
    row.slug = category.slug  # type: ignore[assignment]
    row.description = category.description
    row.color_code = category.color_code
    row.display_order = category.display_order or 0
    row.meta_title = category.meta_title
    row.meta_description = category.meta_description
    row.meta_keywords = category.meta_keywords
    row.parent_id = category.parent.id if category.parent is not None else None
    row.deleted = category.is_deleted
    row.created_at = category.created_at  # type: ignore[assignment]
    row.updated_at = category.updated_at  # type: ignore[assignment]


def to_row(category: Category) -> CategoryModel:
    """Return a new, transient :class:`CategoryModel` for ``category``."""
    row = CategoryModel()
    apply_to_row(category, row)
    return row


@dataclass(frozen=True)
class CategoryForest:
    """Linked categories produced by :func:`link_forest`.

    Attributes:
        roots: Root categories in load order.
        by_id: Every reachable category keyed by id.
    """

    roots: list[Category]
    by_id: Mapping[int, Category]

    def __post_init__(self) -> None:
        """Reject forests whose index disagrees with the root list."""
        for root in self.roots:
            if root.id not in self.by_id:
                raise ValueError(f"root {root.id} missing from forest index")


def link_forest(rows: Iterable[CategoryModel]) -> CategoryForest:
    """Map ``rows`` to entities and link them through ``parent_id``.

    Rows whose parent is absent from ``rows`` (for example a child of a
    filtered-out deleted parent) are dropped together with their subtrees.

    Args:
        rows: Category rows, in any order.

    Returns:
        CategoryForest: Roots and an id index of every reachable node.
    """
    rows = list(rows)
    entities = {row.id: to_entity(row) for row in rows}

    roots: list[Category] = []
    for row in rows:
        node = entities[row.id]
        if row.parent_id is None:
            roots.append(node)
            continue
        parent = entities.get(row.parent_id)
        if parent is not None:
            parent.add_child(node)

    reachable: dict[int, Category] = {}
    stack = list(roots)
    while stack:
        node = stack.pop()
        reachable[node.id] = node  # type: ignore[index]
        stack.extend(node.children)

    return CategoryForest(roots=roots, by_id=reachable)
