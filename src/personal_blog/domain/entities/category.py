# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Hierarchical Category entity.

Purpose:
    Self-referential tree node for blog post categories. Each node owns its
    ``children`` set and keeps a non-owning back-reference to ``parent``.
    Both sides of the relation are updated together inside
    :meth:`Category.add_child` and :meth:`Category.remove_child`.

Layer:
    domain/entities

Notes:
    Equality and hashing come from :class:`AuditedEntity`: unsaved categories
    never compare equal to one another, even with identical names and slugs.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Final

from personal_blog.domain.entities.base import AuditedEntity
from personal_blog.domain.exceptions.category import CategoryCycleError, InvalidCategoryChildError

DEFAULT_COLOR_CODE: Final[str] = "#ffffff"


@dataclass(eq=False, repr=False)
class Category(AuditedEntity):
    """Blog category positioned in a parent/children hierarchy.

    Args:
        name: Display name.
        slug: URL-friendly identifier.
        description: Optional free-text description.
        color_code: UI hint; ``None`` falls back to ``DEFAULT_COLOR_CODE``.
        display_order: Rank among siblings; ``None`` falls back to ``0``.
        meta_title: Optional SEO title.
        meta_description: Optional SEO description.
        meta_keywords: Optional SEO keywords.
        parent: Optional parent category. When given at construction time the
            new node is linked through :meth:`add_child`.
        children: Child categories. Linked through :meth:`add_child` at
            construction time.
        blog_posts: Associated post references (opaque to this entity).

    Raises:
        CategoryCycleError: If the constructor arguments describe a cycle.
    """

    name: str | None = None
    slug: str | None = None
    description: str | None = None
    color_code: str | None = DEFAULT_COLOR_CODE
    display_order: int | None = 0
    meta_title: str | None = None
    meta_description: str | None = None
    meta_keywords: str | None = None
    parent: Category | None = None
    children: set[Category] = field(default_factory=set)
    blog_posts: set[Any] = field(default_factory=set)

    def __post_init__(self) -> None:
        """Apply defaults and link any constructor-supplied relatives."""
        super().__post_init__()
        if self.color_code is None:
            self.color_code = DEFAULT_COLOR_CODE
        if self.display_order is None:
            self.display_order = 0
        if self.blog_posts is None:
            self.blog_posts = set()

        initial_children = list(self.children or ())
        self.children = set()
        for child in initial_children:
            self.add_child(child)

        initial_parent, self.parent = self.parent, None
        if initial_parent is not None:
            initial_parent.add_child(self)

    # ------------------------------------------------------------------
    # Tree mutation
    # ------------------------------------------------------------------

    def add_child(self, child: Category | None) -> None:
        """Attach ``child`` under this category.

        A child that currently hangs under another parent is detached from it
        first. All checks run before any state changes. An absent
        ``children`` collection is replaced with a new set.

        Args:
            child: Category to attach.

        Raises:
            InvalidCategoryChildError: If ``child`` is ``None``.
            CategoryCycleError: If ``child`` is this category or one of its
                ancestors.
        """
        if child is None:
            raise InvalidCategoryChildError("Child category cannot be null")
        if child is self or child == self or self.is_descendant_of(child):
            raise CategoryCycleError(
                "Child category cannot be a descendant of this category",
                details={"parent_id": self.id, "child_id": child.id},
            )

        previous = child.parent
        if previous is not None and previous is not self:
            previous._discard_child(child)

        child.parent = self
        if self.children is None:
            self.children = set()
        if not self._holds(child):
            self.children.add(child)

    def remove_child(self, child: Category | None) -> None:
        """Detach ``child`` from this category.

        ``None`` and categories that are not current children are ignored.

        Args:
            child: Category to detach.
        """
        if child is None or not self._holds(child):
            return
        self._discard_child(child)
        child.parent = None

    # ------------------------------------------------------------------
    # Tree queries
    # ------------------------------------------------------------------

    @property
    def has_children(self) -> bool:
        """Return True if at least one child is attached; False when ``children`` is absent."""
        return bool(self.children)

    @property
    def is_root(self) -> bool:
        """Return True if the category has no parent."""
        return self.parent is None

    @property
    def depth(self) -> int:
        """Return the number of parent links between this node and its root."""
        return sum(1 for _ in self.ancestors())

    def ancestors(self) -> Iterator[Category]:
        """Yield the parent, grandparent, ... up to the root.

        Raises:
            CategoryCycleError: If the parent chain loops back on itself
                (only possible when ``parent`` was assigned directly).
        """
        visited = {id(self)}
        current = self.parent
        while current is not None:
            if id(current) in visited:
                raise CategoryCycleError(
                    "Parent chain loops back on itself",
                    details={"category_id": self.id},
                )
            visited.add(id(current))
            yield current
            current = current.parent

    def is_descendant_of(self, ancestor: Category) -> bool:
        """Return True if ``ancestor`` sits on this category's parent chain."""
        return any(node == ancestor for node in self.ancestors())

    # ------------------------------------------------------------------
    # Persistence support
    # ------------------------------------------------------------------

    def mark_persisted(self, entity_id: int, version: int | None) -> None:
        """Record identity/version and re-file this node in its parent's set.

        The hash of an entity changes when it first receives an id, so the
        parent's ``children`` set is rebuilt to keep membership lookups valid.

        Args:
            entity_id: Primary key of the stored row.
            version: Current optimistic-locking version of the stored row.
        """
        was_new = self.is_new
        super().mark_persisted(entity_id, version)
        if was_new and self.parent is not None:
            self.parent._reindex_children()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _holds(self, child: Category) -> bool:
        if not self.children:
            return False
        return child in self.children or any(existing is child for existing in self.children)

    def _discard_child(self, child: Category) -> None:
        self.children.discard(child)
        if any(existing is child for existing in self.children):
            # Stored under a stale hash (id assigned after insertion).
            kept = [existing for existing in self.children if existing is not child]
            self.children.clear()
            self.children.update(kept)

    def _reindex_children(self) -> None:
        if not self.children:
            return
        members = list(self.children)
        self.children.clear()
        self.children.update(members)

    def _repr_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "display_order": self.display_order,
            "parent_id": self.parent.id if self.parent is not None else None,
            "children_count": len(self.children) if self.children is not None else 0,
            "blog_posts_count": len(self.blog_posts) if self.blog_posts is not None else 0,
        }
