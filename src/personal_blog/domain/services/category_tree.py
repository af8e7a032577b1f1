# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Category tree operations.

Purpose:
    Pure, in-memory operations over linked :class:`Category` nodes: ordered
    traversal, subtree soft-delete/restore, breadcrumbs and re-parenting.

Layer:
    domain/services

Notes:
    * The entity only exposes ``children``; cascading a soft delete to all
      descendants is a traversal built here, on top of that contract.
    * Traversal order is deterministic: ``(display_order, name, id)``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from personal_blog.domain.entities.category import Category


def _sibling_key(category: Category) -> tuple[int, str, int]:
    return (
        category.display_order or 0,
        (category.name or "").casefold(),
        category.id if category.id is not None else -1,
    )


def sorted_children(category: Category) -> list[Category]:
    """Return the children of ``category`` in display order.

    Args:
        category: Parent node.

    Returns:
        list[Category]: Children sorted by display order, then name, then id.
    """
    return sorted(category.children or (), key=_sibling_key)


def sort_siblings(categories: Iterable[Category]) -> list[Category]:
    """Return ``categories`` sorted with the sibling ordering."""
    return sorted(categories, key=_sibling_key)


def iter_subtree(root: Category) -> Iterator[Category]:
    """Yield ``root`` and every descendant in pre-order.

    Args:
        root: Node to start from.

    Yields:
        Category: ``root`` first, then each child subtree in display order.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(sorted_children(node)))


def soft_delete_subtree(root: Category) -> list[Category]:
    """Soft-delete ``root`` and all of its descendants.

    Args:
        root: Top of the subtree to delete.

    Returns:
        list[Category]: Nodes whose flag changed (already-deleted nodes are
        left out).
    """
    changed: list[Category] = []
    for node in iter_subtree(root):
        if not node.is_deleted:
            node.mark_as_deleted()
            changed.append(node)
    return changed


def restore_subtree(root: Category) -> list[Category]:
    """Restore ``root`` and all of its descendants.

    Args:
        root: Top of the subtree to restore.

    Returns:
        list[Category]: Nodes whose flag changed.
    """
    changed: list[Category] = []
    for node in iter_subtree(root):
        if node.is_deleted:
            node.restore()
            changed.append(node)
    return changed


def breadcrumb(category: Category) -> list[Category]:
    """Return the path from the root down to ``category`` (inclusive)."""
    path = [category, *category.ancestors()]
    path.reverse()
    return path


def move_category(category: Category, new_parent: Category | None) -> None:
    """Re-parent ``category``.

    Args:
        category: Node to move.
        new_parent: New parent, or ``None`` to turn ``category`` into a root.

    Raises:
        CategoryCycleError: If ``new_parent`` is ``category`` itself or one of
            its descendants. The tree is left unchanged in that case.
    """
    if new_parent is None:
        if category.parent is not None:
            category.parent.remove_child(category)
        return
    new_parent.add_child(category)


def next_display_order(siblings: Iterable[Category]) -> int:
    """Return the display order that places a new node after ``siblings``."""
    orders = [sibling.display_order or 0 for sibling in siblings]
    return max(orders) + 1 if orders else 0
