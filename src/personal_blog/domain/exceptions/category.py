# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Category Hierarchy Exceptions.

Synopsis:
    Errors raised when a mutation would break the category tree. Both are
    immediate, state-preserving rejections of the single call that triggered
    them; nothing is retried.

Design:
    * Inherit from :class:`DomainError` for a stable ``code``.
    * Also inherit from :class:`ValueError` so callers that only care about
      "bad argument" can catch the builtin.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from personal_blog.domain.exceptions.base import DomainError


class CategoryHierarchyError(DomainError, ValueError):
    """Base class for parent/child linkage failures.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "CATEGORY_HIERARCHY_ERROR"


class InvalidCategoryChildError(CategoryHierarchyError):
    """A child argument was missing (``None``).

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "CATEGORY_CHILD_INVALID"


class CategoryCycleError(CategoryHierarchyError):
    """Linking the child would make a category its own descendant.

    Raised for self-reference as well as for adding an ancestor under one of
    its descendants.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "CATEGORY_CYCLE"


class DeletedParentError(CategoryHierarchyError):
    """The operation would leave an active category under a deleted parent."""

    code = "CATEGORY_PARENT_DELETED"
