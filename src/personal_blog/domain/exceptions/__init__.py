"""Domain exception exports."""

from __future__ import annotations

from .base import DomainError
from .category import (
    CategoryCycleError,
    CategoryHierarchyError,
    DeletedParentError,
    InvalidCategoryChildError,
)
from .persistence import (
    ConcurrencyConflictError,
    DuplicateSlugError,
    EntityNotFoundError,
    PersistenceError,
)

__all__ = [
    "CategoryCycleError",
    "CategoryHierarchyError",
    "ConcurrencyConflictError",
    "DeletedParentError",
    "DomainError",
    "DuplicateSlugError",
    "EntityNotFoundError",
    "InvalidCategoryChildError",
    "PersistenceError",
]
