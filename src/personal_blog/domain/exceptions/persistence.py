# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Persistence-facing Domain Exceptions.

Synopsis:
    Errors surfaced by repositories and application services. Adapters
    translate driver/ORM failures into these so the application layer never
    sees SQLAlchemy types.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from personal_blog.domain.exceptions.base import DomainError


class EntityNotFoundError(DomainError):
    """Requested entity does not exist (or is soft-deleted).

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "ENTITY_NOT_FOUND"


class ConcurrencyConflictError(DomainError):
    """The stored version no longer matches the version the caller loaded.

    Typical causes:
        * Another writer persisted the same row after it was read.
        * A stale in-memory entity was saved twice.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "CONCURRENCY_CONFLICT"


class DuplicateSlugError(DomainError):
    """Another category (active or soft-deleted) already uses the slug.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "CATEGORY_SLUG_TAKEN"


class PersistenceError(DomainError):
    """Unexpected database failure.

    Attributes:
        code: Stable, machine-readable error code.
    """

    code = "PERSISTENCE_ERROR"
