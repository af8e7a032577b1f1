# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Blog Models.

Purpose:
    SQLAlchemy models for blog content. Only categories are persisted by the
    core; the parent/child hierarchy is stored as a self-referencing
    ``parent_id`` foreign key.

Layer:
    infrastructure

Notes:
    Domain contracts live in
    ``personal_blog.domain.interfaces.repositories.category_repository``.
    Rows are mapped to :class:`~personal_blog.domain.entities.category.Category`
    by ``personal_blog.adapters.mappers.category_mapper``.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from personal_blog.infrastructure.database.models.base import (
    AuditTimestampMixin,
    Base,
    IdentityMixin,
    IdType,
    OptimisticLockingMixin,
    ReprMixin,
    SoftDeleteMixin,
)


class CategoryModel(
    IdentityMixin,
    AuditTimestampMixin,
    OptimisticLockingMixin,
    SoftDeleteMixin,
    ReprMixin,
    Base,
):
    """Persistence model for hierarchical blog categories.

    Attributes:
        name: Display name (max 100 chars).
        slug: Unique URL-friendly identifier (max 200 chars).
        description: Optional description (max 500 chars).
        color_code: UI hex color (``#RRGGBB`` or ``#RGB``).
        display_order: Rank among siblings.
        meta_title: Optional SEO title (max 70 chars).
        meta_description: Optional SEO description (max 160 chars).
        meta_keywords: Optional SEO keywords (max 255 chars).
        parent_id: Parent category id; ``NULL`` for roots.
    """

    __tablename__ = "categories"
    __table_args__ = (
        Index("idx_category_name", "name"),
        Index("idx_category_parent", "parent_id"),
        Index("idx_category_display_order", "display_order"),
    )

    name: Mapped[str] = mapped_column(String(length=100), nullable=False)
    slug: Mapped[str] = mapped_column(String(length=200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(length=500), nullable=True)
    color_code: Mapped[str | None] = mapped_column(String(length=7), nullable=True)
    display_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    meta_title: Mapped[str | None] = mapped_column(String(length=70), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(length=160), nullable=True)
    meta_keywords: Mapped[str | None] = mapped_column(String(length=255), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        IdType,
        ForeignKey("categories.id"),
        nullable=True,
    )
