# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Declarative Base and persistence mixins for the blog core.

This module defines:
    - A project-wide SQLAlchemy Declarative Base with deterministic naming
      conventions (for stable Alembic diffs).
    - Persistence mixins mirroring :class:`AuditedEntity`: integer identity,
      audit timestamps (UTC), optimistic locking and a soft-delete flag.
    - A safe ``__repr__`` mixin.

Design Goals:
    * Persistence-only: the audit rules themselves live on the domain entity;
      these columns just store what the entity computed.
    * Optimistic locking uses SQLAlchemy's ``version_id_col`` so every UPDATE
      carries ``WHERE version = :loaded_version`` and bumps the counter.
    * Schema placement is handled at engine level (``schema_translate_map``),
      so tables are declared schema-less and also run on sqlite.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, Integer, MetaData, false
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

__all__ = [
    "metadata",
    "Base",
    "IdentityMixin",
    "AuditTimestampMixin",
    "OptimisticLockingMixin",
    "SoftDeleteMixin",
    "ReprMixin",
]

#: Deterministic naming conventions for Alembic-friendly diffs.
#: Ref: https://alembic.sqlalchemy.org/en/latest/naming.html
NAMING_CONVENTIONS: dict[str, str] = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTIONS)

#: BIGINT on real databases, INTEGER on sqlite (required for rowid autoincrement).
IdType = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Declarative Base for all ORM models."""

    metadata = metadata


class IdentityMixin:
    """Mixin providing an autoincrement integer primary key ``id``."""

    id: Mapped[int] = mapped_column(IdType, primary_key=True, autoincrement=True)


class AuditTimestampMixin:
    """Mixin providing ``created_at`` and ``updated_at`` columns.

    Values are stamped by the entity's lifecycle hooks before each write; the
    server default only covers rows written outside the ORM.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class OptimisticLockingMixin:
    """Mixin providing an integer ``version`` column used as ``version_id_col``."""

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    @declared_attr.directive
    def __mapper_args__(cls) -> dict[str, Any]:
        """Register ``version`` as the mapper's optimistic-locking column."""
        return {"version_id_col": cls.__table__.c.version}  # type: ignore[attr-defined]


class SoftDeleteMixin:
    """Mixin providing a non-null ``deleted`` flag for soft deletes."""

    deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        index=True,
    )


class ReprMixin:
    """Mixin providing a concise ``__repr__`` built from column values."""

    def __repr__(self) -> str:
        """Return a short debug representation of the row."""
        table = getattr(self, "__table__", None)
        names = sorted(table.columns.keys()) if table is not None else []
        attrs = [f"{name}={self.__dict__.get(name)!r}" for name in names]
        return f"{type(self).__name__}({', '.join(attrs)})"
