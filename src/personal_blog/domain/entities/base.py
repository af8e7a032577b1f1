# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Audited Entity Base (Domain Layer).

Purpose:
    Mutable base for every persistent object. Supplies surrogate identity, an
    optimistic-concurrency version, creation/update timestamps and a
    soft-delete flag, together with identity-based equality.

Layer:
    domain/entities

Notes:
    The lifecycle hooks (:meth:`AuditedEntity.on_create`,
    :meth:`AuditedEntity.on_update`) are plain methods. The persistence
    adapter calls them right before an insert and before every update; no
    ORM callback registration is involved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Final

#: Hash shared by all unsaved entities; equality still falls back to identity.
NEW_ENTITY_HASH: Final[int] = 31

_CLOCK_TICK: Final[timedelta] = timedelta(microseconds=1)

_TIMESTAMP_FIELDS: Final[frozenset[str]] = frozenset({"created_at", "updated_at"})


def utc_now() -> datetime:
    """Return the current UTC time with timezone info."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` in UTC; naive timestamps are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(eq=False, repr=False, kw_only=True)
class AuditedEntity:
    """Base class for audited, soft-deletable entities.

    Attributes:
        id: Surrogate identity. ``None`` until the entity is first persisted.
        version: Optimistic-concurrency counter maintained by the persistence
            layer. ``None`` until first persisted.
        created_at: UTC timestamp set once, on first persist. Naive values
            are stored as UTC.
        updated_at: UTC timestamp set on first persist and refreshed on every
            update. Naive values are stored as UTC.
        deleted: Soft-delete flag, always stored as a ``bool``; ``None`` reads
            as ``False``.
    """

    id: int | None = None
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "deleted":
            value = False if value is None else bool(value)
        elif name in _TIMESTAMP_FIELDS:
            value = as_utc(value)
        super().__setattr__(name, value)

    def __post_init__(self) -> None:
        """Invariant hook for subclasses.

        Field normalization happens in ``__setattr__`` so it also covers
        assignments made after construction.
        """

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def is_new(self) -> bool:
        """Return True if the entity has never been persisted."""
        return self.id is None

    @property
    def is_deleted(self) -> bool:
        """Return True if the entity is soft-deleted."""
        return self.deleted

    # ------------------------------------------------------------------
    # Soft delete
    # ------------------------------------------------------------------

    def mark_as_deleted(self) -> None:
        """Soft-delete the entity. Repeated calls have no further effect."""
        self.deleted = True

    def restore(self) -> None:
        """Undo a soft delete. Repeated calls have no further effect."""
        self.deleted = False

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_create(self) -> None:
        """Pre-persist hook.

        Stamps ``created_at`` (only when absent) and ``updated_at`` with the
        same instant. An already-set ``created_at`` is never overwritten.
        """
        now = utc_now()
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
        if self.created_at > self.updated_at:
            self.updated_at = self.created_at

    def on_update(self) -> None:
        """Pre-update hook.

        Refreshes ``updated_at`` to a value strictly later than the previous
        one; ``created_at`` is left untouched.
        """
        now = utc_now()
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + _CLOCK_TICK
        self.updated_at = now

    def mark_persisted(self, entity_id: int, version: int | None) -> None:
        """Record the identity and version assigned by the persistence layer.

        Args:
            entity_id: Primary key of the stored row.
            version: Current optimistic-locking version of the stored row.

        Raises:
            ValueError: If the entity already carries a different identity.
        """
        if self.id is not None and self.id != entity_id:
            raise ValueError(
                f"{type(self).__name__} already has id={self.id}; refusing to reassign "
                f"it to {entity_id}"
            )
        self.id = entity_id
        self.version = version

    # ------------------------------------------------------------------
    # Object protocol
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, AuditedEntity) or type(self) is not type(other):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            return NEW_ENTITY_HASH
        return hash(self.id)

    def _repr_fields(self) -> dict[str, Any]:
        """Return subtype identifying fields for ``__repr__`` (never secrets)."""
        return {}

    def __repr__(self) -> str:
        fields: dict[str, Any] = {
            "id": self.id,
            "version": self.version,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted": self.deleted,
        }
        fields.update(self._repr_fields())
        body = ", ".join(f"{key}={value!r}" for key, value in fields.items())
        return f"{type(self).__name__}({body})"
