"""Domain entity exports."""

from __future__ import annotations

from .base import AuditedEntity
from .category import DEFAULT_COLOR_CODE, Category

__all__ = ["DEFAULT_COLOR_CODE", "AuditedEntity", "Category"]
