# src/personal_blog/domain/exceptions/base.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Base Domain Exceptions.

Summary:
    Canonical base class for domain/application exceptions. Every error the
    core raises carries a stable ``code`` so outer surfaces (CLI, logs) can
    report it deterministically.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain/application exceptions.

    Attributes:
        code:
            Stable error code suitable for exit statuses, logs and metrics.
        details:
            Optional machine-readable diagnostic payload.
    """

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        """Initialize a DomainError instance.

        Args:
            message:
                Human-readable error message, safe to show to operators.
            details:
                Optional structured diagnostic payload for logs.
        """
        super().__init__(message)
        self.details: dict[str, Any] = details or {}
