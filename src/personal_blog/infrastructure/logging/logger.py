# src/personal_blog/infrastructure/logging/logger.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

One idempotent root configurator and a per-module logger factory. Log lines
are single JSON objects with stable keys (``ts``, ``level``, ``logger``,
``message``), the configured ``service`` name, exception fields and any
structured payload passed as ``extra={"extra": {...}}``.

Typical usage:
    configure_root_logging(service="personal-blog")
    log = get_json_logger(__name__)
    log.info("category.created", extra={"extra": {"category_id": 7}})
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Any

__all__ = ["JsonFormatter", "configure_root_logging", "get_json_logger"]

_SERVICE_ENV_KEY = "SERVICE_NAME"


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON objects.

    Args:
        service: Service name stamped on every line. Falls back to the
            ``SERVICE_NAME`` environment variable, then omitted.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self._service = service

    def format(self, record: logging.LogRecord) -> str:
        """Format ``record`` as a JSON line.

        Args:
            record: Logging record.

        Returns:
            str: JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        service = self._service or os.getenv(_SERVICE_ENV_KEY)
        if service:
            payload["service"] = service

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)
                code = getattr(exc_value, "code", None)
                if isinstance(code, str):
                    payload["error_code"] = code

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def configure_root_logging(level: str | int | None = None, *, service: str | None = None) -> None:
    """Install a JSON stream handler on the root logger (idempotent).

    Args:
        level: Level or level name. ``None`` uses env ``LOG_LEVEL`` or ``INFO``.
        service: Service name stamped on each line.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = level if level is not None else (env_level or "INFO")
    root.setLevel(resolved.upper() if isinstance(resolved, str) else resolved)

    for handler in root.handlers:
        if isinstance(handler.formatter, JsonFormatter):
            # Already configured; avoid duplicate lines on re-entry.
            return

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(service=service))
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module logger that propagates to the JSON root handler.

    This does *not* configure the root logger; call
    :func:`configure_root_logging` once at startup.

    Args:
        name: Logger name, typically ``__name__``.

    Returns:
        logging.Logger: The named logger.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
