"""Structured logging configuration using structlog.

JSON lines outside development, colorized console output in development.
Tokens are redacted outright. GitHub handles and user ids are replaced by
a short stable hash so one user's sync, store and roadmap events can
still be correlated without logging who they are.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from typing import Any

import structlog

from app.config import Environment, Settings, get_settings

SENSITIVE_KEY_PARTS = ("password", "secret", "token", "authorization", "cookie")
HASHED_KEYS = frozenset({"user_id", "username", "github_username", "login"})
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _filter_sensitive_data(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Remove credentials from log events."""
    for key in list(event_dict.keys()):
        if any(part in key.lower() for part in SENSITIVE_KEY_PARTS):
            event_dict[key] = "[REDACTED]"
    return event_dict


def _hash_identifiers(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace user identifiers with a truncated sha256."""
    for key in HASHED_KEYS.intersection(event_dict):
        value = event_dict[key]
        if value is not None:
            digest = hashlib.sha256(str(value).lower().encode()).hexdigest()[:12]
            event_dict[key] = f"id:{digest}"
    return event_dict


def _select_renderer(settings: Settings) -> structlog.types.Processor:
    if settings.environment == Environment.DEVELOPMENT:
        return structlog.dev.ConsoleRenderer(colors=True)
    if settings.environment == Environment.TESTING:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the application."""
    settings = settings or get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _filter_sensitive_data,
        _hash_identifiers,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _select_renderer(settings),
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
