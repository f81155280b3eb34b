"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from rich.logging import RichHandler

from placement_core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structured logging with rich output."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        handlers=[RichHandler(rich_tracebacks=True, markup=True)],
    )

    if settings.debug or not settings.log_json:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="ISO"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_transition_context(instance: Any, action: str, actor: Any) -> Dict[str, Any]:
    """Create a log context for a workflow transition request."""
    return {
        "entity_id": instance.id,
        "current_state": instance.current_state,
        "action": action,
        "actor_id": actor.user_id,
        "actor_role": actor.role.value,
    }
