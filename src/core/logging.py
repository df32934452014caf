"""
Structured logging configuration using structlog.

Development gets a colored console renderer, production gets JSON lines
that carry the service name and any request context bound by the tracing
middleware.

Usage:
    from core.logging import configure_logging, get_logger

    configure_logging(json_logs=settings.is_production)

    logger = get_logger(__name__)
    logger.info("Outfit created", outfit_id=outfit_id, items=len(item_ids))
    logger.warning("Recommendation fallback", mode="smart", error=str(e))
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


SERVICE_NAME = "wardrobe-api"

# The Supabase client logs every PostgREST/Storage request through these
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "uvicorn.access")


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_logs: JSON lines (production) instead of the colored console
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
    """
    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors += [
            _add_service,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind request-scoped fields (request_id, method, path) to every later log line."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
