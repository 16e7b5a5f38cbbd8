"""Logging configuration using structlog."""

import logging
import sys
from collections.abc import Iterable
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        debug: If True, use colored console output. If False, use JSON for production.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Set library log levels to reduce noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("temporalio").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Optional logger name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Bind request-level context to all subsequent log calls.

    Args:
        request_id: The correlation ID for the current request.
    """
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_actor_context(
    actor_id: UUID,
    tenant_id: UUID | None = None,
    roles: Iterable[str] | None = None,
) -> None:
    """Bind the acting principal to all subsequent log calls.

    Args:
        actor_id: ID of the authenticated actor.
        tenant_id: Tenant the actor belongs to (admins may have none).
        roles: Actor roles. Only logged if settings.log_actor_roles is True.
    """
    from src.app.core.config import get_settings

    bind_contextvars(actor_id=str(actor_id))
    if tenant_id is not None:
        bind_contextvars(actor_tenant_id=str(tenant_id))

    settings = get_settings()
    if roles is not None and settings.log_actor_roles:
        bind_contextvars(actor_roles=sorted(roles))


def clear_request_context() -> None:
    """Clear all request-scoped context."""
    clear_contextvars()
