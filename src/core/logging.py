"""Logfire setup and structured logging helpers for eventdesk.

Modules log through ``logging.getLogger(__name__)`` with ``extra={...}``
fields; Logfire picks the records up once ``configure_logfire`` has run.
Service operations wrap their body in ``span("<service>.<operation>")`` so a
dashboard request shows the store, composer and database calls it triggered.

    logger = logging.getLogger(__name__)
    with span("task_store.toggle"):
        log_with_user_context(logger, "info", "Task completed", user_id=user.id, task_id=task.id)
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Logfire; without ``LOGFIRE_TOKEN`` nothing leaves the process."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="eventdesk",
        service_version="0.1.0",
        environment="production" if settings.is_production else "development",
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured", extra={"production": settings.is_production})


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every dashboard and API request."""
    logfire.instrument_fastapi(app)
    logging.getLogger(__name__).info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named after the service operation, e.g. ``email_composer.send``."""
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log ``message`` at ``level`` with ``context`` attached as structured fields."""
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_with_user_context(
    logger: logging.Logger,
    level: str,
    message: str,
    user_id: str | None = None,
    **extra: object,
) -> None:
    """Log a task or composer event for the signed-in organizer.

    ``user_id`` is dropped from the fields when nobody is signed in.
    """
    context = {"user_id": user_id, **extra} if user_id else extra
    log_with_context(logger, level, message, **context)
