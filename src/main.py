"""eventdesk - Event organizer dashboard (tasks, attendee emails, overview)."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from src.core.config import constants, settings
from src.core.db_client import close_connection, init_db
from src.core.errors import FormValidationError
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.auth_router import router as auth_router
from src.interface.dashboard_router import api_router as dashboard_api_router
from src.interface.dashboard_router import router as dashboard_router


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Validate required credentials, exiting with a clear message if any is missing."""
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("secret_key", "Session secret key")
        logger.info("startup_validation", extra={"stage": "credentials", "status": "ok"})
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    logger.info("startup_validation_complete", extra={"status": "ok"})


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")
    yield
    # Shutdown
    await close_connection()


app = FastAPI(
    title="eventdesk",
    description="Event organizer dashboard: tasks, attendee emails and overview",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(dashboard_api_router)


@app.exception_handler(FormValidationError)
async def form_validation_error_handler(_request: Request, exc: FormValidationError) -> JSONResponse:
    """Report client-side precondition failures as 422 responses."""
    logger.info("form_validation_error", extra={"error": exc.message})
    return JSONResponse(content={"detail": exc.message}, status_code=constants.HTTP_UNPROCESSABLE_ENTITY)


@app.get("/")
async def index() -> RedirectResponse:
    return RedirectResponse(url="/dashboard", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
