"""hearth - household concierge core: recurring tasks and moments reminders."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.core import scheduler_tracker
from src.core.config import Constants
from src.core.db_client import DatabaseError, RecordNotFoundError, close_connection, init_db
from src.core.errors import HearthError, classify_error_with_response
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.module_registry import get_modules, register_default_modules
from src.core.redis_client import redis_client
from src.core.scheduler import create_scheduler, start_scheduler, stop_scheduler


logger = logging.getLogger(__name__)


async def check_redis_connectivity() -> None:
    """Verify Redis connectivity (optional service).

    Only checks if Redis is configured. Logs a warning if unavailable but doesn't fail.
    """
    if not redis_client.is_available:
        logger.info("startup_validation", extra={"service": "redis", "status": "disabled"})
        return

    if await redis_client.ping():
        logger.info("startup_validation", extra={"service": "redis", "status": "ok"})
    else:
        logger.warning("startup_validation", extra={"service": "redis", "status": "unavailable"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()
    await check_redis_connectivity()

    await init_db()
    logger.info("Database initialized")

    app.state.scheduler = create_scheduler()
    start_scheduler(app.state.scheduler)
    try:
        yield
    finally:
        # Shutdown
        stop_scheduler(app.state.scheduler)
        await redis_client.close()
        await close_connection()


app = FastAPI(
    title="hearth",
    description="Household concierge core: recurring tasks and moments reminders",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain, validation or persistence error as classified JSON."""
    response = classify_error_with_response(exc)
    if response.status_code >= Constants.HTTP_SERVER_ERROR:
        logger.error("Request failed", extra={"path": request.url.path, "error": str(exc), "code": response.code})
    return JSONResponse(content=response.model_dump(mode="json"), status_code=response.status_code)


for error_type in (HearthError, DatabaseError, RecordNotFoundError, ValidationError, RequestValidationError):
    app.add_exception_handler(error_type, handle_error)


# Register module routers
register_default_modules()
for module in get_modules().values():
    module_router = module.get_router()
    if module_router is not None:
        app.include_router(module_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=Constants.HTTP_OK)


@app.get("/health/scheduler")
async def scheduler_health_check() -> JSONResponse:
    """Scheduler health check endpoint with job statuses."""
    tracker = scheduler_tracker.job_tracker
    job_names = [job.id for module in get_modules().values() for job in module.get_scheduled_jobs()]

    job_statuses = {name: await tracker.get_job_status(name) for name in job_names}
    dlq = await tracker.get_dead_letter_queue()

    has_failures = any(status["consecutive_failures"] > 0 for status in job_statuses.values())
    overall_status = "degraded" if has_failures else "healthy"
    if dlq:
        overall_status = "critical"

    return JSONResponse(
        content={
            "status": overall_status,
            "jobs": job_statuses,
            "dead_letter_queue_size": len(dlq),
            "dead_letter_queue": dlq,
            "redis": redis_client.get_health_status(),
        },
        status_code=Constants.HTTP_OK if overall_status == "healthy" else Constants.HTTP_SERVICE_UNAVAILABLE,
    )
