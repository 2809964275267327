"""Incident intake: FastAPI application entry point."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from incident_intake.api.health import router as health_router
from incident_intake.api.incidents import router as incidents_router
from incident_intake.config import settings
from incident_intake.logging_config import setup_logging
from incident_intake.observability.metrics import metrics

logger = logging.getLogger("incident_intake")


def _startup_checks() -> None:
    """Log configuration problems that every request would otherwise hit."""
    missing = settings.missing_database_settings()
    if missing:
        logger.warning(f"⚠  Database settings missing: {', '.join(missing)}; incident creation will fail")
    else:
        logger.info(
            f"✓ Database target {settings.db_server}/{settings.db_name} "
            f"(pool max={settings.db_pool_max}, min={settings.pool_min_connections})"
        )
    if settings.is_production and not settings.db_encrypt:
        logger.warning("⚠  APP_ENV=production with DB_ENCRYPT=false")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle. The pool itself is created on first use."""
    setup_logging(settings.log_level)
    _startup_checks()
    logger.info("✦ Incident intake API started")
    yield
    logger.info("✦ Incident intake API shutting down")


app = FastAPI(
    title="Incident Intake",
    description="Validates incident submissions and records them as NEW incidents.",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": "CreateIncident failed", "message": str(exc)})


# Request tracing + access log middleware
@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()

    response: Response = await call_next(request)

    duration_ms = round((time.perf_counter() - start) * 1000, 2)
    response.headers["X-Request-ID"] = request_id
    metrics.observe_request(request.url.path, response.status_code, duration_ms)
    logger.info(
        "request completed",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


app.include_router(incidents_router)
app.include_router(health_router)
