"""Liveness, readiness and metrics endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from incident_intake.errors import IntakeError
from incident_intake.observability.metrics import metrics
from incident_intake.store import StoreGateway, get_store

router = APIRouter(prefix="/api", tags=["health"])
logger = logging.getLogger("incident_intake.health")


@router.get("/health/live")
async def liveness_check():
    return {"status": "alive", "service": "incident-intake"}


@router.get("/health/ready")
async def readiness_check(response: Response, store: StoreGateway = Depends(get_store)):
    """Run a trivial query through the shared pool."""
    checks: dict[str, object] = {"database": False}
    try:
        async with store.acquire_connection() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except IntakeError as err:
        logger.warning(f"database readiness check failed: {err}")
        checks["error"] = err.to_body()

    if not checks["database"]:
        response.status_code = 503

    return {"status": "ready" if checks["database"] else "not_ready", "checks": checks}


@router.get("/metrics")
async def get_metrics():
    return {"service": "incident-intake", "metrics": metrics.snapshot()}
