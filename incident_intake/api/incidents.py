"""Incident intake endpoint."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from incident_intake.errors import ConfigurationError, StoreError, ValidationError
from incident_intake.models.incident import IncidentCreatedResponse
from incident_intake.normalizer import normalize_incident
from incident_intake.observability.metrics import metrics
from incident_intake.store import StoreGateway, get_store

router = APIRouter(prefix="/api", tags=["incidents"])
logger = logging.getLogger("incident_intake.api")


async def _read_body(request: Request) -> object:
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        # An unreadable body behaves like an empty one and fails validation.
        return {}


@router.post("/incidents", response_model=IncidentCreatedResponse, status_code=201)
@router.post("/CreateIncident", response_model=IncidentCreatedResponse, status_code=201, include_in_schema=False)
async def create_incident(
    request: Request,
    store: StoreGateway = Depends(get_store),
):
    """Validate an incident submission and persist it as a NEW incident."""
    logger.info("CreateIncident called")
    body = await _read_body(request)

    try:
        new_incident = normalize_incident(body)
    except ValidationError as err:
        logger.info(f"Rejected incident submission: {err.error}")
        metrics.record_outcome("validation_error")
        return JSONResponse(status_code=err.status_code, content=err.to_body())

    try:
        record = await store.create(new_incident)
    except ConfigurationError as err:
        logger.error(f"Database configuration incomplete, needed: {', '.join(err.needed)}")
        metrics.record_outcome("configuration_error")
        return JSONResponse(status_code=err.status_code, content=err.to_body())
    except StoreError as err:
        logger.exception("CreateIncident failed")
        metrics.record_outcome("store_error")
        return JSONResponse(status_code=err.status_code, content=err.to_body())

    metrics.record_outcome("created")
    payload = IncidentCreatedResponse(incident=record)
    return JSONResponse(status_code=201, content=payload.model_dump(mode="json", by_alias=True))
