"""Incident store gateway: one parameterized INSERT ... RETURNING per incident."""

from __future__ import annotations

import logging

from sqlalchemy import Insert, false, insert, null
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from incident_intake.config import Settings, settings
from incident_intake.database import ConnectionPool, EngineFactory, describe_db_error, utc_timestamp
from incident_intake.errors import StoreError
from incident_intake.models.incident import STATUS_NEW, Incident, IncidentRecord, NewIncident

logger = logging.getLogger("incident_intake.store")


def build_insert(new: NewIncident) -> Insert:
    """Build the insert for one incident.

    Every column receives an explicit value: caller data as bound parameters
    (absent optionals bound as NULL), lifecycle columns as fixed values. The
    full row comes back from the same statement (OUTPUT INSERTED.* on SQL
    Server, RETURNING elsewhere).
    """
    now = utc_timestamp()
    return (
        insert(Incident)
        .values(
            title=new.title,
            description=new.description,
            status=STATUS_NEW,
            created_at=now,
            created_by=new.created_by,
            category=new.category,
            priority=new.priority,
            impact=new.impact,
            urgency=new.urgency,
            service=new.service,
            source=new.source,
            requester_email=new.requester_email,
            assignee_team_id=new.assignee_team_id,
            assignee_user_id=new.assignee_user_id,
            updated_at=now,
            resolved_at=null(),
            response_due_at=new.response_due_at,
            resolution_due_at=new.resolution_due_at,
            sla_breached=false(),
            ai_category=new.ai_category,
            ai_priority=new.ai_priority,
            ai_confidence=new.ai_confidence,
        )
        .returning(Incident)
    )


async def create_incident(new: NewIncident, session: AsyncSession) -> IncidentRecord:
    """Insert one incident on the given handle and return the stored row."""
    try:
        result = await session.scalars(build_insert(new))
        created = result.one()
    except SQLAlchemyError as err:
        raise StoreError(describe_db_error(err)) from err
    return IncidentRecord.model_validate(created)


class StoreGateway:
    """Owns the shared pool and creates incidents through it."""

    def __init__(self, settings: Settings, engine_factory: EngineFactory = create_async_engine) -> None:
        self.pool = ConnectionPool(settings, engine_factory=engine_factory)

    def acquire_connection(self):
        return self.pool.acquire_connection()

    async def create(self, new: NewIncident) -> IncidentRecord:
        """Persist `new` and return the row, committed.

        Raises ConfigurationError before any connection attempt when settings
        are missing, and StoreError for any backend failure. No retry.
        """
        async with self.acquire_connection() as session:
            record = await create_incident(new, session)
        logger.info("Incident created", extra={"incident_id": record.id})
        return record


store = StoreGateway(settings)


async def get_store() -> StoreGateway:
    """Dependency returning the process-wide store gateway."""
    return store
