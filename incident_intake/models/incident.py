"""Incident data model: the `Incidents` table and its request/response shapes."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Boolean, DateTime, Integer, Numeric, Unicode, UnicodeText
from sqlalchemy.orm import Mapped, mapped_column

from incident_intake.database import Base

STATUS_NEW = "NEW"
DEFAULT_SOURCE = "PORTAL"


class Incident(Base):
    """Row in the pre-existing `Incidents` table. Column names are fixed by the schema."""

    __tablename__ = "Incidents"

    id: Mapped[int] = mapped_column("Id", Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column("Title", Unicode(200))
    description: Mapped[str] = mapped_column("Description", UnicodeText)
    status: Mapped[str] = mapped_column("Status", Unicode(20))
    created_at: Mapped[datetime] = mapped_column("CreatedAt", DateTime)
    created_by: Mapped[str] = mapped_column("CreatedBy", Unicode(100))

    category: Mapped[Optional[str]] = mapped_column("Category", Unicode(100), nullable=True)
    priority: Mapped[Optional[str]] = mapped_column("Priority", Unicode(10), nullable=True)
    impact: Mapped[Optional[str]] = mapped_column("Impact", Unicode(10), nullable=True)
    urgency: Mapped[Optional[str]] = mapped_column("Urgency", Unicode(10), nullable=True)
    service: Mapped[Optional[str]] = mapped_column("Service", Unicode(100), nullable=True)
    source: Mapped[str] = mapped_column("Source", Unicode(20))

    requester_email: Mapped[Optional[str]] = mapped_column("RequesterEmail", Unicode(200), nullable=True)
    assignee_team_id: Mapped[Optional[str]] = mapped_column("AssigneeTeamId", Unicode(50), nullable=True)
    assignee_user_id: Mapped[Optional[str]] = mapped_column("AssigneeUserId", Unicode(50), nullable=True)

    updated_at: Mapped[datetime] = mapped_column("UpdatedAt", DateTime)
    resolved_at: Mapped[Optional[datetime]] = mapped_column("ResolvedAt", DateTime, nullable=True)
    response_due_at: Mapped[Optional[datetime]] = mapped_column("ResponseDueAt", DateTime, nullable=True)
    resolution_due_at: Mapped[Optional[datetime]] = mapped_column("ResolutionDueAt", DateTime, nullable=True)
    sla_breached: Mapped[bool] = mapped_column("SlaBreached", Boolean)

    ai_category: Mapped[Optional[str]] = mapped_column("Ai_Category", Unicode(100), nullable=True)
    ai_priority: Mapped[Optional[str]] = mapped_column("Ai_Priority", Unicode(10), nullable=True)
    ai_confidence: Mapped[Optional[Decimal]] = mapped_column("Ai_Confidence", Numeric(4, 3), nullable=True)


class IncidentSubmission(BaseModel):
    """Loosely typed inbound body. Every field is optional; unknown keys are ignored."""

    title: Any = None
    description: Any = None
    created_by: Any = Field(default=None, alias="createdBy")
    user_id: Any = Field(default=None, alias="userId")
    category: Any = None
    priority: Any = None
    impact: Any = None
    urgency: Any = None
    service: Any = None
    source: Any = None
    requester_email: Any = Field(default=None, alias="requesterEmail")
    email: Any = None
    assignee_team_id: Any = Field(default=None, alias="assigneeTeamId")
    assignee_user_id: Any = Field(default=None, alias="assigneeUserId")
    response_due_at: Any = Field(default=None, alias="responseDueAt")
    resolution_due_at: Any = Field(default=None, alias="resolutionDueAt")
    ai_category: Any = Field(default=None, alias="aiCategory")
    ai_priority: Any = Field(default=None, alias="aiPriority")
    ai_confidence: Any = Field(default=None, alias="aiConfidence")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NewIncident(BaseModel):
    """Validated, normalized incident ready to be inserted."""

    title: str
    description: str
    created_by: str
    category: str | None = None
    priority: str | None = None
    impact: str | None = None
    urgency: str | None = None
    service: str | None = None
    source: str = DEFAULT_SOURCE
    requester_email: str | None = None
    assignee_team_id: str | None = None
    assignee_user_id: str | None = None
    response_due_at: datetime | None = None
    resolution_due_at: datetime | None = None
    ai_category: str | None = None
    ai_priority: str | None = None
    ai_confidence: Decimal | None = None

    model_config = ConfigDict(frozen=True)


class IncidentRecord(BaseModel):
    """Persisted incident, serialized with the table's column names."""

    id: int = Field(serialization_alias="Id")
    title: str = Field(serialization_alias="Title")
    description: str = Field(serialization_alias="Description")
    status: str = Field(serialization_alias="Status")
    created_at: datetime = Field(serialization_alias="CreatedAt")
    created_by: str = Field(serialization_alias="CreatedBy")
    category: str | None = Field(default=None, serialization_alias="Category")
    priority: str | None = Field(default=None, serialization_alias="Priority")
    impact: str | None = Field(default=None, serialization_alias="Impact")
    urgency: str | None = Field(default=None, serialization_alias="Urgency")
    service: str | None = Field(default=None, serialization_alias="Service")
    source: str = Field(serialization_alias="Source")
    requester_email: str | None = Field(default=None, serialization_alias="RequesterEmail")
    assignee_team_id: str | None = Field(default=None, serialization_alias="AssigneeTeamId")
    assignee_user_id: str | None = Field(default=None, serialization_alias="AssigneeUserId")
    updated_at: datetime = Field(serialization_alias="UpdatedAt")
    resolved_at: datetime | None = Field(default=None, serialization_alias="ResolvedAt")
    response_due_at: datetime | None = Field(default=None, serialization_alias="ResponseDueAt")
    resolution_due_at: datetime | None = Field(default=None, serialization_alias="ResolutionDueAt")
    sla_breached: bool = Field(serialization_alias="SlaBreached")
    ai_category: str | None = Field(default=None, serialization_alias="Ai_Category")
    ai_priority: str | None = Field(default=None, serialization_alias="Ai_Priority")
    ai_confidence: float | None = Field(default=None, serialization_alias="Ai_Confidence")

    model_config = ConfigDict(from_attributes=True)


class IncidentCreatedResponse(BaseModel):
    message: str = "Incident created"
    incident: IncidentRecord
