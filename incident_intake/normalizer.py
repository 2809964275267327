"""Turns an untyped request body into a validated NewIncident.

Pure and synchronous: no I/O happens here, so every rule can be exercised
without a database.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from incident_intake.errors import ValidationError
from incident_intake.models.incident import DEFAULT_SOURCE, IncidentSubmission, NewIncident
from incident_intake.utils.time import to_naive_utc

REQUIRED_FIELDS = ["title", "description", "createdBy (or userId)"]

_CONFIDENCE_STEP = Decimal("0.001")
_datetime_adapter = TypeAdapter(datetime)


def _scalar_text(value: Any) -> str:
    """Render a JSON scalar as text: lowercase booleans, whole floats without `.0`."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return _scalar_text(value).strip()


def parse_passthrough(value: Any) -> str | None:
    """Keep a string untouched; store numbers and booleans as their text."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list)):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    return _scalar_text(value)


def _first_present(*values: Any) -> Any:
    """Return the first value that is not None (a `??` chain)."""
    for value in values:
        if value is not None:
            return value
    return None


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or epoch number; absent input stays absent."""
    if _is_absent(value):
        return None
    if isinstance(value, bool):
        raise ValueError("expected a timestamp, got a boolean")
    try:
        parsed = _datetime_adapter.validate_python(value.strip() if isinstance(value, str) else value)
    except PydanticValidationError as err:
        raise ValueError(f"not a valid timestamp: {value!r}") from err
    return to_naive_utc(parsed)


def parse_confidence(value: Any) -> Decimal | None:
    """Coerce a classifier confidence to Decimal.

    Zero is a real value; only null, a missing key or an empty string mean
    the classifier did not run.
    """
    if _is_absent(value):
        return None
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as err:
        raise ValueError(f"not a number: {value!r}") from err
    if not number.is_finite() or not Decimal(0) <= number <= Decimal(1):
        raise ValueError(f"must be between 0 and 1, got {value!r}")
    return number.quantize(_CONFIDENCE_STEP)


def normalize_incident(body: Any) -> NewIncident:
    """Validate and normalize a raw request body.

    Raises ValidationError when a mandatory field is missing or when a
    value cannot be interpreted (an object where text belongs, a bad
    timestamp or confidence).
    """
    if not isinstance(body, Mapping):
        body = {}
    data = IncidentSubmission.model_validate(dict(body))

    title = _text(data.title)
    description = _text(data.description)
    created_by = _text(_first_present(data.created_by, data.user_id))

    missing = [
        name
        for name, value in (("title", title), ("description", description), ("createdBy", created_by))
        if not value
    ]
    if missing:
        raise ValidationError("Missing required fields", required=list(REQUIRED_FIELDS), missing=missing)

    invalid: dict[str, str] = {}
    parsed: dict[str, Any] = {}
    for name, raw, parser in (
        ("category", data.category, parse_passthrough),
        ("priority", data.priority, parse_passthrough),
        ("impact", data.impact, parse_passthrough),
        ("urgency", data.urgency, parse_passthrough),
        ("service", data.service, parse_passthrough),
        ("assigneeTeamId", data.assignee_team_id, parse_passthrough),
        ("assigneeUserId", data.assignee_user_id, parse_passthrough),
        ("aiCategory", data.ai_category, parse_passthrough),
        ("aiPriority", data.ai_priority, parse_passthrough),
        ("responseDueAt", data.response_due_at, parse_timestamp),
        ("resolutionDueAt", data.resolution_due_at, parse_timestamp),
        ("aiConfidence", data.ai_confidence, parse_confidence),
    ):
        try:
            parsed[name] = parser(raw)
        except ValueError as err:
            invalid[name] = str(err)
    if invalid:
        raise ValidationError("Invalid field values", invalid=invalid)

    return NewIncident(
        title=title,
        description=description,
        created_by=created_by,
        category=parsed["category"],
        priority=parsed["priority"],
        impact=parsed["impact"],
        urgency=parsed["urgency"],
        service=parsed["service"],
        source=_text(data.source) or DEFAULT_SOURCE,
        requester_email=_text(_first_present(data.requester_email, data.email)) or None,
        assignee_team_id=parsed["assigneeTeamId"],
        assignee_user_id=parsed["assigneeUserId"],
        response_due_at=parsed["responseDueAt"],
        resolution_due_at=parsed["resolutionDueAt"],
        ai_category=parsed["aiCategory"],
        ai_priority=parsed["aiPriority"],
        ai_confidence=parsed["aiConfidence"],
    )
