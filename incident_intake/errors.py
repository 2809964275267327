"""Error taxonomy for incident intake.

Every error knows the HTTP status it maps to and renders its own JSON body,
so the API layer never has to build error payloads by hand.
"""

from __future__ import annotations

from typing import Any


class IntakeError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code: int = 500
    error: str = "CreateIncident failed"

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": str(self)}


class ValidationError(IntakeError):
    """Caller input failed the intake rules. Recoverable by resubmitting."""

    status_code = 400

    def __init__(
        self,
        error: str,
        *,
        required: list[str] | None = None,
        missing: list[str] | None = None,
        invalid: dict[str, str] | None = None,
    ) -> None:
        super().__init__(error)
        self.error = error
        self.required = required
        self.missing = missing
        self.invalid = invalid

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.required is not None:
            body["required"] = self.required
        if self.missing is not None:
            body["missing"] = self.missing
        if self.invalid is not None:
            body["invalid"] = self.invalid
        return body


class ConfigurationError(IntakeError):
    """Deployment is missing settings needed to reach the database."""

    error = "DB env vars missing"

    def __init__(self, needed: list[str]) -> None:
        super().__init__(f"{self.error}: {', '.join(needed)}")
        self.needed = needed

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "needed": self.needed}


class StoreError(IntakeError):
    """The backend rejected or failed the insert. Carries the native message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}
