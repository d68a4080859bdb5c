"""
app/system_services/exceptions.py
=================================
Named outcomes of the case lifecycle and discharge summary operations.

Exception Tree::

    CaseTrackerError (base)
    ├── CaseValidationError
    ├── DeidBlockedError
    ├── InactiveCaseError
    ├── NotFoundError
    ├── CareDayConflictError
    ├── SummaryRequiresOutcomeError
    ├── SummaryNoDataError
    ├── GenerationConfigurationError
    ├── GenerationFailureError
    └── IdentifierAllocationExhausted
"""

from __future__ import annotations


class CaseTrackerError(Exception):
    """Base exception for all case tracker errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with structured error context.
        kind: Stable machine-readable error name.
        status_code: HTTP status the route layer answers with.
    """

    kind: str = "case_tracker_error"
    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message: str = message
        self.details: dict = details or {}
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"error": self.kind, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


class CaseValidationError(CaseTrackerError):
    """Missing/blank required field or care-day bound violation."""

    kind = "validation_error"
    status_code = 422

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field: str | None = field
        super().__init__(message=message, details={"field": field} if field else None)


class DeidBlockedError(CaseTrackerError):
    """Raised when the de-identification guard rejects a submission.

    Attributes:
        reasons: Pattern categories that matched.
    """

    kind = "deid_blocked"
    status_code = 422

    def __init__(self, reasons: list[str]) -> None:
        self.reasons: list[str] = list(reasons)
        super().__init__(
            message="Submission blocked: text looks like it contains identifying details or exact dates.",
            details={"reasons": self.reasons},
        )


class InactiveCaseError(CaseTrackerError):
    """Mutation attempted on a case whose disposition is not ACTIVE."""

    kind = "inactive_case"
    status_code = 409

    def __init__(self, patient_id: str, disposition: str) -> None:
        self.patient_id: str = patient_id
        self.disposition: str = disposition
        super().__init__(
            message=f"Patient {patient_id} is {disposition}; reopen the case before adding notes.",
            details={"patient_id": patient_id, "disposition": disposition},
        )


class NotFoundError(CaseTrackerError):
    kind = "not_found"
    status_code = 404

    def __init__(self, entity: str, identifier) -> None:
        self.entity: str = entity
        self.identifier = identifier
        super().__init__(
            message=f"{entity} {identifier} not found",
            details={"entity": entity, "id": identifier},
        )


class CareDayConflictError(CaseTrackerError):
    """Another writer advanced the case's care day first."""

    kind = "care_day_conflict"
    status_code = 409

    def __init__(self, patient_id: str, care_day: int) -> None:
        self.patient_id: str = patient_id
        self.care_day: int = care_day
        super().__init__(
            message=f"Care day {care_day} for patient {patient_id} was taken by a concurrent submission; resubmit.",
            details={"patient_id": patient_id, "care_day": care_day},
        )


class SummaryRequiresOutcomeError(CaseTrackerError):
    kind = "summary_requires_outcome"
    status_code = 409

    def __init__(self, patient_id: str) -> None:
        super().__init__(
            message=f"Set a final outcome for patient {patient_id} before generating a discharge summary.",
            details={"patient_id": patient_id},
        )


class SummaryNoDataError(CaseTrackerError):
    kind = "summary_no_data"
    status_code = 409

    def __init__(self, patient_id: str) -> None:
        super().__init__(
            message=f"Patient {patient_id} has no ISBAR or daily progress notes to summarise.",
            details={"patient_id": patient_id},
        )


class GenerationConfigurationError(CaseTrackerError):
    """LLM provider is not configured (operator-fixable)."""

    kind = "llm_not_configured"
    status_code = 503


class GenerationFailureError(CaseTrackerError):
    """LLM call failed or returned nothing usable; safe to retry."""

    kind = "summary_failed"
    status_code = 502


class IdentifierAllocationExhausted(CaseTrackerError):
    kind = "identifier_allocation_exhausted"
    status_code = 500

    def __init__(self, attempts: int) -> None:
        self.attempts: int = attempts
        super().__init__(
            message=f"Could not generate a unique patient ID after {attempts} attempts.",
            details={"attempts": attempts},
        )
