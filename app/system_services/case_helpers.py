# app/system_services/case_helpers.py
from typing import Dict, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.deid.guard import scan
from app.system_models.options import PatientDisposition
from app.system_models.patient_model.patient_model import Patient
from app.system_services.exceptions import (
    CaseValidationError,
    DeidBlockedError,
    InactiveCaseError,
    NotFoundError,
)


async def get_patient_or_raise(db: AsyncSession, patient_id: str) -> Patient:
    patient = await db.get(Patient, patient_id)
    if patient is None:
        raise NotFoundError("Patient", patient_id)
    return patient


def ensure_active(patient: Patient) -> None:
    if patient.disposition != PatientDisposition.ACTIVE.value:
        raise InactiveCaseError(patient.id, patient.disposition)


def require_text_fields(payload, field_names: Iterable[str]) -> Dict[str, str]:
    """Trim every named field; blank after trimming is a validation error."""
    cleaned = {}
    for name in field_names:
        value = (getattr(payload, name, None) or "").strip()
        if not value:
            raise CaseValidationError(f"Missing required field: {name}", field=name)
        cleaned[name] = value
    return cleaned


def ensure_deidentified(fields: Dict[str, str]) -> None:
    result = scan(list(fields.values()))
    if result.blocked:
        raise DeidBlockedError(result.reasons)
