# app/system_services/update_patient.py
import logging
from typing import Dict, FrozenSet

from sqlalchemy.ext.asyncio import AsyncSession

from app.system_models.options import PatientDisposition, PatientStatus
from app.system_models.patient_model.patient_model import Patient
from app.system_services.case_helpers import get_patient_or_raise
from app.system_services.exceptions import CaseValidationError

logger = logging.getLogger(__name__)

_ALL_DISPOSITIONS: FrozenSet[PatientDisposition] = frozenset(PatientDisposition)

# Disposition is operator-assigned: every pair is allowed, including re-opening
# a closed case as ACTIVE. Tighten a row here to forbid a transition.
DISPOSITION_TRANSITIONS: Dict[PatientDisposition, FrozenSet[PatientDisposition]] = {
    PatientDisposition.ACTIVE: _ALL_DISPOSITIONS,
    PatientDisposition.DISCHARGED: _ALL_DISPOSITIONS,
    PatientDisposition.SHIFT_OUT: _ALL_DISPOSITIONS,
    PatientDisposition.DAMA: _ALL_DISPOSITIONS,
    PatientDisposition.DEATH: _ALL_DISPOSITIONS,
}


def can_transition(current: PatientDisposition, target: PatientDisposition) -> bool:
    return target in DISPOSITION_TRANSITIONS.get(current, frozenset())


async def update_patient_status(db: AsyncSession, patient_id: str, status: PatientStatus) -> Patient:
    """Clinical trend flag; allowed whatever the disposition."""
    patient = await get_patient_or_raise(db, patient_id)
    patient.status = PatientStatus(status).value
    await db.commit()
    await db.refresh(patient)

    logger.info(f"Patient {patient_id} status -> {patient.status}")
    return patient


async def update_patient_disposition(
    db: AsyncSession, patient_id: str, disposition: PatientDisposition
) -> Patient:
    patient = await get_patient_or_raise(db, patient_id)
    current = PatientDisposition(patient.disposition)
    target = PatientDisposition(disposition)

    if not can_transition(current, target):
        raise CaseValidationError(
            f"Disposition change {current.value} -> {target.value} is not allowed",
            field="disposition",
        )

    patient.disposition = target.value
    await db.commit()
    await db.refresh(patient)

    logger.info(f"Patient {patient_id} disposition {current.value} -> {target.value}")
    return patient
