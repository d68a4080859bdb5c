# app/system_services/create_patient.py
import logging
import secrets
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.system_models.options import PatientDisposition
from app.system_models.patient_model.patient_model import Patient
from app.system_models.patient_model.patient_schemas import PatientCreate
from app.system_services.exceptions import IdentifierAllocationExhausted
from config.appconfig import settings

logger = logging.getLogger(__name__)


def random_patient_id() -> str:
    """Internal ID from 4 random bytes, e.g. PT-9F3A01BC."""
    return f"{settings.PATIENT_ID_PREFIX}{secrets.token_hex(4).upper()}"


async def patient_id_in_use(db: AsyncSession, candidate: str) -> bool:
    return await db.get(Patient, candidate) is not None


async def create_patient(
    db: AsyncSession,
    patient: PatientCreate,
    id_factory: Callable[[], str] = random_patient_id,
    max_attempts: Optional[int] = None,
) -> Patient:
    """
    Open a new ACTIVE case at care day 0.

    Each candidate ID is checked and then inserted; an insert that still collides
    (another writer took the ID in between) is rolled back and counts as a failed
    attempt.
    """
    attempts = max_attempts or settings.PATIENT_ID_MAX_ATTEMPTS

    for _ in range(attempts):
        candidate = id_factory()
        if await patient_id_in_use(db, candidate):
            continue

        db_patient = Patient(
            id=candidate,
            unit=patient.unit.value,
            status=patient.status.value,
            disposition=PatientDisposition.ACTIVE.value,
            latest_care_day=0,
            discharge_summary_version=0,
        )
        db.add(db_patient)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"⚠️  Patient ID {candidate} taken concurrently; retrying")
            continue

        await db.refresh(db_patient)
        logger.info(f"✅ Created patient {db_patient.id} in {db_patient.unit} ({db_patient.status})")
        return db_patient

    logger.error(f"❌ Patient ID allocation exhausted after {attempts} attempts")
    raise IdentifierAllocationExhausted(attempts)
