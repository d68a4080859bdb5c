# app/system_services/upsert_daily_progress.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.system_models.daily_progress_model.daily_progress_model import PROGRESS_TEXT_FIELDS, DailyProgress
from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressUpsert
from app.system_services.case_helpers import (
    ensure_active,
    ensure_deidentified,
    get_patient_or_raise,
    require_text_fields,
)
from app.system_services.exceptions import CareDayConflictError, CaseValidationError

logger = logging.getLogger(__name__)


def validate_progress_care_day(care_day, latest_care_day: int) -> int:
    """Progress may target any recorded day (day 1 before the first note), never a future one."""
    if isinstance(care_day, bool) or not isinstance(care_day, int) or care_day < 1:
        raise CaseValidationError("Invalid care day", field="care_day")

    upper = max(1, latest_care_day)
    if care_day > upper:
        raise CaseValidationError(
            f"Care day {care_day} is after the latest care day ({upper})", field="care_day"
        )
    return care_day


async def find_daily_progress(db: AsyncSession, patient_id: str, care_day: int) -> Optional[DailyProgress]:
    result = await db.execute(
        select(DailyProgress).where(
            DailyProgress.patient_id == patient_id,
            DailyProgress.care_day == care_day,
        )
    )
    return result.scalar_one_or_none()


async def upsert_daily_progress(
    db: AsyncSession,
    patient_id: str,
    progress: DailyProgressUpsert,
) -> DailyProgress:
    """Create or overwrite the progress note for (patient, care day)."""
    patient = await get_patient_or_raise(db, patient_id)
    ensure_active(patient)

    care_day = validate_progress_care_day(progress.care_day, patient.latest_care_day)
    fields = require_text_fields(progress, PROGRESS_TEXT_FIELDS)
    ensure_deidentified(fields)

    record = await find_daily_progress(db, patient_id, care_day)
    created = record is None

    if created:
        record = DailyProgress(patient_id=patient_id, care_day=care_day, **fields)
        db.add(record)
    else:
        for name, value in fields.items():
            setattr(record, name, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if not created:
            raise CareDayConflictError(patient_id, care_day)

        # A concurrent submission inserted the same day first: overwrite it once
        logger.warning(f"⚠️  Daily progress D{care_day} for {patient_id} created concurrently; overwriting")
        record = await find_daily_progress(db, patient_id, care_day)
        if record is None:
            raise CareDayConflictError(patient_id, care_day)
        for name, value in fields.items():
            setattr(record, name, value)
        created = False
        await db.commit()

    await db.refresh(record)
    logger.info(f"✅ Daily progress D{care_day} {'created' if created else 'updated'} for {patient_id}")
    return record
