# app/discharge_summary/service.py
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.deid.guard import redact
from app.discharge_summary.llm_client import DischargeSummaryLLM
from app.discharge_summary.timeline import build_summary_input
from app.helpers.time import utcnow
from app.system_models.daily_progress_model.daily_progress_model import DailyProgress
from app.system_models.isbar_model.isbar_model import IsbarEntry
from app.system_models.options import PatientDisposition
from app.system_models.patient_model.patient_model import Patient
from app.system_services.case_helpers import get_patient_or_raise
from app.system_services.exceptions import SummaryNoDataError, SummaryRequiresOutcomeError
from config.summaryconfig import summary_settings

logger = logging.getLogger(__name__)


async def request_discharge_summary(
    db: AsyncSession,
    patient_id: str,
    llm: Optional[DischargeSummaryLLM] = None,
) -> Patient:
    """
    Generate, redact and store the discharge summary of a closed case.

    Text and version are written together after both the LLM call and the
    redaction pass succeed; any earlier failure leaves the stored summary as it was.
    """
    patient = await get_patient_or_raise(db, patient_id)

    if patient.disposition == PatientDisposition.ACTIVE.value:
        raise SummaryRequiresOutcomeError(patient_id)

    isbar_entries = (
        await db.execute(
            select(IsbarEntry).where(IsbarEntry.patient_id == patient_id).order_by(IsbarEntry.care_day)
        )
    ).scalars().all()
    daily_progress = (
        await db.execute(
            select(DailyProgress).where(DailyProgress.patient_id == patient_id).order_by(DailyProgress.care_day)
        )
    ).scalars().all()

    if not isbar_entries and not daily_progress:
        raise SummaryNoDataError(patient_id)

    payload = build_summary_input(patient, isbar_entries, daily_progress)

    llm = llm or DischargeSummaryLLM()
    generated = await llm.generate(payload)
    clean = redact(generated, marker=summary_settings.REDACTION_MARKER)

    await db.execute(
        update(Patient)
        .where(Patient.id == patient_id)
        .values(
            discharge_summary_text=clean,
            discharge_summary_version=Patient.discharge_summary_version + 1,
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(patient)

    logger.info(f"✅ Discharge summary v{patient.discharge_summary_version} stored for {patient_id}")
    return patient
