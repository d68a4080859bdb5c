# app/system_services/create_isbar_entry.py
"""
Add one care day's ISBAR note to an ACTIVE case.

Note insert, suggestion inserts and the latest_care_day advance commit as one
unit. The counter advance is a compare-and-set on the value read at the start,
and the unique (patient_id, care_day) constraint backs it up, so two concurrent
submissions can never both land on the same care day. A miss caused by the case
being closed in the meantime is reported as InactiveCase, not as a conflict.
"""
import logging
from typing import List, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.helpers.time import utcnow
from app.suggestion_engine.rules import fired_rules, propose
from app.system_models.isbar_model.isbar_model import ISBAR_TEXT_FIELDS, RISK_FLAG_FIELDS, IsbarEntry
from app.system_models.isbar_model.isbar_schemas import IsbarEntryCreate
from app.system_models.options import PatientDisposition, SuggestionStatus
from app.system_models.patient_model.patient_model import Patient
from app.system_models.suggestion_model.suggestion_model import Suggestion
from app.system_services.case_helpers import (
    ensure_active,
    ensure_deidentified,
    get_patient_or_raise,
    require_text_fields,
)
from app.system_services.exceptions import (
    CareDayConflictError,
    CaseTrackerError,
    InactiveCaseError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


async def _lost_update_error(db: AsyncSession, patient_id: str, care_day: int) -> CaseTrackerError:
    """The counter advance matched no row: the case was closed or another note took the day."""
    result = await db.execute(
        select(Patient).where(Patient.id == patient_id).execution_options(populate_existing=True)
    )
    current = result.scalar_one_or_none()

    if current is None:
        return NotFoundError("Patient", patient_id)
    if current.disposition != PatientDisposition.ACTIVE.value:
        logger.warning(f"⚠️  {patient_id} became {current.disposition} before D{care_day} was saved")
        return InactiveCaseError(patient_id, current.disposition)

    logger.warning(f"⚠️  Care day {care_day} for {patient_id} taken by a concurrent submission")
    return CareDayConflictError(patient_id, care_day)


async def create_isbar_entry(
    db: AsyncSession,
    patient_id: str,
    entry: IsbarEntryCreate,
) -> Tuple[IsbarEntry, List[Suggestion]]:
    """Validate, screen, score and persist a new ISBAR note."""
    patient = await get_patient_or_raise(db, patient_id)
    ensure_active(patient)

    fields = require_text_fields(entry, ISBAR_TEXT_FIELDS)
    ensure_deidentified(fields)
    flags = {name: bool(getattr(entry, name)) for name in RISK_FLAG_FIELDS}

    cleaned = entry.model_copy(update=fields)
    drafts = propose(cleaned)

    observed_day = patient.latest_care_day
    care_day = observed_day + 1

    try:
        result = await db.execute(
            update(Patient)
            .where(
                Patient.id == patient_id,
                Patient.latest_care_day == observed_day,
                Patient.disposition == PatientDisposition.ACTIVE.value,
            )
            .values(latest_care_day=care_day, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        advanced = result.rowcount == 1

        if advanced:
            isbar = IsbarEntry(patient_id=patient_id, care_day=care_day, **fields, **flags)
            db.add(isbar)
            await db.flush()

            suggestions = [
                Suggestion(
                    patient_id=patient_id,
                    isbar_id=isbar.id,
                    care_day=care_day,
                    category=draft.category.value,
                    content=draft.content,
                    rationale=draft.rationale,
                    status=SuggestionStatus.PENDING.value,
                )
                for draft in drafts
            ]
            db.add_all(suggestions)
            await db.flush()
            await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"⚠️  Care day {care_day} already exists for {patient_id}")
        raise CareDayConflictError(patient_id, care_day)
    except Exception:
        await db.rollback()
        raise

    if not advanced:
        await db.rollback()
        raise await _lost_update_error(db, patient_id, care_day)

    await db.refresh(patient)

    logger.info(
        f"✅ ISBAR D{care_day} saved for {patient_id}: {len(suggestions)} suggestion(s) "
        f"from rules {fired_rules(cleaned) or ['default']}"
    )
    return isbar, suggestions
