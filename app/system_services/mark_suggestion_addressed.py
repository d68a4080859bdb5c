# app/system_services/mark_suggestion_addressed.py
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.helpers.time import utcnow
from app.system_models.options import SuggestionStatus
from app.system_models.suggestion_model.suggestion_model import Suggestion
from app.system_services.case_helpers import get_patient_or_raise

logger = logging.getLogger(__name__)


async def mark_suggestion_addressed(db: AsyncSession, patient_id: str, suggestion_id: int) -> bool:
    """
    PENDING -> ADDRESSED for a suggestion that belongs to this patient.

    Anything else (already addressed, other patient's suggestion, unknown id)
    is a no-op so duplicate submissions are harmless. Returns whether a row changed.
    """
    await get_patient_or_raise(db, patient_id)

    result = await db.execute(
        update(Suggestion)
        .where(
            Suggestion.id == suggestion_id,
            Suggestion.patient_id == patient_id,
            Suggestion.status == SuggestionStatus.PENDING.value,
        )
        .values(status=SuggestionStatus.ADDRESSED.value, updated_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()

    updated = result.rowcount == 1
    if updated:
        logger.info(f"Suggestion {suggestion_id} addressed for {patient_id}")
    else:
        logger.debug(f"Suggestion {suggestion_id} for {patient_id} not pending; nothing to do")
    return updated
