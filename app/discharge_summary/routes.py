# app/discharge_summary/routes.py
"""
Discharge Summary Routes
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.discharge_summary.llm_client import DischargeSummaryLLM
from app.discharge_summary.schemas import DischargeSummaryResponse
from app.discharge_summary.service import request_discharge_summary
from app.system_services.exceptions import CaseTrackerError
from app.system_services.system_routes import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


def get_summary_llm_client() -> DischargeSummaryLLM:
    return DischargeSummaryLLM()


@router.post("/patients/{patient_id}/discharge-summary", response_model=DischargeSummaryResponse)
async def discharge_summary_endpoint(
    patient_id: str,
    db: AsyncSession = Depends(get_db),
    llm: DischargeSummaryLLM = Depends(get_summary_llm_client),
):
    """
    Generate (or regenerate) the discharge/transfer summary for a closed case.

    **Preconditions:**
    - disposition is not ACTIVE (409 `summary_requires_outcome`)
    - at least one ISBAR or daily progress note (409 `summary_no_data`)

    **Failures:**
    - 503 `llm_not_configured`: provider key/package missing
    - 502 `summary_failed`: provider error or empty output; safe to retry

    Every success bumps `discharge_summary_version` by one.
    """
    try:
        patient = await request_discharge_summary(db, patient_id, llm=llm)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return DischargeSummaryResponse(
        patient_id=patient.id,
        discharge_summary_version=patient.discharge_summary_version,
        discharge_summary_text=patient.discharge_summary_text,
    )
