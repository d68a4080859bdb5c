# app/system_services/system_routes.py
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressResponse, DailyProgressUpsert
from app.system_models.isbar_model.isbar_schemas import IsbarEntryCreate, IsbarEntryCreatedResponse, IsbarEntryResponse
from app.system_models.options import Unit
from app.system_models.patient_model.patient_schemas import (
    PATIENT_VIEW,
    PatientCreate,
    PatientDetailResponse,
    PatientDispositionUpdate,
    PatientListItem,
    PatientResponse,
    PatientStatusUpdate,
    RoundingSheetItem,
)
from app.system_models.suggestion_model.suggestion_schemas import SuggestionAddressedResponse, SuggestionResponse
from app.system_services.create_isbar_entry import create_isbar_entry
from app.system_services.create_patient import create_patient
from app.system_services.exceptions import CaseTrackerError
from app.system_services.list_patients import get_patient_detail, get_rounding_sheet, list_patients
from app.system_services.mark_suggestion_addressed import mark_suggestion_addressed
from app.system_services.update_patient import update_patient_disposition, update_patient_status
from app.system_services.upsert_daily_progress import upsert_daily_progress

logger = logging.getLogger(__name__)

router = APIRouter()


def to_http_exception(error: CaseTrackerError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_detail())


@router.post("/patients", response_model=PatientResponse)
async def create_patient_endpoint(patient: PatientCreate, db: AsyncSession = Depends(get_db)):
    """Open a new de-identified case (random internal ID, care day 0)."""
    try:
        return await create_patient(db, patient)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/patients", response_model=List[PatientListItem])
async def list_patients_endpoint(
    unit: Optional[Unit] = Query(None),
    view: PATIENT_VIEW = Query("ACTIVE"),
    db: AsyncSession = Depends(get_db),
):
    return await list_patients(db, unit=unit, view=view)


@router.get("/patients/rounding-sheet", response_model=List[RoundingSheetItem])
async def rounding_sheet_endpoint(unit: Optional[Unit] = Query(None), db: AsyncSession = Depends(get_db)):
    """Latest R-plan and unresolved suggestions for every ACTIVE case."""
    return await get_rounding_sheet(db, unit=unit)


@router.get("/patients/{patient_id}", response_model=PatientDetailResponse)
async def patient_detail_endpoint(patient_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await get_patient_detail(db, patient_id)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/patients/{patient_id}/status", response_model=PatientResponse)
async def update_status_endpoint(patient_id: str, body: PatientStatusUpdate, db: AsyncSession = Depends(get_db)):
    try:
        return await update_patient_status(db, patient_id, body.status)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/patients/{patient_id}/disposition", response_model=PatientResponse)
async def update_disposition_endpoint(
    patient_id: str, body: PatientDispositionUpdate, db: AsyncSession = Depends(get_db)
):
    try:
        return await update_patient_disposition(db, patient_id, body.disposition)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/patients/{patient_id}/isbar", response_model=IsbarEntryCreatedResponse)
async def create_isbar_endpoint(patient_id: str, entry: IsbarEntryCreate, db: AsyncSession = Depends(get_db)):
    """
    Add the next care day's ISBAR note.

    The note is screened for identifying content first; accepted notes come
    back with the conservative suggestions generated for them.
    """
    try:
        isbar, suggestions = await create_isbar_entry(db, patient_id, entry)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return IsbarEntryCreatedResponse(
        entry=IsbarEntryResponse.model_validate(isbar),
        suggestions=[SuggestionResponse.model_validate(s) for s in suggestions],
        latest_care_day=isbar.care_day,
    )


@router.put("/patients/{patient_id}/daily-progress", response_model=DailyProgressResponse)
async def upsert_daily_progress_endpoint(
    patient_id: str, progress: DailyProgressUpsert, db: AsyncSession = Depends(get_db)
):
    try:
        return await upsert_daily_progress(db, patient_id, progress)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.post(
    "/patients/{patient_id}/suggestions/{suggestion_id}/addressed",
    response_model=SuggestionAddressedResponse,
)
async def mark_addressed_endpoint(patient_id: str, suggestion_id: int, db: AsyncSession = Depends(get_db)):
    try:
        updated = await mark_suggestion_addressed(db, patient_id, suggestion_id)
    except CaseTrackerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return SuggestionAddressedResponse(patient_id=patient_id, suggestion_id=suggestion_id, updated=updated)
