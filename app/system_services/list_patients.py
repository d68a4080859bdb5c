# app/system_services/list_patients.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressResponse
from app.system_models.isbar_model.isbar_schemas import IsbarEntryResponse
from app.system_models.options import PatientDisposition, SuggestionStatus, Unit
from app.system_models.patient_model.patient_model import Patient
from app.system_models.patient_model.patient_schemas import (
    PATIENT_VIEW,
    PatientDetailResponse,
    PatientListItem,
    PatientResponse,
    RoundingSheetItem,
)
from app.system_models.suggestion_model.suggestion_schemas import SuggestionResponse
from app.system_services.exceptions import NotFoundError


def _with_history(query):
    return query.options(
        selectinload(Patient.isbar_entries),
        selectinload(Patient.suggestions),
        selectinload(Patient.daily_progress),
    ).execution_options(populate_existing=True)


def _newest_first(items):
    return sorted(items, key=lambda item: (-item.care_day, item.id))


def _pending(patient: Patient):
    return [s for s in patient.suggestions if s.status == SuggestionStatus.PENDING.value]


async def get_patient_detail(db: AsyncSession, patient_id: str) -> PatientDetailResponse:
    result = await db.execute(_with_history(select(Patient).where(Patient.id == patient_id)))
    patient = result.scalar_one_or_none()
    if patient is None:
        raise NotFoundError("Patient", patient_id)

    base = PatientResponse.model_validate(patient).model_dump()
    return PatientDetailResponse(
        **base,
        isbar_entries=[IsbarEntryResponse.model_validate(e) for e in _newest_first(patient.isbar_entries)],
        suggestions=[SuggestionResponse.model_validate(s) for s in _newest_first(patient.suggestions)],
        daily_progress=[DailyProgressResponse.model_validate(p) for p in _newest_first(patient.daily_progress)],
    )


async def list_patients(
    db: AsyncSession,
    unit: Optional[Unit] = None,
    view: PATIENT_VIEW = "ACTIVE",
) -> List[PatientListItem]:
    """Cases ordered by unit then ID. view: ACTIVE, CLOSED (any other disposition) or ALL."""
    query = select(Patient)
    if unit is not None:
        query = query.where(Patient.unit == Unit(unit).value)
    if view == "ACTIVE":
        query = query.where(Patient.disposition == PatientDisposition.ACTIVE.value)
    elif view == "CLOSED":
        query = query.where(Patient.disposition != PatientDisposition.ACTIVE.value)

    result = await db.execute(_with_history(query.order_by(Patient.unit, Patient.id)))

    items = []
    for patient in result.scalars().all():
        latest = _newest_first(patient.isbar_entries)[:1]
        items.append(
            PatientListItem(
                **PatientResponse.model_validate(patient).model_dump(),
                latest_isbar=IsbarEntryResponse.model_validate(latest[0]) if latest else None,
                pending_suggestion_count=len(_pending(patient)),
            )
        )
    return items


async def get_rounding_sheet(db: AsyncSession, unit: Optional[Unit] = None) -> List[RoundingSheetItem]:
    """Handoff view: each ACTIVE case's latest R-plan and unresolved suggestions for that day."""
    query = select(Patient).where(Patient.disposition == PatientDisposition.ACTIVE.value)
    if unit is not None:
        query = query.where(Patient.unit == Unit(unit).value)

    result = await db.execute(_with_history(query.order_by(Patient.unit, Patient.id)))

    sheet = []
    for patient in result.scalars().all():
        latest = _newest_first(patient.isbar_entries)[:1]
        pending = _newest_first(_pending(patient))
        sheet.append(
            RoundingSheetItem(
                id=patient.id,
                unit=patient.unit,
                status=patient.status,
                latest_care_day=patient.latest_care_day,
                latest_recommendation=latest[0].recommendation if latest else None,
                pending_for_latest_day=[
                    SuggestionResponse.model_validate(s)
                    for s in pending
                    if s.care_day == patient.latest_care_day
                ],
                pending_total=len(pending),
            )
        )
    return sheet
