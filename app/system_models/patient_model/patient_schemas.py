# app/system_models/patient_model/patient_schemas.py
from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel
from app.system_models.options import PatientDisposition, PatientStatus, Unit
from app.system_models.isbar_model.isbar_schemas import IsbarEntryResponse
from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressResponse
from app.system_models.suggestion_model.suggestion_schemas import SuggestionResponse

PATIENT_VIEW = Literal["ACTIVE", "CLOSED", "ALL"]

class PatientCreate(BaseModel):
    unit: Unit
    status: PatientStatus = PatientStatus.STABLE

class PatientStatusUpdate(BaseModel):
    status: PatientStatus

class PatientDispositionUpdate(BaseModel):
    disposition: PatientDisposition

class PatientResponse(BaseModel):
    id: str
    unit: Unit
    status: PatientStatus
    disposition: PatientDisposition
    is_active: bool
    latest_care_day: int
    discharge_summary_text: Optional[str] = None
    discharge_summary_version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PatientDetailResponse(PatientResponse):
    """Case with its full history, newest care day first."""
    isbar_entries: List[IsbarEntryResponse] = []
    suggestions: List[SuggestionResponse] = []
    daily_progress: List[DailyProgressResponse] = []

class PatientListItem(PatientResponse):
    latest_isbar: Optional[IsbarEntryResponse] = None
    pending_suggestion_count: int = 0

class RoundingSheetItem(BaseModel):
    id: str
    unit: Unit
    status: PatientStatus
    latest_care_day: int
    latest_recommendation: Optional[str] = None
    pending_for_latest_day: List[SuggestionResponse] = []
    pending_total: int = 0
