# app/system_models/suggestion_model/suggestion_schemas.py
from datetime import datetime
from pydantic import BaseModel
from app.system_models.options import SuggestionCategory, SuggestionStatus

class SuggestionResponse(BaseModel):
    id: int
    patient_id: str
    isbar_id: int
    care_day: int
    category: SuggestionCategory
    content: str
    rationale: str
    status: SuggestionStatus
    created_at: datetime

    class Config:
        from_attributes = True

class SuggestionAddressedResponse(BaseModel):
    patient_id: str
    suggestion_id: int
    updated: bool
