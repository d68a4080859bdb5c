# app/system_models/isbar_model/isbar_schemas.py
from typing import List
from datetime import datetime
from pydantic import BaseModel
from app.system_models.suggestion_model.suggestion_schemas import SuggestionResponse

class IsbarEntryCreate(BaseModel):
    identification: str
    situation: str
    background: str
    assessment: str
    recommendation: str
    labs_summary: str
    imaging_summary: str

    flag_hemodynamic_instability: bool = False
    flag_respiratory_concern: bool = False
    flag_neurologic_change: bool = False
    flag_sepsis_concern: bool = False
    flag_low_urine_output: bool = False
    flag_uncontrolled_pain: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "identification": "Adult ICU cohort, severe community-acquired pneumonia pathway.",
                "situation": "Persistent oxygen demand and intermittent tachypnea.",
                "background": "Recent escalation from high-flow support after ward deterioration.",
                "assessment": "Gas exchange improving slowly; infection source likely pulmonary.",
                "recommendation": "Continue lung-protective strategy, reassess oxygen target each round.",
                "labs_summary": "Inflammatory markers remain elevated but lactate trend improving.",
                "imaging_summary": "Portable chest radiograph shows bilateral patchy infiltrates.",
                "flag_respiratory_concern": True,
                "flag_sepsis_concern": True,
            }
        }

class IsbarEntryResponse(IsbarEntryCreate):
    id: int
    patient_id: str
    care_day: int
    created_at: datetime

    class Config:
        from_attributes = True

class IsbarEntryCreatedResponse(BaseModel):
    entry: IsbarEntryResponse
    suggestions: List[SuggestionResponse]
    latest_care_day: int
