# app/system_models/daily_progress_model/daily_progress_schemas.py
from datetime import datetime
from pydantic import BaseModel

class DailyProgressFields(BaseModel):
    progress_summary: str
    key_events: str
    current_supports: str
    pending_issues: str
    next_plan: str

class DailyProgressUpsert(DailyProgressFields):
    care_day: int

class DailyProgressResponse(DailyProgressUpsert):
    id: int
    patient_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
