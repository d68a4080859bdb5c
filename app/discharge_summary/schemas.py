# app/discharge_summary/schemas.py
"""
Discharge Summary Schemas
The structured, de-identified timeline handed to the LLM
"""
from typing import List

from pydantic import BaseModel, Field


class IsbarSnapshot(BaseModel):
    care_day: int
    identification: str
    situation: str
    background: str
    assessment: str
    recommendation: str
    labs_summary: str
    imaging_summary: str


class DailyProgressSnapshot(BaseModel):
    care_day: int
    progress_summary: str
    key_events: str
    current_supports: str
    pending_issues: str
    next_plan: str


class DischargeSummaryInput(BaseModel):
    """Everything the LLM sees. Internal random ID and care-day indices only."""
    patient_id: str
    unit: str
    final_outcome: str
    final_status: str
    latest_care_day: int
    isbar_timeline: List[IsbarSnapshot] = Field(default_factory=list)
    daily_progress_timeline: List[DailyProgressSnapshot] = Field(default_factory=list)


class DischargeSummaryResponse(BaseModel):
    patient_id: str
    discharge_summary_version: int
    discharge_summary_text: str
