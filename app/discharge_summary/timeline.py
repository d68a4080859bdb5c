# app/discharge_summary/timeline.py
from typing import Iterable

from app.discharge_summary.schemas import DailyProgressSnapshot, DischargeSummaryInput, IsbarSnapshot
from app.system_models.daily_progress_model.daily_progress_model import DailyProgress
from app.system_models.isbar_model.isbar_model import IsbarEntry
from app.system_models.patient_model.patient_model import Patient


def build_summary_input(
    patient: Patient,
    isbar_entries: Iterable[IsbarEntry],
    daily_progress: Iterable[DailyProgress],
) -> DischargeSummaryInput:
    """Assemble both timelines in ascending care-day order."""
    return DischargeSummaryInput(
        patient_id=patient.id,
        unit=patient.unit,
        final_outcome=patient.disposition,
        final_status=patient.status,
        latest_care_day=patient.latest_care_day,
        isbar_timeline=[
            IsbarSnapshot.model_validate(entry, from_attributes=True)
            for entry in sorted(isbar_entries, key=lambda e: e.care_day)
        ],
        daily_progress_timeline=[
            DailyProgressSnapshot.model_validate(progress, from_attributes=True)
            for progress in sorted(daily_progress, key=lambda p: p.care_day)
        ],
    )
