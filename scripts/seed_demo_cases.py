# scripts/seed_demo_cases.py
#  to run the script, run the following command:
#  python scripts/seed_demo_cases.py

"""
Demo Seed Script
Creates a few de-identified ICU cases through the normal lifecycle services,
so every note is screened and scored exactly like a real submission.
All entries use care-day indexing only.
"""
import sys
import asyncio
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.database.connection import AsyncSessionLocal, init_models
from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressUpsert
from app.system_models.isbar_model.isbar_schemas import IsbarEntryCreate
from app.system_models.options import PatientDisposition, PatientStatus, Unit
from app.system_models.patient_model.patient_schemas import PatientCreate
from app.system_services.create_isbar_entry import create_isbar_entry
from app.system_services.create_patient import create_patient
from app.system_services.update_patient import update_patient_disposition
from app.system_services.upsert_daily_progress import upsert_daily_progress

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEMO_CASES = [
    {
        "unit": Unit.BHUBANESWAR,
        "status": PatientStatus.WATCH,
        "days": [
            {
                "identification": "Adult ICU cohort, severe community-acquired pneumonia pathway.",
                "situation": "Persistent oxygen demand and intermittent tachypnea.",
                "background": "Recent escalation from high-flow support after ward deterioration.",
                "assessment": "Gas exchange improving slowly; infection source likely pulmonary.",
                "recommendation": "Continue lung-protective strategy, reassess oxygen target each round.",
                "labs_summary": "Inflammatory markers remain elevated but lactate trend improving.",
                "imaging_summary": "Portable chest radiograph shows bilateral patchy infiltrates.",
                "flag_respiratory_concern": True,
                "flag_sepsis_concern": True,
            },
            {
                "identification": "Adult ICU cohort, severe community-acquired pneumonia pathway.",
                "situation": "Oxygen requirement now stable but secretion burden still high.",
                "background": "Broad-spectrum therapy already active; no shock signs.",
                "assessment": "Pulmonary recovery underway with residual inflammatory burden.",
                "recommendation": "Maintain current support and continue airway clearance protocol.",
                "labs_summary": "WBC trend down; inflammatory markers plateauing.",
                "imaging_summary": "No major interval radiographic progression.",
                "flag_respiratory_concern": True,
            },
        ],
        "progress": [
            {
                "care_day": 2,
                "progress_summary": "Oxygen need stable, airway clearance ongoing.",
                "key_events": "No escalation overnight.",
                "current_supports": "High-flow nasal oxygen.",
                "pending_issues": "Secretion burden.",
                "next_plan": "Trial of reduced flow next round.",
            },
        ],
    },
    {
        "unit": Unit.BHUBANESWAR,
        "status": PatientStatus.CRITICAL,
        "days": [
            {
                "identification": "Post-operative ICU monitoring cohort after emergency abdominal source control.",
                "situation": "Vasopressor dependence with low urine output.",
                "background": "Immediate post-procedure period with high inflammatory stress.",
                "assessment": "Mixed distributive and hypovolemic shock pattern still possible.",
                "recommendation": "Titrate perfusion strategy and reassess fluid responsiveness.",
                "labs_summary": "Lactate remains elevated; creatinine trending upward.",
                "imaging_summary": "Bedside abdominal ultrasound without clear collection.",
                "flag_hemodynamic_instability": True,
                "flag_sepsis_concern": True,
                "flag_low_urine_output": True,
            },
        ],
        "progress": [],
    },
    {
        "unit": Unit.BERHAMPUR,
        "status": PatientStatus.STABLE,
        "days": [
            {
                "identification": "Cardiac ICU pathway with decompensated heart failure now improving.",
                "situation": "Lower dyspnea burden and improving peripheral perfusion.",
                "background": "Responded to diuresis and afterload optimization.",
                "assessment": "Hemodynamically stable on oral therapy.",
                "recommendation": "Plan step-down once mobilisation is safe.",
                "labs_summary": "Renal function stable after diuresis.",
                "imaging_summary": "Reduced pulmonary congestion on repeat radiograph.",
            },
        ],
        "progress": [],
        "disposition": PatientDisposition.SHIFT_OUT,
    },
]


async def seed_demo_cases() -> int:
    """Create the demo cases; returns how many were created."""
    await init_models()
    created = 0

    async with AsyncSessionLocal() as db:
        for case in DEMO_CASES:
            patient = await create_patient(db, PatientCreate(unit=case["unit"], status=case["status"]))

            for day in case["days"]:
                _, suggestions = await create_isbar_entry(db, patient.id, IsbarEntryCreate(**day))
                logger.info(f"   D{patient.latest_care_day}: {len(suggestions)} suggestion(s)")

            for progress in case["progress"]:
                await upsert_daily_progress(db, patient.id, DailyProgressUpsert(**progress))

            if case.get("disposition"):
                await update_patient_disposition(db, patient.id, case["disposition"])

            created += 1

    return created


if __name__ == "__main__":
    print("=======================================================================\n")
    count = asyncio.run(seed_demo_cases())
    logger.info(f"✅ Seeded {count} demo case(s)")
    print("=======================================================================\n")
