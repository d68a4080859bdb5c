"""
Shared fixtures: a throwaway SQLite database per test and ISBAR/progress payload factories.
"""
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.database.connection import init_models
from app.system_models.daily_progress_model.daily_progress_schemas import DailyProgressUpsert
from app.system_models.isbar_model.isbar_schemas import IsbarEntryCreate
from app.system_models.options import PatientStatus, Unit
from app.system_models.patient_model.patient_schemas import PatientCreate
from app.system_services.create_patient import create_patient

# No trigger keywords, digits, dates or identifier words anywhere.
NEUTRAL_ISBAR = {
    "identification": "Adult ICU cohort, elective post-operative observation.",
    "situation": "Comfortable at rest on room air.",
    "background": "Uncomplicated elective procedure yesterday.",
    "assessment": "Recovering as expected.",
    "recommendation": "Continue routine care and reassess next round.",
    "labs_summary": "Routine panel within normal limits.",
    "imaging_summary": "No imaging required.",
}

NEUTRAL_PROGRESS = {
    "progress_summary": "Settled overnight.",
    "key_events": "None of note.",
    "current_supports": "Room air, oral intake.",
    "pending_issues": "Physiotherapy review.",
    "next_plan": "Continue current plan.",
}


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_isbar():
    def _make(**overrides) -> IsbarEntryCreate:
        return IsbarEntryCreate(**{**NEUTRAL_ISBAR, **overrides})

    return _make


@pytest.fixture
def make_progress():
    def _make(care_day: int = 1, **overrides) -> DailyProgressUpsert:
        return DailyProgressUpsert(care_day=care_day, **{**NEUTRAL_PROGRESS, **overrides})

    return _make


@pytest.fixture
async def patient(db):
    return await create_patient(db, PatientCreate(unit=Unit.BHUBANESWAR, status=PatientStatus.WATCH))
