"""
Daily progress notes: care-day bounds, overwrite semantics and screening.
"""
import asyncio

import pytest
from sqlalchemy import func, select

from app.system_models.daily_progress_model.daily_progress_model import DailyProgress
from app.system_models.options import PatientDisposition
from app.system_services.create_isbar_entry import create_isbar_entry
from app.system_services.exceptions import CaseValidationError, DeidBlockedError, InactiveCaseError, NotFoundError
from app.system_services import upsert_daily_progress as upsert_module
from app.system_services.update_patient import update_patient_disposition
from app.system_services.upsert_daily_progress import upsert_daily_progress, validate_progress_care_day


async def _progress_rows(db, patient_id):
    result = await db.execute(
        select(func.count()).select_from(DailyProgress).where(DailyProgress.patient_id == patient_id)
    )
    return result.scalar_one()


class TestCareDayBounds:
    @pytest.mark.parametrize("care_day, latest", [(1, 0), (1, 1), (2, 3), (3, 3)])
    def test_allowed(self, care_day, latest):
        assert validate_progress_care_day(care_day, latest) == care_day

    @pytest.mark.parametrize("care_day, latest", [(0, 3), (-1, 3), (2, 0), (4, 3)])
    def test_out_of_range(self, care_day, latest):
        with pytest.raises(CaseValidationError) as exc:
            validate_progress_care_day(care_day, latest)
        assert exc.value.field == "care_day"

    @pytest.mark.parametrize("care_day", ["3", 2.0, True, None])
    def test_non_integer(self, care_day):
        with pytest.raises(CaseValidationError):
            validate_progress_care_day(care_day, 5)


class TestUpsertDailyProgress:
    async def test_day_one_before_any_isbar(self, db, patient, make_progress):
        record = await upsert_daily_progress(db, patient.id, make_progress(care_day=1))
        assert record.care_day == 1
        assert record.progress_summary == "Settled overnight."

    async def test_future_day_rejected(self, db, patient, make_progress):
        with pytest.raises(CaseValidationError):
            await upsert_daily_progress(db, patient.id, make_progress(care_day=2))
        assert await _progress_rows(db, patient.id) == 0

    async def test_overwrite_keeps_single_row(self, db, patient, make_isbar, make_progress):
        await create_isbar_entry(db, patient.id, make_isbar())
        await create_isbar_entry(db, patient.id, make_isbar())

        first = await upsert_daily_progress(db, patient.id, make_progress(care_day=1))
        second = await upsert_daily_progress(
            db, patient.id, make_progress(care_day=1, next_plan="  Step down when mobilising.  ")
        )

        assert second.id == first.id
        assert second.next_plan == "Step down when mobilising."
        assert await _progress_rows(db, patient.id) == 1

    async def test_earlier_day_after_later_notes(self, db, patient, make_isbar, make_progress):
        for _ in range(3):
            await create_isbar_entry(db, patient.id, make_isbar())

        await upsert_daily_progress(db, patient.id, make_progress(care_day=3))
        await upsert_daily_progress(db, patient.id, make_progress(care_day=2))
        assert await _progress_rows(db, patient.id) == 2

    async def test_inactive_case_rejected(self, db, patient, make_progress):
        await update_patient_disposition(db, patient.id, PatientDisposition.DAMA)
        with pytest.raises(InactiveCaseError):
            await upsert_daily_progress(db, patient.id, make_progress(care_day=1))

    async def test_blank_field_rejected(self, db, patient, make_progress):
        with pytest.raises(CaseValidationError) as exc:
            await upsert_daily_progress(db, patient.id, make_progress(key_events=""))
        assert exc.value.field == "key_events"

    async def test_identifying_text_blocked(self, db, patient, make_progress):
        with pytest.raises(DeidBlockedError) as exc:
            await upsert_daily_progress(db, patient.id, make_progress(pending_issues="UHID to confirm"))
        assert exc.value.reasons == ["identifier keyword"]
        assert await _progress_rows(db, patient.id) == 0

    async def test_unknown_patient(self, db, make_progress):
        with pytest.raises(NotFoundError):
            await upsert_daily_progress(db, "PT-MISSING0", make_progress())

    async def test_insert_race_falls_back_to_overwrite(self, db, patient, make_progress, monkeypatch):
        patient_id = patient.id
        first = await upsert_daily_progress(db, patient_id, make_progress(care_day=1))
        first_id = first.id

        real_find = upsert_module.find_daily_progress
        calls = []

        async def miss_first_lookup(session, pid, care_day):
            calls.append(care_day)
            if len(calls) == 1:
                return None
            return await real_find(session, pid, care_day)

        monkeypatch.setattr(upsert_module, "find_daily_progress", miss_first_lookup)

        record = await upsert_daily_progress(db, patient_id, make_progress(care_day=1, next_plan="Wean support."))

        assert len(calls) == 2
        assert record.id == first_id
        assert record.next_plan == "Wean support."
        assert await _progress_rows(db, patient_id) == 1

    async def test_concurrent_identical_upserts_both_succeed(self, session_factory, patient, make_progress):
        patient_id = patient.id

        async def submit():
            async with session_factory() as session:
                return await upsert_daily_progress(session, patient_id, make_progress(care_day=1))

        results = await asyncio.gather(submit(), submit(), return_exceptions=True)

        assert all(isinstance(r, DailyProgress) for r in results)
        async with session_factory() as check:
            assert await _progress_rows(check, patient_id) == 1
