"""
Case lifecycle: patient creation, status/disposition, ISBAR notes and suggestions.
"""
import asyncio

import pytest
from sqlalchemy import func, select

from app.system_models.isbar_model.isbar_model import IsbarEntry
from app.system_models.options import PatientDisposition, PatientStatus, SuggestionStatus, Unit
from app.system_models.patient_model.patient_model import Patient
from app.system_models.patient_model.patient_schemas import PatientCreate
from app.system_models.suggestion_model.suggestion_model import Suggestion
from app.system_services.create_isbar_entry import create_isbar_entry
from app.system_services import create_patient as create_patient_module
from app.system_services.create_patient import create_patient
from app.system_services.exceptions import (
    CareDayConflictError,
    CaseValidationError,
    DeidBlockedError,
    IdentifierAllocationExhausted,
    InactiveCaseError,
    NotFoundError,
)
from app.system_services.mark_suggestion_addressed import mark_suggestion_addressed
from app.system_services.update_patient import (
    DISPOSITION_TRANSITIONS,
    can_transition,
    update_patient_disposition,
    update_patient_status,
)


async def _count(session, model, patient_id):
    result = await session.execute(select(func.count()).select_from(model).where(model.patient_id == patient_id))
    return result.scalar_one()


async def _fresh_patient(session_factory, patient_id):
    async with session_factory() as session:
        return await session.get(Patient, patient_id)


class TestCreatePatient:
    async def test_new_case_defaults(self, patient):
        assert patient.id.startswith("PT-")
        assert len(patient.id) == len("PT-") + 8
        assert patient.unit == Unit.BHUBANESWAR.value
        assert patient.status == PatientStatus.WATCH.value
        assert patient.disposition == PatientDisposition.ACTIVE.value
        assert patient.is_active
        assert patient.latest_care_day == 0
        assert patient.discharge_summary_version == 0
        assert patient.discharge_summary_text is None

    async def test_ids_are_unique(self, db):
        ids = {
            (await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR))).id
            for _ in range(5)
        }
        assert len(ids) == 5

    async def test_retries_past_collisions(self, db):
        await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-TAKEN000")
        candidates = iter(["PT-TAKEN000", "PT-TAKEN000", "PT-FREE0000"])

        created = await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: next(candidates))
        assert created.id == "PT-FREE0000"

    async def test_allocation_exhausted(self, db):
        await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-TAKEN000")

        with pytest.raises(IdentifierAllocationExhausted) as exc:
            await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-TAKEN000")
        assert exc.value.attempts == 8

    async def test_insert_collision_moves_to_next_candidate(self, db, session_factory, monkeypatch):
        # Another writer holds the ID, but the pre-insert check does not see it
        async with session_factory() as other:
            await create_patient(other, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-RACE0000")

        async def never_in_use(session, candidate):
            return False

        monkeypatch.setattr(create_patient_module, "patient_id_in_use", never_in_use)
        candidates = iter(["PT-RACE0000", "PT-FREE0000"])

        created = await create_patient(db, PatientCreate(unit=Unit.BHUBANESWAR), id_factory=lambda: next(candidates))
        assert created.id == "PT-FREE0000"
        assert created.unit == Unit.BHUBANESWAR.value

    async def test_insert_collisions_count_toward_attempts(self, db, session_factory, monkeypatch):
        async with session_factory() as other:
            await create_patient(other, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-RACE0000")

        async def never_in_use(session, candidate):
            return False

        monkeypatch.setattr(create_patient_module, "patient_id_in_use", never_in_use)

        with pytest.raises(IdentifierAllocationExhausted) as exc:
            await create_patient(
                db, PatientCreate(unit=Unit.BERHAMPUR), id_factory=lambda: "PT-RACE0000", max_attempts=3
            )
        assert exc.value.attempts == 3


class TestStatusAndDisposition:
    async def test_status_update_allowed_on_closed_case(self, db, patient):
        await update_patient_disposition(db, patient.id, PatientDisposition.DISCHARGED)
        updated = await update_patient_status(db, patient.id, PatientStatus.CRITICAL)
        assert updated.status == PatientStatus.CRITICAL.value
        assert updated.disposition == PatientDisposition.DISCHARGED.value

    async def test_closed_case_can_be_reopened(self, db, patient, make_isbar):
        await update_patient_disposition(db, patient.id, PatientDisposition.DEATH)
        reopened = await update_patient_disposition(db, patient.id, PatientDisposition.ACTIVE)
        assert reopened.is_active

        entry, _ = await create_isbar_entry(db, patient.id, make_isbar())
        assert entry.care_day == 1

    def test_transition_table_permits_every_pair(self):
        assert set(DISPOSITION_TRANSITIONS) == set(PatientDisposition)
        for current in PatientDisposition:
            for target in PatientDisposition:
                assert can_transition(current, target)

    async def test_unknown_patient(self, db):
        with pytest.raises(NotFoundError):
            await update_patient_status(db, "PT-MISSING0", PatientStatus.STABLE)


class TestCreateIsbarEntry:
    async def test_care_day_advances_by_one(self, db, patient, make_isbar):
        for expected in (1, 2, 3):
            before = patient.latest_care_day
            entry, _ = await create_isbar_entry(db, patient.id, make_isbar())
            assert entry.care_day == before + 1 == expected
            assert patient.latest_care_day == entry.care_day

    async def test_suggestions_persisted_pending_and_linked(self, db, patient, make_isbar):
        entry, suggestions = await create_isbar_entry(db, patient.id, make_isbar(flag_sepsis_concern=True))

        assert len(suggestions) == 3
        for suggestion in suggestions:
            assert suggestion.id is not None
            assert suggestion.isbar_id == entry.id
            assert suggestion.care_day == entry.care_day
            assert suggestion.status == SuggestionStatus.PENDING.value
        assert await _count(db, Suggestion, patient.id) == 3

    async def test_neutral_note_stores_default_suggestion(self, db, patient, make_isbar):
        _, suggestions = await create_isbar_entry(db, patient.id, make_isbar())
        assert len(suggestions) == 1
        assert suggestions[0].content.startswith("No high-risk trigger detected")

    async def test_fields_are_trimmed(self, db, patient, make_isbar):
        entry, _ = await create_isbar_entry(db, patient.id, make_isbar(situation="   Calm overnight.  "))
        assert entry.situation == "Calm overnight."

    async def test_inactive_case_rejected_without_side_effects(self, db, session_factory, patient, make_isbar):
        await create_isbar_entry(db, patient.id, make_isbar())
        await update_patient_disposition(db, patient.id, PatientDisposition.DISCHARGED)

        with pytest.raises(InactiveCaseError):
            await create_isbar_entry(db, patient.id, make_isbar(flag_sepsis_concern=True))

        assert await _count(db, IsbarEntry, patient.id) == 1
        assert await _count(db, Suggestion, patient.id) == 1
        assert (await _fresh_patient(session_factory, patient.id)).latest_care_day == 1

    async def test_blank_field_rejected(self, db, patient, make_isbar):
        with pytest.raises(CaseValidationError) as exc:
            await create_isbar_entry(db, patient.id, make_isbar(imaging_summary="   "))
        assert exc.value.field == "imaging_summary"
        assert await _count(db, IsbarEntry, patient.id) == 0

    async def test_identifying_text_blocked(self, db, session_factory, patient, make_isbar):
        with pytest.raises(DeidBlockedError) as exc:
            await create_isbar_entry(db, patient.id, make_isbar(background="Admitted 2024-03-01 via ED."))
        assert exc.value.reasons == ["exact ISO date"]

        assert await _count(db, IsbarEntry, patient.id) == 0
        assert await _count(db, Suggestion, patient.id) == 0
        assert (await _fresh_patient(session_factory, patient.id)).latest_care_day == 0

    async def test_unknown_patient(self, db, make_isbar):
        with pytest.raises(NotFoundError):
            await create_isbar_entry(db, "PT-MISSING0", make_isbar())

    async def test_existing_care_day_is_a_conflict(self, db, session_factory, patient, make_isbar):
        patient_id = patient.id
        # A note for day 1 already exists but the counter was never advanced
        async with session_factory() as other:
            other.add(IsbarEntry(patient_id=patient_id, care_day=1, **make_isbar().model_dump()))
            await other.commit()

        with pytest.raises(CareDayConflictError):
            await create_isbar_entry(db, patient_id, make_isbar(flag_sepsis_concern=True))

        async with session_factory() as check:
            assert (await check.get(Patient, patient_id)).latest_care_day == 0
            assert await _count(check, IsbarEntry, patient_id) == 1
            assert await _count(check, Suggestion, patient_id) == 0

    async def test_case_closed_by_another_session_is_inactive(self, db, session_factory, patient, make_isbar):
        patient_id = patient.id
        # db still holds the ACTIVE copy in its identity map
        async with session_factory() as other:
            closing = await other.get(Patient, patient_id)
            closing.disposition = PatientDisposition.DISCHARGED.value
            await other.commit()

        with pytest.raises(InactiveCaseError) as exc:
            await create_isbar_entry(db, patient_id, make_isbar())
        assert exc.value.disposition == PatientDisposition.DISCHARGED.value

        async with session_factory() as check:
            assert (await check.get(Patient, patient_id)).latest_care_day == 0
            assert await _count(check, IsbarEntry, patient_id) == 0
            assert await _count(check, Suggestion, patient_id) == 0

    async def test_concurrent_submissions_never_share_a_care_day(self, session_factory, patient, make_isbar):
        async def submit():
            async with session_factory() as session:
                return await create_isbar_entry(session, patient.id, make_isbar())

        results = await asyncio.gather(*(submit() for _ in range(3)), return_exceptions=True)
        successes = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]

        assert successes
        assert all(isinstance(f, CareDayConflictError) for f in failures)

        async with session_factory() as check:
            days = (
                await check.execute(
                    select(IsbarEntry.care_day).where(IsbarEntry.patient_id == patient.id).order_by(IsbarEntry.care_day)
                )
            ).scalars().all()
            assert days == list(range(1, len(successes) + 1))
            assert (await check.get(Patient, patient.id)).latest_care_day == len(successes)


class TestMarkSuggestionAddressed:
    async def test_idempotent(self, db, patient, make_isbar):
        _, suggestions = await create_isbar_entry(db, patient.id, make_isbar())
        suggestion_id = suggestions[0].id

        assert await mark_suggestion_addressed(db, patient.id, suggestion_id) is True
        assert await mark_suggestion_addressed(db, patient.id, suggestion_id) is False

        stored = await db.get(Suggestion, suggestion_id)
        await db.refresh(stored)
        assert stored.status == SuggestionStatus.ADDRESSED.value

    async def test_other_patients_suggestion_untouched(self, db, patient, make_isbar):
        other = await create_patient(db, PatientCreate(unit=Unit.BERHAMPUR))
        _, suggestions = await create_isbar_entry(db, other.id, make_isbar())

        assert await mark_suggestion_addressed(db, patient.id, suggestions[0].id) is False

        stored = await db.get(Suggestion, suggestions[0].id)
        await db.refresh(stored)
        assert stored.status == SuggestionStatus.PENDING.value

    async def test_unknown_suggestion_is_noop(self, db, patient):
        assert await mark_suggestion_addressed(db, patient.id, 9999) is False

    async def test_unknown_patient(self, db):
        with pytest.raises(NotFoundError):
            await mark_suggestion_addressed(db, "PT-MISSING0", 1)
