"""Repository tests against an in-memory SQLite database."""
from datetime import date, datetime

import pytest

from kinisi.models import Assessment, ExerciseProgram, ProgramStatus, SurveyResponse
from kinisi.repositories import OnboardingRepository, ProgramRepository
from tests.factories import build_program


@pytest.mark.asyncio
async def test_program_create_and_get(db_session):
    repo = ProgramRepository(db_session)

    created = await repo.create(ExerciseProgram(user_id="user-1", program_json=build_program([2])))
    fetched = await repo.get(created.id)

    assert fetched is not None
    assert len(created.id) == 36
    assert fetched.status == ProgramStatus.DRAFT
    assert fetched.program_json["weeks"][0]["sessions"][0]["id"] == "w1-s1"


@pytest.mark.asyncio
async def test_program_update(db_session):
    repo = ProgramRepository(db_session)
    created = await repo.create(ExerciseProgram(user_id="user-1", program_json=build_program([1])))

    updated = await repo.update(
        created.id,
        {"start_date": date(2025, 1, 6), "scheduling_preferences": {"timeOfDay": "08:00"}},
    )

    assert updated.start_date == date(2025, 1, 6)
    assert updated.scheduling_preferences == {"timeOfDay": "08:00"}


@pytest.mark.asyncio
async def test_program_update_missing(db_session):
    repo = ProgramRepository(db_session)
    assert await repo.update("00000000-0000-0000-0000-000000000000", {"status": "active"}) is None


@pytest.mark.asyncio
async def test_latest_program_for_user(db_session):
    repo = ProgramRepository(db_session)
    await repo.create(ExerciseProgram(user_id="user-1", created_at=datetime(2025, 1, 1)))
    newest = await repo.create(ExerciseProgram(user_id="user-1", created_at=datetime(2025, 2, 1)))
    await repo.create(ExerciseProgram(user_id="user-2", created_at=datetime(2025, 3, 1)))

    latest = await repo.get_latest_for_user("user-1")

    assert latest.id == newest.id
    assert await repo.get_latest_for_user("nobody") is None


@pytest.mark.parametrize(
    "status,approved",
    [
        (ProgramStatus.DRAFT, False),
        (ProgramStatus.APPROVED, True),
        (ProgramStatus.ACTIVE, True),
        (ProgramStatus.COMPLETED, True),
        (ProgramStatus.CANCELLED, False),
    ],
)
def test_program_is_approved(status, approved):
    assert ExerciseProgram(user_id="user-1", status=status).is_approved is approved


@pytest.mark.asyncio
async def test_latest_survey_and_assessment(db_session):
    db_session.add_all(
        [
            SurveyResponse(user_id="user-1", response={"goal": "old"}, created_at=datetime(2025, 1, 1)),
            SurveyResponse(user_id="user-1", response={"goal": "new"}, created_at=datetime(2025, 1, 2)),
            Assessment(user_id="user-1", assessment="first", approved=False, created_at=datetime(2025, 1, 1)),
            Assessment(user_id="user-1", assessment="second", approved=True, created_at=datetime(2025, 1, 3)),
        ]
    )
    await db_session.flush()
    repo = OnboardingRepository(db_session)

    survey = await repo.get_latest_survey_response("user-1")
    assessment = await repo.get_latest_assessment("user-1")

    assert survey.response == {"goal": "new"}
    assert assessment.assessment == "second"
    assert assessment.approved is True
    assert await repo.get_latest_survey_response("user-2") is None
    assert await repo.get_latest_assessment("user-2") is None
