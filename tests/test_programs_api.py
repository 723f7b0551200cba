"""End-to-end tests for the program scheduling and onboarding routes."""
import uuid
from datetime import date, datetime

import pytest

from kinisi.models import Assessment, ExerciseProgram, ProgramStatus, SurveyResponse
from tests.factories import build_program, start_ats

USER = {"X-User-ID": "user-1"}
SURVEY = {"goal": "strength", "experience": "beginner", "days": 3}


async def _seed_program(session_maker, program_json=None, user_id="user-1", **fields) -> str:
    async with session_maker() as session:
        record = ExerciseProgram(
            user_id=user_id,
            status=fields.pop("status", ProgramStatus.APPROVED),
            program_json=program_json if program_json is not None else build_program([3, 3]),
            **fields,
        )
        session.add(record)
        await session.commit()
        return record.id


async def _load_program(session_maker, program_id: str) -> ExerciseProgram:
    async with session_maker() as session:
        return await session.get(ExerciseProgram, program_id)


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestScheduleEndpoint:
    @pytest.mark.asyncio
    async def test_schedules_and_persists(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.post(
            f"/programs/{program_id}/schedule",
            json={"startDate": "2025-01-06", "preferences": {"daysOfWeek": [1, 3, 5], "timeOfDay": "07:15"}},
            headers=USER,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["start_date"] == "2025-01-06"
        assert data["scheduling_preferences"] == {
            "daysOfWeek": [1, 3, 5],
            "timeOfDay": "07:15",
            "sessionsPerWeek": 3,
            "defaultDurationMinutes": 60,
        }
        assert start_ats(data["program_json"]) == [
            "2025-01-06T07:15",
            "2025-01-08T07:15",
            "2025-01-10T07:15",
            "2025-01-13T07:15",
            "2025-01-15T07:15",
            "2025-01-17T07:15",
        ]

        stored = await _load_program(session_maker, program_id)
        assert stored.last_scheduled_at is not None
        assert stored.start_date == date(2025, 1, 6)
        assert start_ats(stored.program_json) == start_ats(data["program_json"])

    @pytest.mark.asyncio
    async def test_uses_stored_start_date_without_body(self, client, session_maker):
        program_id = await _seed_program(session_maker, start_date=date(2025, 2, 3))

        response = await client.post(f"/programs/{program_id}/schedule", headers=USER)

        assert response.status_code == 200
        assert start_ats(response.json()["data"]["program_json"])[0] == "2025-02-03T08:00"

    @pytest.mark.asyncio
    async def test_rescheduling_is_idempotent(self, client, session_maker):
        program_id = await _seed_program(session_maker)
        body = {"startDate": "2025-01-06"}

        first = await client.post(f"/programs/{program_id}/schedule", json=body, headers=USER)
        second = await client.post(f"/programs/{program_id}/schedule", json=body, headers=USER)

        assert first.json()["data"]["program_json"] == second.json()["data"]["program_json"]

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.post(
            f"/programs/{program_id}/schedule",
            json={"startDate": "2025-01-06"},
            headers={**USER, "X-Request-ID": "req-abc"},
        )

        assert response.headers["X-Request-ID"] == "req-abc"
        assert response.json()["meta"]["request_id"] == "req-abc"

    @pytest.mark.asyncio
    async def test_unknown_program(self, client):
        response = await client.post(f"/programs/{uuid.uuid4()}/schedule", headers=USER)

        assert response.status_code == 404
        assert response.json()["data"] is None

    @pytest.mark.asyncio
    async def test_non_uuid_program_id(self, client):
        response = await client.post("/programs/not-a-uuid/schedule", headers=USER)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_users_program(self, client, session_maker):
        program_id = await _seed_program(session_maker, user_id="user-2")

        response = await client.post(f"/programs/{program_id}/schedule", headers=USER)

        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "AUTH_006"

    @pytest.mark.asyncio
    async def test_missing_user(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.post(f"/programs/{program_id}/schedule")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_start_date(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.post(
            f"/programs/{program_id}/schedule", json={"startDate": "next monday"}, headers=USER
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "VAL_STARTDATE_001"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("preferences", ["weekdays", [1, 3], {"daysOfWeek": [9]}, {"timeOfDay": "25:00"}])
    async def test_invalid_preferences(self, client, session_maker, preferences):
        program_id = await _seed_program(session_maker)

        response = await client.post(
            f"/programs/{program_id}/schedule",
            json={"startDate": "2025-01-06", "preferences": preferences},
            headers=USER,
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "VAL_PREFERENCES_001"
        stored = await _load_program(session_maker, program_id)
        assert stored.last_scheduled_at is None

    @pytest.mark.asyncio
    async def test_malformed_program(self, client, session_maker):
        program_id = await _seed_program(session_maker, program_json={"weeks": "soon"})

        response = await client.post(f"/programs/{program_id}/schedule", headers=USER)

        assert response.status_code == 422
        assert response.json()["errors"][0]["code"] == "BR_PROGRAM_MALFORMED"


class TestScheduleEdits:
    @pytest.mark.asyncio
    async def test_update_start_date(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/start-date", json={"startDate": "2025-03-03"}, headers=USER
        )

        assert response.status_code == 200
        assert response.json()["data"]["start_date"] == "2025-03-03"

    @pytest.mark.asyncio
    async def test_shift_schedule(self, client, session_maker):
        program_id = await _seed_program(session_maker)
        await client.post(f"/programs/{program_id}/schedule", json={"startDate": "2025-01-06"}, headers=USER)

        response = await client.post(
            f"/programs/{program_id}/schedule/shift", json={"shiftDays": 2, "shiftMinutes": -30}, headers=USER
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["updated_count"] == 6
        assert start_ats(data["program"]["program_json"])[0] == "2025-01-08T07:30"

    @pytest.mark.asyncio
    async def test_update_session(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/sessions/w2-s1",
            json={"start_at": "2025-01-14T18:00", "duration_minutes": 44.5},
            headers=USER,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["updated_count"] == 1
        session = data["program"]["program_json"]["weeks"][1]["sessions"][0]
        assert session["start_at"] == "2025-01-14T18:00"
        assert session["duration_minutes"] == 45

    @pytest.mark.asyncio
    async def test_update_unknown_session(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/sessions/w9-s9", json={"start_at": "2025-01-14T18:00"}, headers=USER
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"start_at": "whenever"}])
    async def test_update_session_bad_body(self, client, session_maker, body):
        program_id = await _seed_program(session_maker)

        response = await client.patch(f"/programs/{program_id}/sessions/w1-s1", json=body, headers=USER)

        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("minutes", [0, -5, 0.4])
    async def test_update_existing_session_with_unusable_duration(self, client, session_maker, minutes):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/sessions/w1-s1", json={"duration_minutes": minutes}, headers=USER
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "VAL_DURATION_MINUTES_001"

    @pytest.mark.asyncio
    async def test_update_duration_only(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/sessions/w1-s2", json={"duration_minutes": 0.5}, headers=USER
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["updated_count"] == 1
        assert data["program"]["program_json"]["weeks"][0]["sessions"][1]["duration_minutes"] == 1

    @pytest.mark.asyncio
    async def test_update_duration_unknown_session(self, client, session_maker):
        program_id = await _seed_program(session_maker)

        response = await client.patch(
            f"/programs/{program_id}/sessions/w9-s9", json={"duration_minutes": 30}, headers=USER
        )

        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "NF_SESSION_001"


class TestCalendarExport:
    @pytest.mark.asyncio
    async def test_ics_download(self, client, session_maker):
        program_id = await _seed_program(session_maker)
        await client.post(
            f"/programs/{program_id}/schedule",
            json={"startDate": "2025-01-06", "preferences": {"defaultDurationMinutes": 45}},
            headers=USER,
        )

        response = await client.get(f"/programs/{program_id}/calendar.ics", headers=USER)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert "attachment" in response.headers["content-disposition"]
        assert response.text.count("BEGIN:VEVENT") == 6
        assert "DTEND:20250106T084500" in response.text


class TestOnboardingStatus:
    @pytest.mark.asyncio
    async def test_new_user(self, client):
        response = await client.get("/onboarding/status", headers=USER)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["step"] == 1
        assert data["program_id"] is None
        assert data["onboarding_complete"] is False

    @pytest.mark.asyncio
    async def test_progresses_through_scheduling(self, client, session_maker):
        async with session_maker() as session:
            session.add_all(
                [
                    SurveyResponse(user_id="user-1", response=SURVEY, created_at=datetime(2025, 1, 1)),
                    Assessment(user_id="user-1", approved=True, created_at=datetime(2025, 1, 2)),
                ]
            )
            await session.commit()
        program_id = await _seed_program(session_maker)

        before = (await client.get("/onboarding/status", headers=USER)).json()["data"]
        await client.post(f"/programs/{program_id}/schedule", json={"startDate": "2025-01-06"}, headers=USER)
        after = (await client.get("/onboarding/status", headers=USER)).json()["data"]

        assert before["step"] == 4
        assert before["program_id"] == program_id
        assert before["schedule_complete"] is False
        assert after["program_scheduled"] is True
        assert after["schedule_complete"] is True
        assert after["onboarding_complete"] is True

    @pytest.mark.asyncio
    async def test_waiting_on_assessment(self, client, session_maker):
        async with session_maker() as session:
            session.add(SurveyResponse(user_id="user-1", response=SURVEY))
            await session.commit()

        response = await client.get("/onboarding/status", headers=USER)

        assert response.json()["data"]["step"] == 2
