"""
ProgramScheduleService - persistence glue around the scheduling engine.

Loads the stored program, checks ownership, runs the pure scheduler or one
of the schedule edits, and writes a single update back per call.
"""

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from kinisi.core.exceptions import AuthorizationError, NotFoundError
from kinisi.core.logging import get_logger
from kinisi.models.program import ExerciseProgram
from kinisi.repositories.onboarding_repository import OnboardingRepository
from kinisi.repositories.program_repository import ProgramRepository
from kinisi.schemas.program import Program
from kinisi.services.base import BaseService
from kinisi.services.calendar_export import build_ics_for_program
from kinisi.services.onboarding import OnboardingStatus, build_onboarding_status
from kinisi.services.program_scheduler import (
    ProgramEditResult,
    schedule_program,
    session_key,
    shift_program_schedule,
    update_session_duration,
    update_session_start,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProgramScheduleService(BaseService):
    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self._programs = ProgramRepository(session)

    async def get_owned_program(self, program_id: str, user_id: str) -> ExerciseProgram:
        program = await self._get_or_404(ExerciseProgram, program_id, "Program not found")
        if program.user_id != user_id:
            raise AuthorizationError(
                "Program belongs to another user",
                details={"program_id": program_id},
            )
        return program

    async def schedule(
        self,
        program_id: str,
        user_id: str,
        start_date: date | None = None,
        preferences: Any = None,
    ) -> ExerciseProgram:
        """
        Schedule every session of a stored program and persist the result.

        The explicit start date wins over the stored one, then the start
        date inside the program document, then today. The date actually
        used is saved as the program's start date.
        """
        record = await self.get_owned_program(program_id, user_id)
        program = Program.from_document(record.program_json)
        effective_start = start_date or record.start_date or program.start_date or date.today()

        result = schedule_program(program, effective_start, preferences)

        updates: dict[str, Any] = {
            "program_json": result.updated_program.to_document(),
            "scheduling_preferences": result.applied_preferences.to_document(),
            "last_scheduled_at": _utcnow(),
            "start_date": effective_start,
        }

        saved = await self._programs.update(program_id, updates)
        logger.info(
            "program_schedule_saved",
            program_id=program_id,
            scheduled=result.scheduled_count,
        )
        return saved

    async def set_start_date(self, program_id: str, user_id: str, start_date: date) -> ExerciseProgram:
        await self.get_owned_program(program_id, user_id)
        return await self._programs.update(program_id, {"start_date": start_date})

    async def shift(self, program_id: str, user_id: str, shift_days: int, shift_minutes: int) -> tuple[ExerciseProgram, int]:
        record = await self.get_owned_program(program_id, user_id)
        result = shift_program_schedule(record.program_json, shift_days, shift_minutes)
        return await self._save_edit(program_id, result), result.updated_count

    async def update_session(
        self,
        program_id: str,
        user_id: str,
        key: str,
        start_at: str | None = None,
        duration_minutes: float | None = None,
    ) -> tuple[ExerciseProgram, int]:
        """Edit one session's start time and/or duration, addressed by its key."""
        record = await self.get_owned_program(program_id, user_id)
        program = Program.from_document(record.program_json)
        keys = [session_key(w, s, session) for w, s, session in program.iter_sessions()]
        if key not in keys:
            raise NotFoundError("Session", f"Session {key} not found", {"session": key})

        matched = 0
        if start_at is not None:
            edit = update_session_start(program, key, start_at)
            program, matched = edit.updated_program, max(matched, edit.updated_count)
        if duration_minutes is not None:
            edit = update_session_duration(program, key, duration_minutes)
            program, matched = edit.updated_program, max(matched, edit.updated_count)

        saved = await self._save_edit(program_id, ProgramEditResult(program, matched))
        return saved, matched

    async def export_ics(self, program_id: str, user_id: str) -> str:
        record = await self.get_owned_program(program_id, user_id)
        program = Program.from_document(record.program_json)
        duration = (record.scheduling_preferences or {}).get("defaultDurationMinutes")
        return build_ics_for_program(program, default_duration_minutes=duration)

    async def onboarding_status(self, user_id: str) -> tuple[OnboardingStatus, ExerciseProgram | None]:
        onboarding = OnboardingRepository(self._session)
        survey = await onboarding.get_latest_survey_response(user_id)
        assessment = await onboarding.get_latest_assessment(user_id)
        program = await self._programs.get_latest_for_user(user_id)

        status = build_onboarding_status(
            survey_response=survey.response if survey else None,
            assessment_approved=bool(assessment and assessment.approved),
            program_approved=bool(program and program.is_approved),
            program=program.program_json if program else None,
            start_date=program.start_date if program else None,
            last_scheduled_at=program.last_scheduled_at if program else None,
        )
        return status, program

    async def _save_edit(self, program_id: str, result: ProgramEditResult) -> ExerciseProgram:
        return await self._programs.update(
            program_id,
            {"program_json": result.updated_program.to_document()},
        )

