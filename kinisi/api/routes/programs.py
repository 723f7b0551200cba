"""API routes for program scheduling."""
import logging
import math

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from kinisi.api.routes.dependencies import get_current_user_id, validate_program_id
from kinisi.core.exceptions import ValidationError
from kinisi.db.database import get_db
from kinisi.schemas.base import APIResponse, ResponseMeta
from kinisi.schemas.datetime import parse_date, parse_datetime
from kinisi.schemas.scheduling import (
    ProgramRecordResponse,
    ScheduleEditResponse,
    ScheduleRequest,
    ScheduleShiftRequest,
    SessionUpdateRequest,
    StartDateUpdate,
)
from kinisi.services.calendar_dates import round_minutes
from kinisi.services.program_service import ProgramScheduleService

router = APIRouter()
logger = logging.getLogger(__name__)


def _meta(request: Request) -> ResponseMeta:
    return ResponseMeta(request_id=getattr(request.state, "request_id", None))


def _start_date_or_400(value: str):
    try:
        return parse_date(value)
    except ValueError:
        raise ValidationError("startDate", "expected an ISO 8601 date", {"startDate": value})


@router.post("/{program_id}/schedule", response_model=APIResponse[ProgramRecordResponse])
async def schedule_program(
    program_id: str,
    request: Request,
    body: ScheduleRequest | None = None,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """
    Place every session of the program on the calendar.

    Optional body:
    - startDate: first day of week 1 (defaults to the stored start date, then today)
    - preferences: daysOfWeek, timeOfDay, sessionsPerWeek, defaultDurationMinutes
    """
    program_id = validate_program_id(program_id)
    body = body or ScheduleRequest()
    start_date = _start_date_or_400(body.start_date) if body.start_date is not None else None

    logger.info("Scheduling program_id=%s for user_id=%s", program_id, user_id)
    service = ProgramScheduleService(db)
    saved = await service.schedule(program_id, user_id, start_date, body.preferences)

    return APIResponse(data=ProgramRecordResponse.model_validate(saved), meta=_meta(request))


@router.patch("/{program_id}/start-date", response_model=APIResponse[ProgramRecordResponse])
async def update_start_date(
    program_id: str,
    body: StartDateUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    program_id = validate_program_id(program_id)
    start_date = _start_date_or_400(body.start_date)

    service = ProgramScheduleService(db)
    saved = await service.set_start_date(program_id, user_id, start_date)

    return APIResponse(data=ProgramRecordResponse.model_validate(saved), meta=_meta(request))


@router.post("/{program_id}/schedule/shift", response_model=APIResponse[ScheduleEditResponse])
async def shift_schedule(
    program_id: str,
    body: ScheduleShiftRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Move every already scheduled session by shiftDays and/or shiftMinutes."""
    program_id = validate_program_id(program_id)

    service = ProgramScheduleService(db)
    saved, count = await service.shift(program_id, user_id, body.shift_days, body.shift_minutes)

    return APIResponse(
        data=ScheduleEditResponse(program=ProgramRecordResponse.model_validate(saved), updated_count=count),
        meta=_meta(request),
    )


@router.patch("/{program_id}/sessions/{session_key}", response_model=APIResponse[ScheduleEditResponse])
async def update_session(
    program_id: str,
    session_key: str,
    body: SessionUpdateRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    program_id = validate_program_id(program_id)
    if body.start_at is None and body.duration_minutes is None:
        raise ValidationError("session", "provide start_at and/or duration_minutes")
    if body.start_at is not None:
        try:
            parse_datetime(body.start_at)
        except ValueError:
            raise ValidationError("start_at", "expected an ISO 8601 datetime", {"start_at": body.start_at})
    if body.duration_minutes is not None and (
        not math.isfinite(body.duration_minutes) or round_minutes(body.duration_minutes) <= 0
    ):
        raise ValidationError(
            "duration_minutes",
            "must be a positive number of minutes",
            {"duration_minutes": body.duration_minutes},
        )

    service = ProgramScheduleService(db)
    saved, count = await service.update_session(
        program_id,
        user_id,
        session_key,
        start_at=body.start_at,
        duration_minutes=body.duration_minutes,
    )

    return APIResponse(
        data=ScheduleEditResponse(program=ProgramRecordResponse.model_validate(saved), updated_count=count),
        meta=_meta(request),
    )


@router.get("/{program_id}/calendar.ics")
async def export_calendar(
    program_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Download the scheduled sessions as an iCalendar file."""
    program_id = validate_program_id(program_id)

    service = ProgramScheduleService(db)
    body = await service.export_ics(program_id, user_id)

    return Response(
        content=body,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="program-{program_id}.ics"'},
    )
