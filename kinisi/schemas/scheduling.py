"""Pydantic schemas for the program scheduling and onboarding API endpoints."""
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============== Requests ==============

class ScheduleRequest(BaseModel):
    """Body of POST /programs/{id}/schedule.

    ``preferences`` stays loosely typed here so the scheduler can report a
    non-object value as an invalid-preferences error instead of a generic
    request validation failure.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_date: str | None = Field(default=None, alias="startDate")
    preferences: Any = None


class StartDateUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(alias="startDate")


class ScheduleShiftRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shift_days: int = Field(default=0, alias="shiftDays")
    shift_minutes: int = Field(default=0, alias="shiftMinutes")


class SessionUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_at: str | None = None
    duration_minutes: float | None = None


# ============== Responses ==============

class ProgramRecordResponse(BaseModel):
    """A stored program row as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    status: str
    program_json: dict[str, Any] | None = None
    start_date: date | None = None
    scheduling_preferences: dict[str, Any] | None = None
    last_scheduled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ScheduleEditResponse(BaseModel):
    program: ProgramRecordResponse
    updated_count: int


class OnboardingStatusResponse(BaseModel):
    step: int
    survey_completed: bool
    assessment_approved: bool
    program_approved: bool
    program_scheduled: bool
    schedule_complete: bool
    onboarding_complete: bool
    program_id: str | None = None
