"""Typed program document and scheduling preference schemas.

Stored programs are loose JSON documents. They are converted into these
models once, at the boundary (``Program.from_document``), so the scheduler
and the calendar export work on explicit Program -> Week -> Session ->
Exercise records instead of sniffing dict shapes.
"""
from collections.abc import Iterator, Mapping
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from kinisi.core.exceptions import InvalidPreferencesError, MalformedProgramError
from kinisi.schemas.datetime import parse_date
from kinisi.services.calendar_dates import SATURDAY, SUNDAY, is_valid_time_of_day


def _error_details(exc: PydanticValidationError) -> dict:
    return {
        "errors": [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
    }


# ============== Program document ==============

class ProgramExercise(BaseModel):
    """One prescribed exercise: a catalog reference plus sets/reps."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | int | None = None
    exercise_id: str | int | None = None
    name: str | None = None
    sets: int | None = None
    reps: int | str | None = None
    notes: str | None = None

    @property
    def catalog_ref(self) -> str | int | None:
        return self.exercise_id if self.exercise_id is not None else self.id


class ProgramSession(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | int | None = None
    uid: str | None = None
    name: str | None = None
    goal: str | None = None
    exercises: list[ProgramExercise] = Field(default_factory=list)
    start_at: str | None = None
    # Plain number; rounded where whole minutes are needed
    duration_minutes: int | float | None = None

    @property
    def is_scheduled(self) -> bool:
        return bool(self.start_at and self.start_at.strip())


class ProgramWeek(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Generated programs use either key for the 1-based week number
    week_number: int | None = Field(default=None, alias="weekNumber")
    week: int | None = None
    goal: str | None = None
    sessions: list[ProgramSession]

    @property
    def number(self) -> int | None:
        return self.week_number if self.week_number is not None else self.week


class Program(BaseModel):
    """A multi-week exercise program; week order is list order."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    weeks: list[ProgramWeek]
    start_date: date | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("start_date", mode="before")
    @classmethod
    def validate_start_date(cls, v: Any) -> date | None:
        # Start dates sometimes arrive as full timestamps
        return None if v is None else parse_date(v)

    @classmethod
    def from_document(cls, document: Any) -> "Program":
        """Validate a stored program document, raising MalformedProgramError."""
        if isinstance(document, cls):
            return document
        if not isinstance(document, Mapping):
            raise MalformedProgramError(
                "Program must be an object with a weeks collection",
                {"received": type(document).__name__},
            )
        try:
            return cls.model_validate(dict(document))
        except PydanticValidationError as e:
            raise MalformedProgramError("Program document is malformed", _error_details(e)) from e

    def to_document(self) -> dict[str, Any]:
        """Dump back to a JSON-ready document with the keys the input had, nulls included."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def iter_sessions(self) -> Iterator[tuple[int, int, ProgramSession]]:
        """Yield (week_index, session_index, session) in program order."""
        for week_index, week in enumerate(self.weeks):
            for session_index, session in enumerate(week.sessions):
                yield week_index, session_index, session

    @property
    def session_count(self) -> int:
        return sum(len(week.sessions) for week in self.weeks)


# ============== Scheduling preferences ==============

class SchedulingPreferences(BaseModel):
    """Preferences as requested by the user; every field is optional."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    days_of_week: list[int] | None = Field(default=None, alias="daysOfWeek")
    time_of_day: str | None = Field(default=None, alias="timeOfDay")
    sessions_per_week: int | None = Field(default=None, alias="sessionsPerWeek", ge=0)
    default_duration_minutes: int | None = Field(
        default=None, alias="defaultDurationMinutes", gt=0
    )

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v: list[int] | None) -> list[int] | None:
        if v is None:
            return v
        out_of_range = [day for day in v if day < SUNDAY or day > SATURDAY]
        if out_of_range:
            raise ValueError(f"Weekday indices must be 0-6 (Sunday=0), got {out_of_range}")
        return sorted(set(v))

    @field_validator("time_of_day")
    @classmethod
    def validate_time_of_day(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_time_of_day(v):
            raise ValueError(f"timeOfDay must be HH:mm (24h), got {v!r}")
        return v

    @classmethod
    def from_input(cls, value: Any) -> "SchedulingPreferences | None":
        """Validate caller-supplied preferences, raising InvalidPreferencesError."""
        if value is None or isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise InvalidPreferencesError(
                "preferences must be an object",
                {"field": "preferences", "received": type(value).__name__},
            )
        try:
            return cls.model_validate(dict(value))
        except PydanticValidationError as e:
            raise InvalidPreferencesError("preferences are invalid", _error_details(e)) from e


class AppliedPreferences(BaseModel):
    """Fully resolved preferences actually used for a scheduling run."""

    model_config = ConfigDict(populate_by_name=True)

    # Empty means sessions were placed on consecutive days
    days_of_week: list[int] = Field(alias="daysOfWeek")
    time_of_day: str = Field(alias="timeOfDay")
    sessions_per_week: int = Field(alias="sessionsPerWeek")
    default_duration_minutes: int = Field(alias="defaultDurationMinutes")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
