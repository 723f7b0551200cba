"""
ProgramScheduler - places an approved program on the calendar.

Walks the program's weeks and sessions in order and gives every session a
concrete ``start_at`` (``YYYY-MM-DDTHH:MM``, local wall time). Week ``i`` is
anchored at ``start_date + 7*i`` days no matter how many days week ``i-1``
actually used, and no two sessions of one program ever share a calendar day:
a slot whose date is already taken moves forward to the next free day.

Everything here is pure: programs go in, new programs come out, and the
caller persists the result.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from kinisi.core.exceptions import MalformedProgramError
from kinisi.core.logging import get_logger
from kinisi.schemas.program import (
    AppliedPreferences,
    Program,
    ProgramSession,
    SchedulingPreferences,
)
from kinisi.services.calendar_dates import (
    START_AT_FORMAT,
    add_days,
    add_weeks,
    format_start_at,
    parse_start_at,
    round_minutes,
    weekday_index_of,
)
from kinisi.services.scheduling_policy import SchedulingPolicy, resolve_preferences

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduleResult:
    """Output of a scheduling run."""
    updated_program: Program
    applied_preferences: AppliedPreferences
    scheduled_count: int


@dataclass(frozen=True)
class ProgramEditResult:
    """Output of an in-place schedule edit (shift, single-session update)."""
    updated_program: Program
    updated_count: int


def generate_session_uid(week_index: int, session_index: int) -> str:
    """Stable positional key for a session, e.g. ``w1s2``."""
    return f"w{week_index + 1}s{session_index + 1}"


def session_key(week_index: int, session_index: int, session: ProgramSession) -> str:
    """Key used to address a session: explicit uid, then id, then its position."""
    if session.uid:
        return session.uid
    if session.id is not None and str(session.id).strip():
        return str(session.id)
    return generate_session_uid(week_index, session_index)


def _next_free_day(day: date, taken: set[date]) -> date:
    while day in taken:
        day = add_days(day, 1)
    return day


def schedule_program(
    program: Program | dict[str, Any],
    start_date: date | str | None = None,
    preferences: SchedulingPreferences | dict[str, Any] | None = None,
    *,
    today: date | None = None,
) -> ScheduleResult:
    """
    Assign a start time to every session of a program.

    Args:
        program: Program model or raw program document
        start_date: First calendar day of week 1; falls back to the program's
            stored start_date, then to ``today``
        preferences: Requested scheduling preferences (model or raw object)
        today: Date used when no start date is known (defaults to date.today())

    Returns:
        ScheduleResult with a new Program, the applied preferences, and the
        number of sessions scheduled

    Raises:
        MalformedProgramError: If the program lacks weeks or sessions collections
        InvalidPreferencesError: If preferences are not an object or out of range
    """
    parsed = Program.from_document(program)
    requested = SchedulingPreferences.from_input(preferences)
    applied = resolve_preferences(requested, parsed)
    policy = SchedulingPolicy(applied)

    if isinstance(start_date, str):
        # Format is checked by the caller; a full timestamp keeps only its date
        start_date = date.fromisoformat(start_date[:10])
    base = start_date or parsed.start_date or today or date.today()
    taken: set[date] = set()
    weeks = []
    scheduled_count = 0

    for week_index, week in enumerate(parsed.weeks):
        anchor = add_weeks(base, week_index)
        slots = policy.slots_for_week(week_index, len(week.sessions), weekday_index_of(anchor))

        sessions = []
        for session, slot in zip(week.sessions, slots):
            day = _next_free_day(add_days(anchor, slot.day_offset), taken)
            taken.add(day)
            sessions.append(
                session.model_copy(update={"start_at": format_start_at(day, slot.time_of_day)})
            )
            scheduled_count += 1

        weeks.append(week.model_copy(update={"sessions": sessions}))

    updated = parsed.model_copy(update={"weeks": weeks})

    logger.info(
        "program_scheduled",
        start_date=base.isoformat(),
        weeks=len(weeks),
        sessions=scheduled_count,
        days_of_week=applied.days_of_week,
        time_of_day=applied.time_of_day,
    )

    return ScheduleResult(
        updated_program=updated,
        applied_preferences=applied,
        scheduled_count=scheduled_count,
    )


def _map_sessions(program: Program, fn) -> tuple[Program, int]:
    """Rebuild a program, replacing each session with ``fn(key, session)`` when it returns one."""
    updated_count = 0
    weeks = []
    for week_index, week in enumerate(program.weeks):
        sessions = []
        for session_index, session in enumerate(week.sessions):
            replacement = fn(session_key(week_index, session_index, session), session)
            if replacement is None:
                sessions.append(session)
            else:
                sessions.append(replacement)
                updated_count += 1
        weeks.append(week.model_copy(update={"sessions": sessions}))
    return program.model_copy(update={"weeks": weeks}), updated_count


def shift_program_schedule(
    program: Program | dict[str, Any],
    shift_days: int = 0,
    shift_minutes: int = 0,
) -> ProgramEditResult:
    """Move every scheduled session by a fixed delta; unscheduled sessions are left alone."""
    parsed = Program.from_document(program)
    delta = timedelta(days=shift_days, minutes=shift_minutes)

    def shift(key: str, session: ProgramSession) -> ProgramSession | None:
        if not session.is_scheduled:
            return None
        try:
            moved = parse_start_at(session.start_at) + delta
        except ValueError as e:
            raise MalformedProgramError(
                f"Session {key} has an unreadable start_at",
                {"session": key, "start_at": session.start_at},
            ) from e
        return session.model_copy(update={"start_at": moved.strftime(START_AT_FORMAT)})

    updated, count = _map_sessions(parsed, shift)
    logger.info("program_schedule_shifted", shift_days=shift_days, shift_minutes=shift_minutes, sessions=count)
    return ProgramEditResult(updated_program=updated, updated_count=count)


def update_session_start(
    program: Program | dict[str, Any],
    key: str,
    start_at: str,
) -> ProgramEditResult:
    parsed = Program.from_document(program)
    updated, count = _map_sessions(
        parsed,
        lambda k, s: s.model_copy(update={"start_at": start_at}) if k == key else None,
    )
    return ProgramEditResult(updated_program=updated, updated_count=count)


def update_session_duration(
    program: Program | dict[str, Any],
    key: str,
    duration_minutes: float,
) -> ProgramEditResult:
    """Set one session's planned duration; non-positive durations change nothing."""
    parsed = Program.from_document(program)
    if not math.isfinite(duration_minutes) or round_minutes(duration_minutes) <= 0:
        return ProgramEditResult(updated_program=parsed, updated_count=0)

    minutes = round_minutes(duration_minutes)
    updated, count = _map_sessions(
        parsed,
        lambda k, s: s.model_copy(update={"duration_minutes": minutes}) if k == key else None,
    )
    return ProgramEditResult(updated_program=updated, updated_count=count)
