"""
Onboarding progress: which step a user is on and whether scheduling is done.

Steps:
1 = complete intake survey
2 = approve assessment
3 = approve program
4 = schedule sessions

None of these functions raise. Missing or malformed program data reads as
"nothing scheduled" so the onboarding UI can always render.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

from kinisi.schemas.program import Program

OnboardingStep = Literal[1, 2, 3, 4]

MIN_SURVEY_FIELDS = 3


def compute_current_onboarding_step(
    survey_completed: bool,
    assessment_approved: bool,
    program_approved: bool,
) -> OnboardingStep:
    """Earliest incomplete step wins, even if later flags are already set."""
    if not survey_completed:
        return 1
    if not assessment_approved:
        return 2
    if not program_approved:
        return 3
    return 4


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _iter_start_ats(program: Any) -> Iterator[Any]:
    """Yield the raw start_at of every session, tolerating any program shape."""
    if isinstance(program, Program):
        for _, _, session in program.iter_sessions():
            yield session.start_at
        return

    if not isinstance(program, Mapping):
        return
    weeks = program.get("weeks")
    if not isinstance(weeks, list):
        return
    for week in weeks:
        if not isinstance(week, Mapping) or not isinstance(week.get("sessions"), list):
            continue
        for session in week["sessions"]:
            if isinstance(session, Mapping):
                yield session.get("start_at")


def is_program_scheduled(program: Any, start_date: str | date | None) -> bool:
    """
    Strict completion: the calendar is fully populated.

    True only when a start date has been saved AND every session in every
    week has a start_at. A program with no sessions is not scheduled.
    """
    if isinstance(start_date, date):
        has_start_date = True
    else:
        has_start_date = _has_text(start_date)
    if not has_start_date:
        return False

    start_ats = list(_iter_start_ats(program))
    if not start_ats:
        return False
    return all(_has_text(value) for value in start_ats)


def is_schedule_complete(program: Any, last_scheduled_at: str | datetime | None) -> bool:
    """
    Relaxed completion used to let onboarding advance.

    True if any session has a start_at, otherwise if a scheduling run was
    recorded. A saved start date alone does not count.
    """
    if any(_has_text(value) for value in _iter_start_ats(program)):
        return True
    if isinstance(last_scheduled_at, datetime):
        return True
    return _has_text(last_scheduled_at)


def has_completed_survey(response: Any) -> bool:
    """A stored survey response counts once it has a few keys and at least one real answer."""
    if not isinstance(response, Mapping):
        return False
    if len(response) < MIN_SURVEY_FIELDS:
        return False
    return any(value is not None and value != "" for value in response.values())


@dataclass(frozen=True)
class OnboardingStatus:
    step: OnboardingStep
    survey_completed: bool
    assessment_approved: bool
    program_approved: bool
    program_scheduled: bool
    schedule_complete: bool

    @property
    def onboarding_complete(self) -> bool:
        return self.step == 4 and self.schedule_complete


def build_onboarding_status(
    survey_response: Any,
    assessment_approved: bool,
    program_approved: bool,
    program: Any = None,
    start_date: str | date | None = None,
    last_scheduled_at: str | datetime | None = None,
) -> OnboardingStatus:
    survey_completed = has_completed_survey(survey_response)
    return OnboardingStatus(
        step=compute_current_onboarding_step(survey_completed, assessment_approved, program_approved),
        survey_completed=survey_completed,
        assessment_approved=assessment_approved,
        program_approved=program_approved,
        program_scheduled=is_program_scheduled(program, start_date),
        schedule_complete=is_schedule_complete(program, last_scheduled_at),
    )
