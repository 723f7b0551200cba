"""
SchedulingPolicy - decides where each session of a week lands.

Given the effective preferences and the number of sessions in one program
week, produces one (day offset, time of day) slot per session, in session
order. Offsets are counted in days from the week's anchor date.

Placement rules:
- With preferred weekdays, sessions take those weekdays in chronological
  order starting from the anchor. Sessions beyond the available weekdays
  go to the day right after the last used slot, then onward day by day.
- Without preferred weekdays, sessions take consecutive days from the
  anchor with no gaps.
- The Nth session always receives the Nth slot.
"""

from dataclasses import dataclass

from kinisi.config.settings import get_settings
from kinisi.core.logging import get_logger
from kinisi.schemas.program import AppliedPreferences, Program, SchedulingPreferences
from kinisi.services.calendar_dates import DAYS_PER_WEEK

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionSlot:
    """Placement of one session relative to its week's anchor date."""
    day_offset: int
    time_of_day: str


def resolve_preferences(
    preferences: SchedulingPreferences | None,
    program: Program,
) -> AppliedPreferences:
    """
    Fill in defaults so every preference has a concrete value.

    ``sessionsPerWeek`` is only checked for consistency: the number of
    sessions actually present in each week always wins, and a mismatch is
    logged rather than raised.

    Args:
        preferences: Requested preferences, already validated (may be None)
        program: Program being scheduled, used to resolve sessions per week

    Returns:
        AppliedPreferences with no optional fields
    """
    settings = get_settings()
    requested = preferences or SchedulingPreferences()

    week_sizes = [len(week.sessions) for week in program.weeks]
    busiest_week = max(week_sizes, default=0)

    sessions_per_week = busiest_week
    if requested.sessions_per_week is not None:
        mismatched = [
            index + 1 for index, size in enumerate(week_sizes)
            if size != requested.sessions_per_week
        ]
        if mismatched:
            logger.warning(
                "sessions_per_week_mismatch",
                requested=requested.sessions_per_week,
                weeks=mismatched,
                using=busiest_week,
            )
        else:
            sessions_per_week = requested.sessions_per_week

    return AppliedPreferences(
        days_of_week=list(requested.days_of_week or []),
        time_of_day=requested.time_of_day or settings.default_session_time,
        sessions_per_week=sessions_per_week,
        default_duration_minutes=(
            requested.default_duration_minutes or settings.default_session_duration_minutes
        ),
    )


class SchedulingPolicy:
    """Turns applied preferences into per-week session slots."""

    def __init__(self, preferences: AppliedPreferences):
        self.preferences = preferences

    def weekday_offsets(self, anchor_weekday: int) -> list[int]:
        """Offsets of the preferred weekdays from an anchor weekday, earliest first."""
        return sorted(
            (day - anchor_weekday) % DAYS_PER_WEEK
            for day in self.preferences.days_of_week
        )

    def slots_for_week(self, week_index: int, session_count: int, anchor_weekday: int) -> list[SessionSlot]:
        """
        Slots for one week.

        Args:
            week_index: 0-based week index from the program start
            session_count: Number of sessions in the week (may be 0)
            anchor_weekday: Weekday index (Sunday=0) of the week's anchor date

        Returns:
            One SessionSlot per session, in session order
        """
        if session_count <= 0:
            return []

        time_of_day = self.preferences.time_of_day

        if not self.preferences.days_of_week:
            offsets = list(range(session_count))
        else:
            offsets = self.weekday_offsets(anchor_weekday)[:session_count]
            while len(offsets) < session_count:
                offsets.append(offsets[-1] + 1)

        if offsets[-1] >= DAYS_PER_WEEK:
            logger.debug(
                "week_overflow",
                week=week_index + 1,
                sessions=session_count,
                days_used=offsets[-1] + 1,
            )

        return [SessionSlot(day_offset=offset, time_of_day=time_of_day) for offset in offsets]
