"""
Calendar export for scheduled programs.

Produces iCalendar (RFC 5545) text and Google Calendar template links.
Start times are floating local times, so DTSTART/DTEND carry no TZID or
trailing ``Z``.
"""

from datetime import timedelta
from urllib.parse import urlencode

from kinisi.config.settings import get_settings
from kinisi.schemas.program import Program, ProgramSession
from kinisi.services.calendar_dates import parse_start_at, round_minutes
from kinisi.services.program_scheduler import session_key

ICS_DATETIME_FORMAT = "%Y%m%dT%H%M%S"
GOOGLE_CALENDAR_URL = "https://www.google.com/calendar/render"
CRLF = "\r\n"


def event_window(start_at: str, duration_minutes: int) -> tuple[str, str]:
    """DTSTART/DTEND values for a session starting at ``start_at``."""
    start = parse_start_at(start_at).replace(second=0, microsecond=0)
    end = start + timedelta(minutes=duration_minutes)
    return start.strftime(ICS_DATETIME_FORMAT), end.strftime(ICS_DATETIME_FORMAT)


def _escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _event_title(session: ProgramSession, title_prefix: str | None) -> str:
    settings = get_settings()
    goal = session.goal or session.name or settings.calendar_default_title
    return f"{title_prefix} - {goal}" if title_prefix else goal


def _event_lines(
    uid: str,
    session: ProgramSession,
    title_prefix: str | None,
    location: str | None,
    description: str | None,
    default_duration_minutes: int,
) -> list[str]:
    duration = round_minutes(session.duration_minutes or default_duration_minutes)
    dt_start, dt_end = event_window(session.start_at, duration)
    lines = [
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"SUMMARY:{_escape_text(_event_title(session, title_prefix))}",
    ]
    if location:
        lines.append(f"LOCATION:{_escape_text(location)}")
    if description:
        lines.append(f"DESCRIPTION:{_escape_text(description)}")
    lines += [
        f"DTSTART:{dt_start}",
        f"DTEND:{dt_end}",
        "END:VEVENT",
    ]
    return lines


def _calendar(events: list[str]) -> str:
    settings = get_settings()
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{settings.calendar_product_id}",
        "CALSCALE:GREGORIAN",
        *events,
        "END:VCALENDAR",
    ]
    return CRLF.join(lines)


def build_ics_session(
    session: ProgramSession,
    uid: str | None = None,
    title_prefix: str | None = None,
    location: str | None = None,
    description: str | None = None,
    default_duration_minutes: int | None = None,
) -> str | None:
    """Single-event calendar for one session, or None if it is unscheduled."""
    if not session.is_scheduled:
        return None
    duration = default_duration_minutes or get_settings().default_session_duration_minutes
    event_uid = uid or session.uid or f"session-{event_window(session.start_at, duration)[0]}"
    lines = _event_lines(event_uid, session, title_prefix, location, description, duration)
    return _calendar(lines)


def build_ics_for_program(
    program: Program,
    title_prefix: str | None = None,
    location: str | None = None,
    description: str | None = None,
    default_duration_minutes: int | None = None,
) -> str:
    """Calendar with one event per scheduled session, in program order."""
    duration = default_duration_minutes or get_settings().default_session_duration_minutes
    events: list[str] = []
    for week_index, session_index, session in program.iter_sessions():
        if not session.is_scheduled:
            continue
        uid = session_key(week_index, session_index, session)
        events += _event_lines(uid, session, title_prefix, location, description, duration)
    return _calendar(events)


def build_google_calendar_url(
    title: str,
    start_at: str,
    duration_minutes: int = 60,
    details: str | None = None,
    location: str | None = None,
) -> str:
    dt_start, dt_end = event_window(start_at, duration_minutes)
    params = {
        "action": "TEMPLATE",
        "text": title,
        "details": details or "",
        "location": location or "",
        "dates": f"{dt_start}/{dt_end}",
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"
