"""Integration shortcuts."""

from .google_calendar import (
    CalendarMirrorError,
    GoogleCalendarMirror,
    get_calendar_mirror,
)

__all__ = [
    "CalendarMirrorError",
    "GoogleCalendarMirror",
    "get_calendar_mirror",
]
