"""Google Calendar mirror for reservations."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time, timedelta
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from barberbook.core.settings import CalendarSettings, get_calendar_settings
from barberbook.services.contracts import BookingDetails, BusyInterval
from barberbook.services.slot_service import format_slot, slot_end

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


class CalendarMirrorError(RuntimeError):
    """Raised when the Google Calendar API cannot be reached or rejects a call."""


def _parse_google_datetime(raw_value: str | None) -> datetime | None:
    """Parse RFC3339 values returned by Google Calendar."""
    if not raw_value:
        return None
    try:
        return datetime.fromisoformat(raw_value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_local(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def event_to_interval(event: dict[str, Any], tz: ZoneInfo) -> BusyInterval | None:
    """Return the wall-clock busy span of an event, or None if it does not block."""
    if event.get("status") == "cancelled" or event.get("transparency") == "transparent":
        return None
    start_info = event.get("start") or {}
    end_info = event.get("end") or {}
    start = _parse_google_datetime(start_info.get("dateTime"))
    end = _parse_google_datetime(end_info.get("dateTime"))
    if start and end:
        return BusyInterval(_to_local(start, tz), _to_local(end, tz), event.get("id"))

    # all-day events block whole days
    try:
        start_day = date.fromisoformat(start_info.get("date", ""))
        end_day = date.fromisoformat(end_info.get("date", ""))
    except ValueError:
        return None
    return BusyInterval(
        datetime.combine(start_day, time.min),
        datetime.combine(end_day, time.min),
        event.get("id"),
    )


class GoogleCalendarMirror:
    """Reads busy time from and writes booking events to one Google calendar.

    All conversion between absolute instants and business wall-clock time
    happens here.
    """

    def __init__(self, settings: CalendarSettings, *, service: Any | None = None) -> None:
        self.settings = settings
        self.tz = ZoneInfo(settings.timezone)
        self._service = service
        self._lock = threading.Lock()

    @property
    def service(self) -> Any:
        with self._lock:
            if self._service is None:
                self._service = self._authorize()
            return self._service

    def _authorize(self) -> Any:
        if not self.settings.service_account_file:
            raise CalendarMirrorError("Google service account file is not configured")
        credentials = service_account.Credentials.from_service_account_file(
            self.settings.service_account_file, scopes=SCOPES
        )
        return build("calendar", "v3", credentials=credentials, cache_discovery=False)

    def list_busy_intervals(self, day: date) -> list[BusyInterval]:
        range_start = datetime.combine(day, time.min, tzinfo=self.tz)
        range_end = range_start + timedelta(days=1)
        try:
            response = (
                self.service.events()
                .list(
                    calendarId=self.settings.calendar_id,
                    timeMin=range_start.isoformat(),
                    timeMax=range_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    maxResults=250,
                )
                .execute()
            )
        except HttpError as exc:
            raise CalendarMirrorError(f"Could not list calendar events: {exc}") from exc

        intervals: list[BusyInterval] = []
        for item in response.get("items", []):
            if not isinstance(item, dict):
                continue
            interval = event_to_interval(item, self.tz)
            if interval is not None:
                intervals.append(interval)
        logger.debug("Calendar reported %d busy intervals on %s", len(intervals), day)
        return intervals

    def create_event(self, booking: BookingDetails) -> str:
        start = datetime.combine(booking.slot_date, booking.slot_time, tzinfo=self.tz)
        end = slot_end(
            booking.slot_date, booking.slot_time, self.settings.event_minutes
        ).replace(tzinfo=self.tz)
        body = {
            "summary": f"{booking.customer_name} ({format_slot(booking.slot_time)})",
            "description": (
                f"Booking {booking.id}\n"
                f"Customer: {booking.customer_name} <{booking.customer_email}>"
            ),
            "start": {"dateTime": start.isoformat(), "timeZone": self.settings.timezone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.settings.timezone},
            "extendedProperties": {"private": {"reservation_id": str(booking.id)}},
        }
        try:
            event = (
                self.service.events()
                .insert(calendarId=self.settings.calendar_id, body=body)
                .execute()
            )
        except HttpError as exc:
            raise CalendarMirrorError(f"Could not create calendar event: {exc}") from exc
        event_id = event.get("id")
        if not event_id:
            raise CalendarMirrorError("Calendar did not return an event id")
        logger.info("Created calendar event %s for reservation %s", event_id, booking.id)
        return str(event_id)

    def delete_event(self, event_ref: str) -> None:
        try:
            self.service.events().delete(
                calendarId=self.settings.calendar_id, eventId=event_ref
            ).execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            if status in (404, 410):
                logger.info("Calendar event %s already gone", event_ref)
                return
            raise CalendarMirrorError(f"Could not delete calendar event: {exc}") from exc


@lru_cache
def get_calendar_mirror() -> GoogleCalendarMirror | None:
    """Return the process-wide calendar mirror, or None when not configured."""
    settings = get_calendar_settings()
    if not settings.enabled:
        return None
    return GoogleCalendarMirror(settings)
