"""Google Calendar mirror tests against a mocked API client."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time
from types import SimpleNamespace
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest
from googleapiclient.errors import HttpError

from barberbook.core.settings import CalendarSettings
from barberbook.integrations.google_calendar import (
    CalendarMirrorError,
    GoogleCalendarMirror,
    event_to_interval,
)
from barberbook.models import ReservationStatus
from barberbook.services.contracts import BookingDetails

TZ = ZoneInfo("America/Montevideo")
DAY = date(2025, 6, 2)


def _http_error(status: int) -> HttpError:
    return HttpError(SimpleNamespace(status=status, reason="error"), b"{}")


def _mirror(service: MagicMock) -> GoogleCalendarMirror:
    settings = CalendarSettings(
        calendar_id="shop@group.calendar.google.com",
        service_account_file="/secrets/sa.json",
        timezone="America/Montevideo",
        event_minutes=30,
    )
    return GoogleCalendarMirror(settings, service=service)


def test_timed_event_is_converted_to_local_wall_clock() -> None:
    interval = event_to_interval(
        {
            "id": "abc",
            "start": {"dateTime": "2025-06-02T13:00:00Z"},
            "end": {"dateTime": "2025-06-02T13:45:00Z"},
        },
        TZ,
    )
    assert interval is not None
    assert interval.start == datetime(2025, 6, 2, 10, 0)
    assert interval.end == datetime(2025, 6, 2, 10, 45)
    assert interval.event_ref == "abc"


def test_all_day_event_blocks_the_day() -> None:
    interval = event_to_interval(
        {"start": {"date": "2025-06-02"}, "end": {"date": "2025-06-03"}}, TZ
    )
    assert interval is not None
    assert interval.start == datetime(2025, 6, 2, 0, 0)
    assert interval.end == datetime(2025, 6, 3, 0, 0)


@pytest.mark.parametrize(
    "event",
    [
        {"status": "cancelled", "start": {"date": "2025-06-02"}},
        {"transparency": "transparent", "start": {"date": "2025-06-02"}},
        {"start": {}, "end": {}},
    ],
)
def test_non_blocking_events_are_ignored(event: dict) -> None:
    assert event_to_interval(event, TZ) is None


def test_list_busy_intervals_queries_the_local_day() -> None:
    service = MagicMock()
    service.events.return_value.list.return_value.execute.return_value = {
        "items": [
            {
                "id": "e1",
                "start": {"dateTime": "2025-06-02T09:00:00-03:00"},
                "end": {"dateTime": "2025-06-02T09:30:00-03:00"},
            },
            {"id": "e2", "status": "cancelled"},
        ]
    }

    intervals = _mirror(service).list_busy_intervals(DAY)

    assert [interval.event_ref for interval in intervals] == ["e1"]
    kwargs = service.events.return_value.list.call_args.kwargs
    assert kwargs["timeMin"] == "2025-06-02T00:00:00-03:00"
    assert kwargs["timeMax"] == "2025-06-03T00:00:00-03:00"
    assert kwargs["singleEvents"] is True


def test_create_event_returns_the_event_id() -> None:
    service = MagicMock()
    service.events.return_value.insert.return_value.execute.return_value = {
        "id": "evt-42"
    }
    booking = BookingDetails(
        id=uuid.uuid4(),
        customer_name="Diego",
        customer_email="diego@example.com",
        slot_date=DAY,
        slot_time=time(9, 30),
        status=ReservationStatus.CONFIRMED,
        cancel_token="t",
    )

    assert _mirror(service).create_event(booking) == "evt-42"
    body = service.events.return_value.insert.call_args.kwargs["body"]
    assert body["start"]["dateTime"] == "2025-06-02T09:30:00-03:00"
    assert body["end"]["dateTime"] == "2025-06-02T10:00:00-03:00"
    assert body["extendedProperties"]["private"]["reservation_id"] == str(booking.id)


def test_delete_event_tolerates_missing_events() -> None:
    service = MagicMock()
    service.events.return_value.delete.return_value.execute.side_effect = (
        _http_error(410)
    )
    _mirror(service).delete_event("gone")


def test_api_errors_are_wrapped() -> None:
    service = MagicMock()
    service.events.return_value.list.return_value.execute.side_effect = _http_error(
        500
    )
    with pytest.raises(CalendarMirrorError):
        _mirror(service).list_busy_intervals(DAY)
