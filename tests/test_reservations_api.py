"""Public booking API tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from barberbook.services import audit_service
from conftest import FakeCalendar, FakeNotifier

pytestmark = pytest.mark.asyncio

MONDAY = "2025-06-02"
TUESDAY = "2025-06-03"


async def _book(client: AsyncClient, time: str = "09:30", **overrides: str):
    payload = {
        "customer_name": "Bruno Díaz",
        "customer_email": "bruno@example.com",
        "date": MONDAY,
        "time": time,
    }
    payload.update(overrides)
    return await client.post("/api/v1/reservations", json=payload)


async def test_availability_lists_open_slots(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]

    response = await client.get("/api/v1/availability", params={"date": MONDAY})

    assert response.status_code == 200
    assert response.json() == {
        "date": MONDAY,
        "slots": ["09:00", "09:30", "10:00", "10:30"],
    }


async def test_availability_on_closed_day_is_empty(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/availability", params={"date": "2025-06-08"})
    assert response.status_code == 200
    assert response.json()["slots"] == []


async def test_availability_requires_a_valid_date(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.get("/api/v1/availability", params={"date": "02/06/2025"})
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


async def test_calendar_outage_is_reported_as_unavailable(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    calendar: FakeCalendar = app_context["calendar"]
    calendar.fail_list = True

    response = await client.get("/api/v1/availability", params={"date": MONDAY})

    assert response.status_code == 503
    assert response.json()["code"] == "dependency_unavailable"


async def test_create_returns_receipt(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    notifier: FakeNotifier = app_context["notifier"]

    response = await _book(client)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "confirmed"
    assert body["date"] == MONDAY
    assert body["time"] == "09:30"
    assert body["cancel_url"] == (
        f"https://book.example.com/cancel?token={body['cancel_token']}"
    )
    assert body["warnings"] == []
    assert len(notifier.confirmations) == 1

    slots = (await client.get("/api/v1/availability", params={"date": MONDAY})).json()
    assert slots["slots"] == ["09:00", "10:00", "10:30"]


async def test_double_booking_is_a_conflict(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    assert (await _book(client)).status_code == 201

    response = await _book(client, customer_email="other@example.com")

    assert response.status_code == 409
    assert response.json()["code"] == "slot_taken"


async def test_customer_limit_is_a_conflict(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    assert (await _book(client, "09:00")).status_code == 201
    assert (await _book(client, "09:30")).status_code == 201

    response = await _book(client, "10:00")

    assert response.status_code == 409
    assert response.json()["code"] == "customer_limit_exceeded"


@pytest.mark.parametrize(
    "overrides",
    [
        {"time": "9:30"},
        {"time": "09:15"},
        {"customer_email": "bruno-at-example"},
        {"customer_name": "   "},
        {"date": "2025-05-01"},
    ],
)
async def test_invalid_bookings_are_rejected(
    app_context: dict, overrides: dict[str, str]
) -> None:
    client: AsyncClient = app_context["client"]
    response = await _book(client, **overrides)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


async def test_side_effect_failure_is_reported_as_warning(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    notifier: FakeNotifier = app_context["notifier"]
    notifier.fail = True

    response = await _book(client)

    assert response.status_code == 201
    assert response.json()["warnings"] == ["notification.confirmation"]


async def _failing_audit(*args: object, **kwargs: object) -> None:
    raise RuntimeError("audit table unavailable")


async def test_audit_failure_keeps_the_booking(
    app_context: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    client: AsyncClient = app_context["client"]
    monkeypatch.setattr(audit_service, "record_event", _failing_audit)

    response = await _book(client)

    assert response.status_code == 201
    body = response.json()
    assert body["warnings"] == ["audit.record"]
    lookup = await client.get(f"/api/v1/reservations/by-token/{body['cancel_token']}")
    assert lookup.status_code == 200
    assert lookup.json()["status"] == "confirmed"

    cancelled = await client.post(
        "/api/v1/reservations/cancel", json={"token": body["cancel_token"]}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["reservation"]["status"] == "cancelled"
    assert cancelled.json()["warnings"] == ["audit.record"]


async def test_lookup_and_cancel_by_token(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    notifier: FakeNotifier = app_context["notifier"]
    token = (await _book(client)).json()["cancel_token"]

    lookup = await client.get(f"/api/v1/reservations/by-token/{token}")
    assert lookup.status_code == 200
    assert lookup.json()["time"] == "09:30"
    assert "customer_email" not in lookup.json()

    cancelled = await client.post(
        "/api/v1/reservations/cancel", json={"token": token, "reason": "sick"}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["reservation"]["status"] == "cancelled"
    assert notifier.cancellations[0][1] == "sick"

    again = await client.post("/api/v1/reservations/cancel", json={"token": token})
    assert again.status_code == 409
    assert again.json()["code"] == "already_finalized"


async def test_unknown_token_is_not_found(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    response = await client.post(
        "/api/v1/reservations/cancel", json={"token": "does-not-exist"}
    )
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


async def test_reschedule_by_token(app_context: dict) -> None:
    client: AsyncClient = app_context["client"]
    original = (await _book(client)).json()

    response = await client.post(
        "/api/v1/reservations/reschedule",
        json={"token": original["cancel_token"], "date": TUESDAY, "time": "10:00"},
    )

    assert response.status_code == 200
    moved = response.json()
    assert moved["previous_id"] == original["id"]
    assert moved["date"] == TUESDAY
    assert moved["cancel_token"] != original["cancel_token"]

    old = await client.get(
        f"/api/v1/reservations/by-token/{original['cancel_token']}"
    )
    assert old.json()["status"] == "rescheduled"
    monday = await client.get("/api/v1/availability", params={"date": MONDAY})
    assert "09:30" in monday.json()["slots"]


async def test_confirm_endpoint_is_idempotent_for_confirmed_bookings(
    app_context: dict,
) -> None:
    client: AsyncClient = app_context["client"]
    token = (await _book(client)).json()["cancel_token"]

    response = await client.post("/api/v1/reservations/confirm", json={"token": token})

    assert response.status_code == 200
    assert response.json()["reservation"]["status"] == "confirmed"
