"""Interfaces for the collaborators the booking workflow depends on."""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, NamedTuple, Protocol

from barberbook.models.reservation import Reservation, ReservationStatus


@dataclass(slots=True, frozen=True)
class BookingDetails:
    """Detached copy of a reservation handed to calendar and email workers."""

    id: uuid.UUID
    customer_name: str
    customer_email: str
    slot_date: date
    slot_time: time
    status: ReservationStatus
    cancel_token: str
    external_event_ref: str | None = None
    cancellation_reason: str | None = None

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "BookingDetails":
        return cls(
            id=reservation.id,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            slot_date=reservation.slot_date,
            slot_time=reservation.slot_time,
            status=reservation.status,
            cancel_token=reservation.cancel_token,
            external_event_ref=reservation.external_event_ref,
            cancellation_reason=reservation.cancellation_reason,
        )


class BusyInterval(NamedTuple):
    """Busy wall-clock span reported by the calendar."""

    start: datetime
    end: datetime
    event_ref: str | None = None


class ReservationStore(Protocol):
    """Durable reservation storage with an atomic slot claim."""

    async def find_by_date_range(
        self,
        start: date,
        end: date,
        *,
        statuses: Sequence[ReservationStatus] | None = None,
    ) -> list[Reservation]: ...

    async def find_by_email_and_date(
        self, email: str, day: date, *, exclude_id: uuid.UUID | None = None
    ) -> list[Reservation]: ...

    async def find_by_token(self, token: str) -> Reservation | None: ...

    async def find_by_id(self, reservation_id: uuid.UUID) -> Reservation | None: ...

    async def count_active_on(
        self, day: date, *, exclude_id: uuid.UUID | None = None
    ) -> int: ...

    async def create_if_slot_free(self, reservation: Reservation) -> Reservation: ...

    async def update(
        self,
        reservation_id: uuid.UUID,
        values: Mapping[str, Any],
        *,
        only_if_status: Sequence[ReservationStatus] | None = None,
    ) -> Reservation | None: ...

    async def replace(
        self,
        old_id: uuid.UUID,
        old_values: Mapping[str, Any],
        new_reservation: Reservation,
    ) -> Reservation | None: ...

    async def delete(self, reservation_id: uuid.UUID) -> None: ...


class CalendarMirror(Protocol):
    """External calendar mirrored from the reservation store.

    Implementations convert between absolute instants and business wall-clock
    time; callers only ever see naive local datetimes.
    """

    def list_busy_intervals(self, day: date) -> list[BusyInterval]: ...

    def create_event(self, booking: BookingDetails) -> str: ...

    def delete_event(self, event_ref: str) -> None: ...


class NotificationGateway(Protocol):
    """Outbound customer notifications."""

    def send_confirmation(self, booking: BookingDetails) -> None: ...

    def send_cancellation(self, booking: BookingDetails, reason: str) -> None: ...

    def send_reschedule(
        self, previous: BookingDetails, booking: BookingDetails
    ) -> None: ...
