"""Pydantic schemas for reservations."""
from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, Field

from barberbook.models.reservation import Reservation, ReservationStatus
from barberbook.services.slot_service import format_slot

SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ReservationCreate(BaseModel):
    """Payload for booking a slot."""

    customer_name: str = Field(max_length=120)
    customer_email: str = Field(max_length=320)
    date: dt.date
    time: str = Field(pattern=SLOT_PATTERN, examples=["09:30"])


class CancelRequest(BaseModel):
    """Customer cancellation, authorized by the emailed token."""

    token: str = Field(min_length=1, max_length=64)
    reason: str | None = Field(default=None, max_length=500)


class ConfirmRequest(BaseModel):
    token: str = Field(min_length=1, max_length=64)


class RescheduleRequest(BaseModel):
    """Customer reschedule, authorized by the emailed token."""

    token: str = Field(min_length=1, max_length=64)
    date: dt.date
    time: str = Field(pattern=SLOT_PATTERN)


class AdminCancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class AdminRescheduleRequest(BaseModel):
    date: dt.date
    time: str = Field(pattern=SLOT_PATTERN)


class PublicReservationRead(BaseModel):
    """What a customer holding the cancel token may see."""

    id: uuid.UUID
    customer_name: str
    date: dt.date
    time: str
    status: ReservationStatus
    cancellation_reason: str | None = None

    @classmethod
    def from_model(cls, reservation: Reservation) -> "PublicReservationRead":
        return cls(
            id=reservation.id,
            customer_name=reservation.customer_name,
            date=reservation.slot_date,
            time=format_slot(reservation.slot_time),
            status=reservation.status,
            cancellation_reason=reservation.cancellation_reason,
        )


class ReservationRead(PublicReservationRead):
    """Full reservation view for admins."""

    customer_email: str
    external_event_ref: str | None = None
    rescheduled_from_id: uuid.UUID | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, reservation: Reservation) -> "ReservationRead":
        return cls(
            id=reservation.id,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            date=reservation.slot_date,
            time=format_slot(reservation.slot_time),
            status=reservation.status,
            cancellation_reason=reservation.cancellation_reason,
            external_event_ref=reservation.external_event_ref,
            rescheduled_from_id=reservation.rescheduled_from_id,
            created_at=reservation.created_at,
            updated_at=reservation.updated_at,
        )


class BookingReceipt(BaseModel):
    """Returned to the customer after a successful create or reschedule."""

    id: uuid.UUID
    status: ReservationStatus
    date: dt.date
    time: str
    cancel_token: str
    cancel_url: str
    previous_id: uuid.UUID | None = None
    warnings: list[str] = Field(default_factory=list)


class TransitionResponse(BaseModel):
    """Outcome of a cancel or confirm call."""

    ok: bool = True
    reservation: PublicReservationRead
    warnings: list[str] = Field(default_factory=list)
