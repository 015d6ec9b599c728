"""Reservation models."""
from __future__ import annotations

import enum
import uuid
from datetime import date, time

from sqlalchemy import Date, Enum, Index, String, Time, text
from sqlalchemy.orm import Mapped, mapped_column

from barberbook.db.base import Base
from barberbook.models.mixins import TimestampMixin


class ReservationStatus(str, enum.Enum):
    """Lifecycle states for reservations."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_RESERVATION_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


ACTIVE_RESERVATION_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}
)

_ACTIVE_SLOT_PREDICATE = "status IN ('PENDING', 'CONFIRMED')"


class Reservation(TimestampMixin, Base):
    """A customer's claim on one slot of the business day."""

    __tablename__ = "reservations"
    __table_args__ = (
        Index(
            "uq_reservations_active_slot",
            "slot_date",
            "slot_time",
            unique=True,
            sqlite_where=text(_ACTIVE_SLOT_PREDICATE),
            postgresql_where=text(_ACTIVE_SLOT_PREDICATE),
        ),
        Index("ix_reservations_email_date", "customer_email", "slot_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    customer_name: Mapped[str] = mapped_column(String(120), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    slot_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    slot_time: Mapped[time] = mapped_column(Time, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, name="reservationstatus"),
        default=ReservationStatus.CONFIRMED,
        nullable=False,
    )
    cancel_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    external_event_ref: Mapped[str | None] = mapped_column(String(255))
    cancellation_reason: Mapped[str | None] = mapped_column(String(500))
    rescheduled_from_id: Mapped[uuid.UUID | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return (
            f"Reservation(id={self.id}, slot={self.slot_date} {self.slot_time}, "
            f"status={self.status.value})"
        )
