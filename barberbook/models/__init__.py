"""ORM models package export."""

from barberbook.models.admin_user import AdminUser
from barberbook.models.audit_event import AuditEvent
from barberbook.models.reservation import (
    ACTIVE_RESERVATION_STATUSES,
    Reservation,
    ReservationStatus,
)
from barberbook.models.service_offering import ServiceOffering

__all__ = [
    "ACTIVE_RESERVATION_STATUSES",
    "AdminUser",
    "AuditEvent",
    "Reservation",
    "ReservationStatus",
    "ServiceOffering",
]
