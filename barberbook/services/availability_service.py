"""Bookable slots for a business day."""

from __future__ import annotations

import logging
import uuid
from datetime import date, time

from barberbook.core.settings import AvailabilityConfig
from barberbook.services.contracts import ReservationStore
from barberbook.services.occupancy_service import OccupancyResolver
from barberbook.services.slot_service import generate_slots

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Combine the business calendar, slot grid, occupancy and daily cap."""

    def __init__(
        self,
        config: AvailabilityConfig,
        store: ReservationStore,
        occupancy: OccupancyResolver,
    ) -> None:
        self.config = config
        self.store = store
        self.occupancy = occupancy

    def is_open(self, day: date) -> bool:
        """Return whether the shop takes bookings on ``day``."""
        return (
            day.isoweekday() in self.config.work_days
            and day not in self.config.holidays
        )

    def grid(self, day: date) -> list[time]:
        return generate_slots(
            day,
            self.config.work_start,
            self.config.work_end,
            self.config.slot_duration_minutes,
        )

    async def get_availability(
        self, day: date, *, exclude_reservation_id: uuid.UUID | None = None
    ) -> list[time]:
        """Return free slot start times for ``day`` in chronological order.

        Closed days and days at their reservation cap yield an empty list, and
        the result never holds more entries than the day has capacity left.
        ``exclude_reservation_id`` treats one booking as already released, which
        lets a customer move a booking within a full day.
        """
        if not self.is_open(day):
            logger.debug("Closed on %s; no availability", day)
            return []

        remaining = await self.remaining_capacity(
            day, exclude_reservation_id=exclude_reservation_id
        )
        if remaining <= 0:
            logger.debug("Daily cap reached on %s", day)
            return []

        free = await self.free_slots(
            day, exclude_reservation_id=exclude_reservation_id
        )
        return free[:remaining]

    async def remaining_capacity(
        self, day: date, *, exclude_reservation_id: uuid.UUID | None = None
    ) -> int:
        existing = await self.store.count_active_on(
            day, exclude_id=exclude_reservation_id
        )
        return self.config.max_reservations_per_day - existing

    async def free_slots(
        self, day: date, *, exclude_reservation_id: uuid.UUID | None = None
    ) -> list[time]:
        """Grid slots not held by a reservation or a busy calendar interval."""
        occupied = await self.occupancy.resolve_occupied(
            day, exclude_reservation_id=exclude_reservation_id
        )
        return [slot for slot in self.grid(day) if slot not in occupied]

    async def is_available(
        self,
        day: date,
        slot: time,
        *,
        exclude_reservation_id: uuid.UUID | None = None,
    ) -> bool:
        slots = await self.get_availability(
            day, exclude_reservation_id=exclude_reservation_id
        )
        return slot in slots
