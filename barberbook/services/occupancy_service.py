"""Resolve which slots of a day are already taken."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from barberbook.core.errors import DependencyUnavailable
from barberbook.core.settings import AvailabilityConfig
from barberbook.models.reservation import ACTIVE_RESERVATION_STATUSES, Reservation
from barberbook.services.contracts import (
    BusyInterval,
    CalendarMirror,
    ReservationStore,
)
from barberbook.services.side_effects import call_with_timeout
from barberbook.services.slot_service import generate_slots, slot_end

logger = logging.getLogger(__name__)


def expand_busy_intervals(
    day: date,
    intervals: Iterable[tuple[datetime, datetime] | BusyInterval],
    *,
    slots: Iterable[time],
    slot_duration_minutes: int,
) -> set[time]:
    """Return the slots of ``day`` that overlap any wall-clock busy interval.

    A slot is occupied when ``slot_start < end`` and ``slot_end > start``, so a
    partial overlap is enough and an interval ending exactly at a slot start
    does not touch it. Intervals are clipped to ``day``.
    """
    if slot_duration_minutes <= 0:
        return set()
    day_start = datetime.combine(day, time.min)
    day_end = day_start + timedelta(days=1)
    spans: list[tuple[datetime, datetime]] = []
    for start, end, *_ in intervals:
        start = max(start.replace(tzinfo=None), day_start)
        end = min(end.replace(tzinfo=None), day_end)
        if end > start:
            spans.append((start, end))

    occupied: set[time] = set()
    for slot in slots:
        begins = datetime.combine(day, slot)
        ends = slot_end(day, slot, slot_duration_minutes)
        if any(begins < end and ends > start for start, end in spans):
            occupied.add(slot)
    return occupied


class OccupancyResolver:
    """Union of store-held slots and external calendar busy time."""

    def __init__(
        self,
        config: AvailabilityConfig,
        store: ReservationStore,
        calendar: CalendarMirror | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.calendar = calendar

    async def resolve_occupied(
        self, day: date, *, exclude_reservation_id: uuid.UUID | None = None
    ) -> set[time]:
        reservations = await self.store.find_by_date_range(
            day, day, statuses=list(ACTIVE_RESERVATION_STATUSES)
        )
        occupied = {
            reservation.slot_time
            for reservation in reservations
            if reservation.id != exclude_reservation_id
        }
        if self.calendar is not None and self.config.calendar_busy_source:
            occupied |= await self._calendar_occupancy(
                day, reservations, exclude_reservation_id
            )
        return occupied

    async def _calendar_occupancy(
        self,
        day: date,
        reservations: Iterable[Reservation],
        exclude_reservation_id: uuid.UUID | None,
    ) -> set[time]:
        assert self.calendar is not None
        try:
            intervals = await call_with_timeout(
                self.calendar.list_busy_intervals,
                day,
                timeout=self.config.side_effect_timeout_seconds,
            )
        except Exception as exc:
            logger.warning("Calendar busy lookup failed for %s: %s", day, exc)
            raise DependencyUnavailable("Calendar is unavailable") from exc

        if exclude_reservation_id is not None:
            # the booking being moved must not block itself through its own event
            excluded_refs = {
                reservation.external_event_ref
                for reservation in reservations
                if reservation.id == exclude_reservation_id
                and reservation.external_event_ref
            }
            if excluded_refs:
                intervals = [
                    interval
                    for interval in intervals
                    if not (
                        isinstance(interval, BusyInterval)
                        and interval.event_ref in excluded_refs
                    )
                ]
        return expand_busy_intervals(
            day,
            intervals,
            slots=generate_slots(
                day,
                self.config.work_start,
                self.config.work_end,
                self.config.slot_duration_minutes,
            ),
            slot_duration_minutes=self.config.slot_duration_minutes,
        )
