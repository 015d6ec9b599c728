"""Slot grid generation for a single business day."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta

from barberbook.core.errors import ValidationError

logger = logging.getLogger(__name__)

_SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _from_minutes(total: int) -> time:
    return time(total // 60, total % 60)


def generate_slots(
    day: date,
    work_start: time,
    work_end: time,
    slot_duration_minutes: int,
) -> list[time]:
    """Return the half-open grid of slot start times for ``day``.

    Slots start at ``work_start`` and step by ``slot_duration_minutes``; every
    slot ends by ``work_end``, so all starts are strictly before it. Seconds are
    ignored. An empty list is returned for an inverted window or a non-positive
    duration.

    A trailing partial slot is not offered: 09:00-10:45 with 30 minute slots
    yields 09:00, 09:30 and 10:00 only, so the grid always has
    ``floor(span / duration)`` entries. Earlier versions of the booking site
    also offered a final slot that overran closing time.
    """
    if slot_duration_minutes <= 0:
        return []
    start = _minutes(work_start)
    end = _minutes(work_end)
    if end <= start:
        return []

    slots: list[time] = []
    cursor = start
    while cursor + slot_duration_minutes <= end:
        slots.append(_from_minutes(cursor))
        cursor += slot_duration_minutes
    logger.debug("Generated %d slots for %s", len(slots), day.isoformat())
    return slots


def slot_end(day: date, slot: time, slot_duration_minutes: int) -> datetime:
    """Return the naive wall-clock end of a slot."""
    return datetime.combine(day, slot) + timedelta(minutes=slot_duration_minutes)


def format_slot(value: time) -> str:
    return value.strftime("%H:%M")


def parse_slot(value: str) -> time:
    """Parse an ``HH:MM`` string into a time."""
    match = _SLOT_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValidationError(f"Invalid time format {value!r}; expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))
