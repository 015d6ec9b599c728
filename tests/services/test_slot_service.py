"""Tests for slot grid generation."""

from __future__ import annotations

from datetime import date, time

import pytest

from barberbook.core.errors import ValidationError
from barberbook.services.slot_service import (
    format_slot,
    generate_slots,
    parse_slot,
)

DAY = date(2025, 6, 2)


def test_generates_half_open_grid() -> None:
    slots = generate_slots(DAY, time(9, 0), time(11, 0), 30)
    assert [format_slot(slot) for slot in slots] == ["09:00", "09:30", "10:00", "10:30"]


@pytest.mark.parametrize(
    ("start", "end", "duration"),
    [
        (time(9, 0), time(18, 0), 30),
        (time(9, 0), time(18, 0), 45),
        (time(8, 15), time(12, 50), 20),
        (time(0, 0), time(23, 59), 60),
    ],
)
def test_grid_properties(start: time, end: time, duration: int) -> None:
    slots = generate_slots(DAY, start, end, duration)
    span = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    assert len(slots) == span // duration
    assert slots[0] == start
    assert slots[-1] < end
    assert all(earlier < later for earlier, later in zip(slots, slots[1:]))


def test_grid_length_when_window_divides_evenly() -> None:
    slots = generate_slots(DAY, time(9, 0), time(18, 0), 30)
    assert len(slots) == 18
    assert slots[-1] == time(17, 30)


def test_slot_overrunning_closing_time_is_not_offered() -> None:
    slots = generate_slots(DAY, time(9, 0), time(10, 45), 30)
    assert slots == [time(9, 0), time(9, 30), time(10, 0)]


@pytest.mark.parametrize(
    ("start", "end", "duration"),
    [
        (time(11, 0), time(9, 0), 30),
        (time(9, 0), time(9, 0), 30),
        (time(9, 0), time(11, 0), 0),
        (time(9, 0), time(11, 0), -15),
        (time(9, 0), time(9, 20), 30),
    ],
)
def test_degenerate_inputs_yield_no_slots(start: time, end: time, duration: int) -> None:
    assert generate_slots(DAY, start, end, duration) == []


def test_seconds_are_ignored() -> None:
    slots = generate_slots(DAY, time(9, 0, 45), time(10, 0, 30), 30)
    assert slots == [time(9, 0), time(9, 30)]



def test_parse_slot_round_trips_format() -> None:
    assert parse_slot("09:30") == time(9, 30)
    assert format_slot(parse_slot("17:05")) == "17:05"


@pytest.mark.parametrize("raw", ["9:30", "24:00", "09:60", "0930", "", "ab:cd"])
def test_parse_slot_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_slot(raw)
