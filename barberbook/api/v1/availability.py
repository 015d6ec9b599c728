"""Public availability endpoint."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from barberbook.api import deps
from barberbook.api.rate_limit import DEFAULT_RATE_DEP
from barberbook.schemas.availability import AvailabilityRead
from barberbook.services.availability_service import AvailabilityService
from barberbook.services.slot_service import format_slot

router = APIRouter()


@router.get(
    "",
    response_model=AvailabilityRead,
    summary="List free slots for a date",
    dependencies=[DEFAULT_RATE_DEP],
)
async def get_availability(
    availability: Annotated[
        AvailabilityService, Depends(deps.get_availability_service)
    ],
    day: date = Query(alias="date", description="Business-local date, YYYY-MM-DD"),
) -> AvailabilityRead:
    slots = await availability.get_availability(day)
    return AvailabilityRead(date=day, slots=[format_slot(slot) for slot in slots])
