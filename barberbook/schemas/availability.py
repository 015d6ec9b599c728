"""Availability schemas."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class AvailabilityRead(BaseModel):
    """Free slots for a date, formatted as ``HH:MM``."""

    date: dt.date
    slots: list[str] = Field(default_factory=list)
