"""Schemas for service offerings."""

from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ServiceOfferingBase(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=1024)
    duration_minutes: int = Field(gt=0, le=480)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    active: bool = True


class ServiceOfferingCreate(ServiceOfferingBase):
    pass


class ServiceOfferingUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = Field(default=None, max_length=1024)
    duration_minutes: int | None = Field(default=None, gt=0, le=480)
    price: Decimal | None = Field(default=None, ge=0)
    active: bool | None = None


class ServiceOfferingRead(ServiceOfferingBase):
    id: uuid.UUID

    model_config = ConfigDict(from_attributes=True)
