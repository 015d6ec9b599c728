"""Catalog of services offered by the shop."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from barberbook.db.base import Base
from barberbook.models.mixins import TimestampMixin


class ServiceOffering(TimestampMixin, Base):
    """A haircut, shave or other service shown to customers."""

    __tablename__ = "service_offerings"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(1024))
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
