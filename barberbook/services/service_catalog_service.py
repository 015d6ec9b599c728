"""Operations for the service catalog."""
from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.core.errors import NotFound, ValidationError
from barberbook.models.service_offering import ServiceOffering
from barberbook.schemas.service_offering import (
    ServiceOfferingCreate,
    ServiceOfferingUpdate,
)


async def list_offerings(
    session: AsyncSession, *, include_inactive: bool = False
) -> list[ServiceOffering]:
    stmt: Select[tuple[ServiceOffering]] = select(ServiceOffering)
    if not include_inactive:
        stmt = stmt.where(ServiceOffering.active.is_(True))
    stmt = stmt.order_by(ServiceOffering.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_offering(
    session: AsyncSession, *, offering_id: uuid.UUID
) -> ServiceOffering:
    offering = await session.get(ServiceOffering, offering_id)
    if offering is None:
        raise NotFound("Service not found")
    return offering


async def _commit(session: AsyncSession, offering: ServiceOffering) -> ServiceOffering:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise ValidationError("A service with that name already exists") from exc
    await session.refresh(offering)
    return offering


async def create_offering(
    session: AsyncSession, *, payload: ServiceOfferingCreate
) -> ServiceOffering:
    offering = ServiceOffering(
        name=payload.name.strip(),
        description=payload.description,
        duration_minutes=payload.duration_minutes,
        price=Decimal(str(payload.price)),
        active=payload.active,
    )
    session.add(offering)
    return await _commit(session, offering)


async def update_offering(
    session: AsyncSession,
    *,
    offering_id: uuid.UUID,
    payload: ServiceOfferingUpdate,
) -> ServiceOffering:
    offering = await get_offering(session, offering_id=offering_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("price") is not None:
        data["price"] = Decimal(str(data["price"]))
    if data.get("name") is not None:
        data["name"] = data["name"].strip()
    for key, value in data.items():
        if value is None and key in {"name", "duration_minutes", "price", "active"}:
            continue
        setattr(offering, key, value)
    return await _commit(session, offering)


async def delete_offering(session: AsyncSession, *, offering_id: uuid.UUID) -> None:
    offering = await get_offering(session, offering_id=offering_id)
    await session.delete(offering)
    await session.commit()
